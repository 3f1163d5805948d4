import datetime as dt

import pytest
from rest_framework.test import APIClient

from residentes.models import AuditEvent, Shift, ShiftPurchaseRequest, Specialty, User
from residentes.services.shifts import month_bounds, shift_type_for

pytestmark = pytest.mark.django_db


@pytest.fixture
def colleague(hospital, specialty):
    return User.objects.create_user(username='marta', password='x', first_name='Marta', last_name='Ruiz',
                                    user_type='resident', hospital=hospital, specialty=specialty)


@pytest.fixture
def colleague_client(colleague):
    c = APIClient()
    c.force_authenticate(user=colleague)
    return c


def test_shift_type_for():
    assert shift_type_for(dt.date(2025, 3, 1)) == 'saturday'
    assert shift_type_for(dt.date(2025, 3, 2)) == 'sunday'
    assert shift_type_for(dt.date(2025, 3, 3)) == 'regular'


def test_month_bounds():
    assert month_bounds(2024, 2) == (dt.date(2024, 2, 1), dt.date(2024, 2, 29))
    assert month_bounds(2025, 12) == (dt.date(2025, 12, 1), dt.date(2025, 12, 31))


def test_create_uses_one_based_month(client):
    r = client.post('/api/shifts', {'year': 2025, 'month': 3, 'day': 2, 'notes': '<i>puerta</i>'}, format='json')
    assert r.status_code == 201
    data = r.json()['data']
    assert data['date'] == '2025-03-02'
    assert data['type'] == 'sunday'
    assert data['notes'] == 'puerta'


def test_invalid_date(client):
    r = client.post('/api/shifts', {'year': 2025, 'month': 2, 'day': 30}, format='json')
    assert r.status_code == 400


def test_update_rederives_type(client):
    shift_id = client.post('/api/shifts', {'year': 2025, 'month': 3, 'day': 3}, format='json').json()['data']['id']
    r = client.patch(f'/api/shifts/{shift_id}', {'date': '2025-03-08'}, format='json')
    assert r.json()['data']['type'] == 'saturday'


def test_students_cannot_manage_shifts(resident, client):
    resident.user_type = 'student'
    resident.save()
    assert client.get('/api/shifts').status_code == 403


def test_team_shifts(client, resident, colleague, hospital):
    Shift.objects.create(user=colleague, date=dt.date(2025, 3, 10))
    Shift.objects.create(user=colleague, date=dt.date(2025, 4, 1))
    Shift.objects.create(user=resident, date=dt.date(2025, 3, 11))
    other_spec = Specialty.objects.create(id='pediatria', name='Pediatría')
    outsider = User.objects.create_user(username='pablo', password='x', hospital=hospital, specialty=other_spec)
    Shift.objects.create(user=outsider, date=dt.date(2025, 3, 12))

    data = client.get('/api/shifts/team', {'month': 3, 'year': 2025}).json()['data']
    assert [(s['date'], s['user_name']) for s in data] == [('2025-03-10', 'Marta')]

    data = client.get('/api/shifts/team', {'month': 3, 'year': 2025,
                                           'specialties': 'cardiologia,pediatria'}).json()['data']
    assert [s['date'] for s in data] == ['2025-03-10', '2025-03-12']


def test_swap_flow(client, colleague_client, resident, colleague):
    mine = Shift.objects.create(user=resident, date=dt.date(2025, 3, 10))
    theirs = Shift.objects.create(user=colleague, date=dt.date(2025, 3, 14))

    r = client.post('/api/shifts/swap-requests', {'requesterShiftId': mine.id, 'targetShiftId': theirs.id},
                    format='json')
    assert r.status_code == 201
    req_id = r.json()['data']['id']

    incoming = colleague_client.get('/api/shifts/swap-requests').json()['data']
    assert [x['id'] for x in incoming] == [req_id]
    assert incoming[0]['requester_shift']['date'] == '2025-03-10'

    r = colleague_client.post(f'/api/shifts/swap-requests/{req_id}/respond', {'accept': True}, format='json')
    assert r.json()['data']['status'] == 'accepted'
    r = colleague_client.post(f'/api/shifts/swap-requests/{req_id}/respond', {'accept': False}, format='json')
    assert r.status_code == 409
    assert AuditEvent.objects.filter(action='shift_swap_accepted').exists()


def test_swap_with_own_shift_rejected(client, resident):
    a = Shift.objects.create(user=resident, date=dt.date(2025, 3, 10))
    b = Shift.objects.create(user=resident, date=dt.date(2025, 3, 11))
    r = client.post('/api/shifts/swap-requests', {'requesterShiftId': a.id, 'targetShiftId': b.id}, format='json')
    assert r.status_code == 400


def test_purchase_flow(client, colleague_client, colleague):
    theirs = Shift.objects.create(user=colleague, date=dt.date(2025, 3, 14), price_eur='250.00')
    r = client.post('/api/shifts/purchase-requests', {'shiftId': theirs.id, 'offeredPriceEur': '200.00'},
                    format='json')
    assert r.status_code == 201
    req_id = r.json()['data']['id']
    assert ShiftPurchaseRequest.objects.get(id=req_id).owner_id == colleague.id

    incoming = colleague_client.get('/api/shifts/purchase-requests').json()['data']
    assert incoming[0]['buyer_name'] == 'Ana'

    # only the owner may answer
    assert client.post(f'/api/shifts/purchase-requests/{req_id}/respond', {'status': 'ACCEPTED'},
                       format='json').status_code == 404
    r = colleague_client.post(f'/api/shifts/purchase-requests/{req_id}/respond', {'status': 'REJECTED'},
                              format='json')
    assert r.json()['data']['status'] == 'REJECTED'
    assert colleague_client.get('/api/shifts/purchase-requests').json()['data'] == []


def test_cannot_buy_own_shift(client, resident):
    mine = Shift.objects.create(user=resident, date=dt.date(2025, 3, 14))
    r = client.post('/api/shifts/purchase-requests', {'shiftId': mine.id}, format='json')
    assert r.status_code == 400


def test_zero_price_is_kept(client):
    r = client.post('/api/shifts', {'year': 2025, 'month': 3, 'day': 4, 'price_eur': '0.00'}, format='json')
    assert r.status_code == 201
    data = r.json()['data']
    assert data['price_eur'] is not None
    assert Shift.objects.get(id=data['id']).price_eur == 0


def test_zero_offer_is_kept(client, colleague):
    theirs = Shift.objects.create(user=colleague, date=dt.date(2025, 3, 15), price_eur='80.00')
    r = client.post('/api/shifts/purchase-requests', {'shiftId': theirs.id, 'offeredPriceEur': '0'}, format='json')
    assert r.status_code == 201
    assert ShiftPurchaseRequest.objects.get(id=r.json()['data']['id']).offered_price_eur == 0
