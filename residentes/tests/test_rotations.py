import datetime as dt

import pytest

from residentes.models import AuditEvent, ExternalRotation, User
from residentes.services.rotations import list_rotations

pytestmark = pytest.mark.django_db


def rotation(user, start, end=None):
    return ExternalRotation.objects.create(user=user, latitude=41.38, longitude=2.17, start_date=start, end_date=end)


def test_profile_roundtrip(client, resident, hospital):
    data = client.get('/api/me').json()['data']
    assert data['name'] == 'Ana'
    assert data['hospital_id'] == hospital.id
    assert data['resident_year'] == 2

    r = client.post('/api/me', {'surname': '<em>García</em>', 'resident_year': 3, 'phone': ' 600111222 '},
                    format='json')
    assert r.status_code == 200
    resident.refresh_from_db()
    assert (resident.last_name, resident.residency_year, resident.phone) == ('García', 3, '600111222')
    assert AuditEvent.objects.filter(action='profile_update').exists()


def test_profile_rejects_unknown_specialty(client):
    r = client.post('/api/me', {'speciality_id': 'astrologia'}, format='json')
    assert r.status_code == 400


def test_month_filter_overlap(resident):
    inside = rotation(resident, dt.date(2025, 2, 20), dt.date(2025, 3, 5))
    rotation(resident, dt.date(2025, 1, 1), dt.date(2025, 1, 31))
    ongoing = rotation(resident, dt.date(2025, 3, 31))
    later = rotation(resident, dt.date(2025, 4, 1), dt.date(2025, 4, 30))

    ids = {r['id'] for r in list_rotations(month_year='2025-03')}
    assert ids == {inside.id, ongoing.id}
    assert later.id not in ids


def test_month_filter_december():
    user = User.objects.create_user(username='z', password='x')
    r = rotation(user, dt.date(2024, 12, 31), dt.date(2025, 1, 2))
    assert [x['id'] for x in list_rotations(month_year='2024-12')] == [r.id]


def test_rotation_list_filters_by_specialty(client, resident, specialty):
    other = User.objects.create_user(username='z', password='x')
    rotation(resident, dt.date(2025, 3, 1))
    rotation(other, dt.date(2025, 3, 1))
    data = client.get('/api/rotations', {'specialtyId': specialty.id}).json()['data']
    assert [r['user_id'] for r in data] == [resident.id]
    assert data[0]['user_name'] == 'Ana'


def test_bad_month_format(client):
    assert client.get('/api/rotations', {'monthYear': '03/2025'}).status_code == 400


def test_my_rotations_crud(client):
    r = client.post('/api/me/rotations', {'latitude': 43.36, 'longitude': -5.85, 'start_date': '2025-05-01'},
                    format='json')
    assert r.status_code == 201
    rotation_id = r.json()['data']['id']
    assert r.json()['data']['end_date'] is None

    r = client.put(f'/api/me/rotations/{rotation_id}', {
        'latitude': 43.36, 'longitude': -5.85, 'start_date': '2025-05-01', 'end_date': '2025-04-01',
    }, format='json')
    assert r.status_code == 400

    r = client.put(f'/api/me/rotations/{rotation_id}', {
        'latitude': 43.36, 'longitude': -5.85, 'start_date': '2025-05-01', 'end_date': '2025-06-30',
    }, format='json')
    assert r.json()['data']['end_date'] == '2025-06-30'

    assert [x['id'] for x in client.get('/api/me/rotations').json()['data']] == [rotation_id]
    assert client.delete(f'/api/me/rotations/{rotation_id}').status_code == 200
    assert not ExternalRotation.objects.exists()


def test_phone_and_rotation(client, resident):
    r = client.post('/api/me/phone-and-rotation', {
        'phone': '611222333',
        'rotation': {'latitude': 39.47, 'longitude': -0.38, 'start_date': '2025-09-01'},
    }, format='json')
    assert r.status_code == 201
    resident.refresh_from_db()
    assert resident.phone == '611222333'
    assert ExternalRotation.objects.filter(user=resident).count() == 1


def test_phone_kept_unchanged_when_rotation_invalid(client, resident):
    r = client.post('/api/me/phone-and-rotation', {
        'phone': '611222333',
        'rotation': {'latitude': 39.47, 'longitude': -0.38, 'start_date': '2025-09-01', 'end_date': '2025-08-01'},
    }, format='json')
    assert r.status_code == 400
    resident.refresh_from_db()
    assert resident.phone == ''


@pytest.fixture
def student(resident):
    resident.user_type = 'student'
    resident.hospital = None
    resident.save()
    return resident


def test_resident_work_email_must_match_hospital_domain(client, student, hospital):
    hospital.email_domains = ['salud.madrid.org']
    hospital.save()
    r = client.post('/api/me', {'user_type': 'resident', 'hospital_id': hospital.id, 'work_email': 'me@gmail.com'},
                    format='json')
    assert r.status_code == 400
    assert 'work_email' in r.json()['error']['message']
    student.refresh_from_db()
    assert (student.user_type, student.hospital_id, student.work_email) == ('student', None, '')
    assert not AuditEvent.objects.filter(action='profile_update').exists()


def test_matching_work_email_domain_accepted(client, student, hospital):
    hospital.email_domains = '[" Salud.Madrid.org "]'
    hospital.save()
    r = client.post('/api/me', {'user_type': 'resident', 'hospital_id': hospital.id,
                                'work_email': 'ana@SALUD.madrid.org', 'city': 'Madrid'}, format='json')
    assert r.status_code == 200
    student.refresh_from_db()
    assert (student.user_type, student.work_email, student.city) == ('resident', 'ana@SALUD.madrid.org', 'Madrid')


def test_hospital_without_domains_accepts_any_work_email(client, resident):
    r = client.post('/api/me', {'work_email': 'ana@gmail.com'}, format='json')
    assert r.status_code == 200
    resident.refresh_from_db()
    assert resident.work_email == 'ana@gmail.com'


def test_phone_change_skips_work_email_check(client, resident, hospital):
    hospital.email_domains = ['salud.madrid.org']
    hospital.save()
    assert client.post('/api/me', {'phone': '600000000'}, format='json').status_code == 200
