import pytest

from residentes.models import Hospital, HospitalPreference

pytestmark = pytest.mark.django_db


@pytest.fixture
def hospitals(hospital):
    return [hospital] + [
        Hospital.objects.create(id=f'h-{n}', name=f'Hospital {n}', region='Aragón') for n in ('b', 'c')
    ]


def add(client, hospital_id, specialty_id='cardiologia'):
    return client.post('/api/preferences', {'hospitalId': hospital_id, 'specialtyId': specialty_id}, format='json')


def test_add_and_list(client, hospitals, specialty):
    for h in hospitals:
        assert add(client, h.id).status_code == 201
    data = client.get('/api/preferences').json()['data']
    assert [p['hospital_id'] for p in data] == ['h-la-paz', 'h-b', 'h-c']
    assert [p['position'] for p in data] == [0, 1, 2]
    assert data[0]['hospital']['name'] == 'Hospital Universitario La Paz'
    assert data[0]['specialty'] == {'id': 'cardiologia', 'name': 'Cardiología'}


def test_duplicate_is_conflict(client, hospital, specialty):
    add(client, hospital.id)
    r = add(client, hospital.id)
    assert r.status_code == 409
    assert HospitalPreference.objects.count() == 1


def test_unknown_hospital(client, specialty):
    assert add(client, 'h-nope').status_code == 404


def test_reorder(client, hospitals, specialty):
    ids = [add(client, h.id).json()['data']['id'] for h in hospitals]
    new_order = [ids[2], ids[0], ids[1]]
    r = client.post('/api/preferences/reorder', {'orderedIds': new_order}, format='json')
    assert r.status_code == 200
    data = client.get('/api/preferences').json()['data']
    assert [p['id'] for p in data] == new_order
    assert [p['position'] for p in data] == [0, 1, 2]


def test_reorder_requires_every_item(client, hospitals, specialty):
    ids = [add(client, h.id).json()['data']['id'] for h in hospitals]
    r = client.post('/api/preferences/reorder', {'orderedIds': ids[:2]}, format='json')
    assert r.status_code == 400


def test_remove(client, hospital, specialty):
    pref_id = add(client, hospital.id).json()['data']['id']
    assert client.delete(f'/api/preferences/{pref_id}').status_code == 200
    assert client.delete(f'/api/preferences/{pref_id}').status_code == 404
