import datetime as dt

import pytest
from rest_framework.test import APIClient

from residentes.models import AuditEvent, ExternalRotation, RotationReview, RotationReviewQuestion, User

pytestmark = pytest.mark.django_db


@pytest.fixture
def questions(db):
    return {
        'acogida': RotationReviewQuestion.objects.create(text='Acogida', type='rating', position=0),
        'consejo': RotationReviewQuestion.objects.create(text='Consejo', type='text', is_optional=True,
                                                         position=1),
    }


@pytest.fixture
def rotation(resident):
    return ExternalRotation.objects.create(user=resident, latitude=51.5, longitude=-0.12, city='London',
                                           country='Reino Unido', start_date=dt.date(2025, 4, 1),
                                           end_date=dt.date(2025, 6, 30))


@pytest.fixture
def moderator_client(db):
    moderator = User.objects.create_user(username='mod', password='x', is_staff=True, user_type='student')
    c = APIClient()
    c.force_authenticate(user=moderator)
    return c


def write(client, rotation, questions, **extra):
    payload = {
        'rotationId': rotation.id,
        'externalHospitalName': '<b>St Thomas</b> Hospital',
        'answers': [
            {'question_id': questions['acogida'].id, 'rating_value': 5},
            {'question_id': questions['consejo'].id, 'text_value': 'Llevad paraguas'},
        ],
        **extra,
    }
    return client.post('/api/rotation-reviews/mine', payload, format='json')


def test_questionnaire_is_separate(anon_client, questions):
    data = anon_client.get('/api/rotation-reviews/questions').json()['data']
    assert [q['text'] for q in data] == ['Acogida', 'Consejo']


def test_create_copies_rotation_dates_and_place(client, rotation, questions):
    r = write(client, rotation, questions)
    assert r.status_code == 201
    data = r.json()['data']
    assert data['external_hospital_name'] == 'St Thomas Hospital'
    assert (data['city'], data['country']) == ('London', 'Reino Unido')
    assert (data['start_date'], data['end_date']) == ('2025-04-01', '2025-06-30')
    assert data['is_approved'] is False
    assert [a['rating_value'] for a in data['answers']] == [5, None]
    assert AuditEvent.objects.filter(action='rotation_review_create').exists()


def test_existing_review_lookup_and_conflict(client, rotation, questions):
    assert client.get(f'/api/rotation-reviews/mine?rotationId={rotation.id}').json()['data'] is None
    write(client, rotation, questions)
    assert client.get(f'/api/rotation-reviews/mine?rotationId={rotation.id}').json()['data'] is not None
    assert write(client, rotation, questions).status_code == 409


def test_only_own_rotations_can_be_reviewed(client, questions):
    other = User.objects.create_user(username='luis', password='x')
    theirs = ExternalRotation.objects.create(user=other, latitude=0, longitude=0, start_date=dt.date(2025, 1, 1))
    assert write(client, theirs, questions).status_code == 404


def test_required_and_duplicate_answers(client, rotation, questions):
    payload = {'rotationId': rotation.id, 'externalHospitalName': 'X',
               'answers': [{'question_id': questions['consejo'].id, 'text_value': 'solo texto'}]}
    assert client.post('/api/rotation-reviews/mine', payload, format='json').status_code == 400

    payload['answers'] = [{'question_id': questions['acogida'].id, 'rating_value': 4}] * 2
    assert client.post('/api/rotation-reviews/mine', payload, format='json').status_code == 400
    assert RotationReview.objects.count() == 0


def test_listing_shows_approved_and_own(client, anon_client, moderator_client, rotation, questions):
    review_id = write(client, rotation, questions).json()['data']['id']
    assert anon_client.get('/api/rotation-reviews').json()['data'] == []
    assert anon_client.get(f'/api/rotation-reviews/{review_id}').status_code == 404
    assert [r['id'] for r in client.get('/api/rotation-reviews').json()['data']] == [review_id]

    assert moderator_client.post(f'/api/rotation-reviews/{review_id}/approve').status_code == 200
    listed = anon_client.get('/api/rotation-reviews', {'country': 'reino unido'}).json()['data']
    assert [r['id'] for r in listed] == [review_id]
    assert anon_client.get('/api/rotation-reviews?city=Paris').json()['data'] == []
    detail = anon_client.get(f'/api/rotation-reviews/{review_id}').json()['data']
    assert detail['user']['name'] == 'Ana'
    assert len(detail['answers']) == 2


def test_listing_newest_first(client, resident, questions):
    first = ExternalRotation.objects.create(user=resident, latitude=0, longitude=0, start_date=dt.date(2024, 1, 1))
    second = ExternalRotation.objects.create(user=resident, latitude=0, longitude=0, start_date=dt.date(2024, 3, 1))
    a = write(client, first, questions).json()['data']['id']
    b = write(client, second, questions).json()['data']['id']
    assert [r['id'] for r in client.get('/api/rotation-reviews').json()['data']] == [b, a]


def test_update_resets_approval_and_replaces_answers(client, moderator_client, rotation, questions):
    review_id = write(client, rotation, questions, isAnonymous=True).json()['data']['id']
    moderator_client.post(f'/api/rotation-reviews/{review_id}/approve')

    r = client.put(f'/api/rotation-reviews/mine/{review_id}', {
        'answers': [{'question_id': questions['acogida'].id, 'rating_value': 2}],
        'freeComment': 'Mejor en verano',
    }, format='json')
    data = r.json()['data']
    assert data['is_approved'] is False
    assert data['is_anonymous'] is False
    assert data['external_hospital_name'] == 'St Thomas Hospital'
    assert [a['rating_value'] for a in data['answers']] == [2]


def test_delete_is_owner_scoped(client, rotation, questions):
    review_id = write(client, rotation, questions).json()['data']['id']
    intruder = APIClient()
    intruder.force_authenticate(user=User.objects.create_user(username='luis', password='x'))
    assert intruder.delete(f'/api/rotation-reviews/mine/{review_id}').status_code == 404
    assert client.delete(f'/api/rotation-reviews/mine/{review_id}').status_code == 200
    assert not RotationReview.objects.exists()
