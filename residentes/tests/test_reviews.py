import pytest
from rest_framework.test import APIClient

from residentes.models import AuditEvent, Review, ReviewQuestion, User

pytestmark = pytest.mark.django_db


@pytest.fixture
def questions(db):
    return {
        'docencia': ReviewQuestion.objects.create(text='Docencia', type='rating', position=0),
        'ambiente': ReviewQuestion.objects.create(text='Ambiente', type='rating', position=1),
        'consejo': ReviewQuestion.objects.create(text='Consejo', type='text', is_optional=True, position=2),
    }


@pytest.fixture
def moderator_client(db):
    moderator = User.objects.create_user(username='mod', password='x', is_staff=True, user_type='student')
    c = APIClient()
    c.force_authenticate(user=moderator)
    return c


def answers(questions):
    rows = [
        {'question_id': questions['docencia'].id, 'rating_value': 4},
        {'question_id': questions['ambiente'].id, 'rating_value': 5},
        {'question_id': questions['consejo'].id, 'text_value': '<b>Pregunta</b> mucho'},
    ]
    return rows


def write(client, questions, **extra):
    payload = {'answers': answers(questions), 'freeComment': '<b>Muy</b> recomendable', **extra}
    return client.post('/api/reviews/mine', payload, format='json')


def test_questions_listed_in_order(anon_client, questions):
    data = anon_client.get('/api/reviews/questions').json()['data']
    assert [q['text'] for q in data] == ['Docencia', 'Ambiente', 'Consejo']


def test_create_defaults_to_own_hospital_and_strips_html(client, questions, hospital, specialty):
    r = write(client, questions)
    assert r.status_code == 201
    data = r.json()['data']
    assert data['hospital_id'] == hospital.id
    assert data['speciality_id'] == specialty.id
    assert data['is_approved'] is False
    assert data['free_comment'] == 'Muy recomendable'
    texts = [a['text_value'] for a in data['answers'] if a['text_value']]
    assert texts == ['Pregunta mucho']


def test_required_answers(client, questions):
    payload = {'answers': [{'question_id': questions['docencia'].id, 'rating_value': 3}]}
    r = client.post('/api/reviews/mine', payload, format='json')
    assert r.status_code == 400
    assert Review.objects.count() == 0


def test_one_review_per_hospital_and_specialty(client, questions):
    write(client, questions)
    assert write(client, questions).status_code == 409


def test_unapproved_review_hidden_from_public(client, anon_client, moderator_client, questions):
    review_id = write(client, questions, isAnonymous=True).json()['data']['id']
    assert anon_client.get('/api/reviews').json()['data'] == []
    assert anon_client.get(f'/api/reviews/{review_id}').status_code == 404
    # the author still sees it
    assert client.get(f'/api/reviews/{review_id}').status_code == 200

    r = moderator_client.post(f'/api/reviews/{review_id}/approve')
    assert r.status_code == 200
    assert r.json()['data']['is_approved'] is True
    assert AuditEvent.objects.filter(action='review_approve', object_id=review_id).exists()

    summaries = anon_client.get('/api/reviews').json()['data']
    assert [(s['review_id'], s['review_count']) for s in summaries] == [(review_id, 1)]
    detail = anon_client.get(f'/api/reviews/{review_id}').json()['data']
    assert detail['user_id'] is None
    assert 'user' not in detail


def test_residents_cannot_approve(client, questions):
    review_id = write(client, questions).json()['data']['id']
    assert client.post(f'/api/reviews/{review_id}/approve').status_code == 403


def test_edit_sends_back_to_moderation(client, moderator_client, questions):
    review_id = write(client, questions).json()['data']['id']
    moderator_client.post(f'/api/reviews/{review_id}/approve')

    payload = {'answers': answers(questions), 'freeComment': 'Cambiado'}
    r = client.put(f'/api/reviews/mine/{review_id}', payload, format='json')
    assert r.status_code == 200
    review = Review.objects.get(id=review_id)
    assert review.is_approved is False
    assert review.approved_at is None
    assert review.free_comment == 'Cambiado'
    assert review.answers.count() == 3


def test_my_review_lookup_and_delete(client, questions, hospital, specialty):
    assert client.get('/api/reviews/mine').json()['data'] is None
    review_id = write(client, questions).json()['data']['id']
    assert client.get('/api/reviews/mine', {'hospitalId': hospital.id}).json()['data']['id'] == review_id
    assert client.delete(f'/api/reviews/mine/{review_id}').status_code == 200
    assert not Review.objects.exists()


def test_duplicate_answer_rejected(client, questions):
    rows = answers(questions) + [{'question_id': questions['docencia'].id, 'rating_value': 1}]
    r = client.post('/api/reviews/mine', {'answers': rows}, format='json')
    assert r.status_code == 400
    assert Review.objects.count() == 0


def test_rating_on_text_question_rejected(client, questions):
    rows = answers(questions)
    rows[2] = {'question_id': questions['consejo'].id, 'rating_value': 5}
    r = client.post('/api/reviews/mine', {'answers': rows}, format='json')
    assert r.status_code == 400
    assert Review.objects.count() == 0
