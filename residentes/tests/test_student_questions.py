import pytest
from rest_framework.test import APIClient

from residentes.models import Review, StudentAnswer, StudentQuestion, User

pytestmark = pytest.mark.django_db


@pytest.fixture
def student(db):
    return User.objects.create_user(username='lucia', password='x', first_name='Lucía', user_type='student')


@pytest.fixture
def student_client(student):
    c = APIClient()
    c.force_authenticate(user=student)
    return c


@pytest.fixture
def reviewed(resident, hospital, specialty):
    return Review.objects.create(user=resident, hospital=hospital, specialty=specialty)


def ask(client, hospital, specialty, text='¿Cómo son las guardias?'):
    return client.post('/api/student-questions', {'hospitalId': hospital.id, 'specialtyId': specialty.id,
                                                   'questionText': text}, format='json')


def listing(client, hospital, specialty):
    r = client.get('/api/student-questions', {'hospitalId': hospital.id, 'specialtyId': specialty.id})
    return r.json()['data']


def test_student_asks_and_anyone_reads(student_client, anon_client, hospital, specialty):
    r = ask(student_client, hospital, specialty, text='<b>¿Hay</b> buen ambiente?')
    assert r.status_code == 201
    assert r.json()['data']['question_text'] == '¿Hay buen ambiente?'

    data = listing(anon_client, hospital, specialty)
    assert [q['user']['name'] for q in data] == ['Lucía']
    assert data[0]['answers'] == []


def test_anonymous_cannot_ask(anon_client, hospital, specialty):
    assert ask(anon_client, hospital, specialty).status_code == 401
    assert not StudentQuestion.objects.exists()


def test_list_is_newest_first(student_client, anon_client, hospital, specialty):
    ask(student_client, hospital, specialty, text='primera')
    ask(student_client, hospital, specialty, text='segunda')
    assert [q['question_text'] for q in listing(anon_client, hospital, specialty)] == ['segunda', 'primera']


def test_only_reviewers_may_answer(client, student_client, resident, hospital, specialty):
    question_id = ask(student_client, hospital, specialty).json()['data']['id']
    assert client.get('/api/student-questions/can-answer',
                      {'hospitalId': hospital.id, 'specialtyId': specialty.id}).json()['data'] == {'can_answer': False}
    assert client.post(f'/api/student-questions/{question_id}/answers', {'answerText': 'Duras'},
                       format='json').status_code == 403

    Review.objects.create(user=resident, hospital=hospital, specialty=specialty)
    assert client.get('/api/student-questions/can-answer',
                      {'hospitalId': hospital.id, 'specialtyId': specialty.id}).json()['data'] == {'can_answer': True}
    r = client.post(f'/api/student-questions/{question_id}/answers', {'answerText': 'Duras'}, format='json')
    assert r.status_code == 201

    answers = listing(student_client, hospital, specialty)[0]['answers']
    assert [(a['answer_text'], a['user']['name']) for a in answers] == [('Duras', 'Ana')]


def test_edit_and_delete_are_owner_scoped(client, student_client, reviewed, hospital, specialty):
    question_id = ask(student_client, hospital, specialty).json()['data']['id']
    answer_id = client.post(f'/api/student-questions/{question_id}/answers', {'answerText': 'Sí'},
                            format='json').json()['data']['id']

    assert client.put(f'/api/student-questions/{question_id}', {'questionText': 'otra'},
                      format='json').status_code == 404
    assert student_client.put(f'/api/student-answers/{answer_id}', {'answerText': 'No'},
                              format='json').status_code == 404

    r = student_client.put(f'/api/student-questions/{question_id}', {'questionText': 'editada'}, format='json')
    assert r.json()['data']['question_text'] == 'editada'
    assert len(r.json()['data']['answers']) == 1
    r = client.put(f'/api/student-answers/{answer_id}', {'answerText': 'Depende'}, format='json')
    assert r.json()['data']['answer_text'] == 'Depende'

    assert client.delete(f'/api/student-answers/{answer_id}').status_code == 200
    assert not StudentAnswer.objects.exists()
    assert student_client.delete(f'/api/student-questions/{question_id}').status_code == 200
    assert not StudentQuestion.objects.exists()


def test_blank_question_rejected(student_client, hospital, specialty):
    assert ask(student_client, hospital, specialty, text='<b></b>  ').status_code == 400


def test_unknown_hospital(student_client, specialty):
    r = student_client.post('/api/student-questions', {'hospitalId': 'nope', 'specialtyId': specialty.id,
                                                       'questionText': 'hola'}, format='json')
    assert r.status_code == 404
