from io import StringIO

import pytest
from django.core.management import call_command

from residentes.models import Hospital, HospitalSpecialtyGrade, ReviewQuestion, RotationReviewQuestion, User
from residentes.services import hospitals

pytestmark = pytest.mark.django_db


def test_populate_data_is_idempotent():
    call_command('populate_data', stdout=StringIO())
    counts = (Hospital.objects.count(), HospitalSpecialtyGrade.objects.count(), ReviewQuestion.objects.count(),
              RotationReviewQuestion.objects.count())
    call_command('populate_data', stdout=StringIO())
    assert (Hospital.objects.count(), HospitalSpecialtyGrade.objects.count(), ReviewQuestion.objects.count(),
            RotationReviewQuestion.objects.count()) == counts
    assert counts[3] == 3
    assert counts[1] > 0
    # teaching units are kept out of the initial list
    assert all(not h['name'].lower().startswith('ud') for h in hospitals.initial_hospitals(limit=100))


def test_ensure_test_users_resets_password():
    call_command('ensure_test_users', stdout=StringIO())
    user = User.objects.get(username='residente')
    user.set_password('otra')
    user.save()
    call_command('ensure_test_users', stdout=StringIO())
    user.refresh_from_db()
    assert user.check_password('123456')
    assert User.objects.get(username='moderador').is_staff


def test_refresh_caches(hospital):
    out = StringIO()
    call_command('refresh_caches', stdout=out)
    assert 'Refreshed 2 keys' in out.getvalue()
