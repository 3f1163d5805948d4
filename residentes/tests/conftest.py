import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from residentes.context import context_for
from residentes.models import Hospital, Specialty, User


@pytest.fixture(autouse=True)
def _clear_cache():
    # throttling history and the directory documents live in the cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def hospital(db):
    return Hospital.objects.create(id='h-la-paz', name='Hospital Universitario La Paz',
                                   city='Madrid', region='Comunidad de Madrid')


@pytest.fixture
def specialty(db):
    return Specialty.objects.create(id='cardiologia', name='Cardiología')


@pytest.fixture
def resident(db, hospital, specialty):
    return User.objects.create_user(username='ana', password='P@ssw0rd1', first_name='Ana',
                                    user_type='resident', hospital=hospital, specialty=specialty,
                                    residency_year=2)


@pytest.fixture
def ctx(resident):
    return context_for(resident)


@pytest.fixture
def client(resident):
    c = APIClient()
    c.force_authenticate(user=resident)
    return c


@pytest.fixture
def anon_client():
    return APIClient()
