"""Directory of verified residents that students can contact."""
from __future__ import annotations

from typing import Optional

from django.db.models import QuerySet

from residentes.models import User
from residentes.services.mir import collation_key


def _community() -> QuerySet:
    # a work email marks the resident as reachable
    return User.objects.filter(user_type='resident', is_active=True).exclude(work_email='')


def list_community_users(city: Optional[str]=None, specialty_id=None) -> list[dict]:
    qs = _community().filter(specialty__isnull=False).select_related('specialty', 'hospital')
    if city and city.strip():
        qs = qs.filter(city__iexact=city.strip())
    if specialty_id:
        qs = qs.filter(specialty_id=specialty_id)
    return [
        {
            'id': u.id,
            'name': u.first_name,
            'surname': u.last_name,
            'work_email': u.work_email,
            'city': u.city,
            'resident_year': u.residency_year,
            'hospital': {'id': u.hospital.id, 'name': u.hospital.name} if u.hospital else None,
            'speciality_id': u.specialty_id,
            'speciality': {'id': u.specialty.id, 'name': u.specialty.name},
        }
        for u in qs.order_by('first_name', 'last_name', 'id')
    ]


def list_cities() -> list[str]:
    """Distinct cities of reachable residents, sorted ignoring accents and case."""
    cities = {c.strip() for c in _community().exclude(city='').values_list('city', flat=True) if c.strip()}
    return sorted(cities, key=collation_key)
