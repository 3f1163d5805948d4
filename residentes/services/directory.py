"""
Static hospital directory.

The hospital list and the hospital/specialty offering list are published as
two static JSON arrays.  They are fetched with ``requests`` and kept in the
Django cache; when no URL is configured the same shapes are built from the
database so that development and tests need no network access.
"""
from __future__ import annotations

import json
import logging
from typing import Optional

import requests
from django.conf import settings
from django.core.cache import cache

from residentes.exceptions import UpstreamError
from residentes.models import Hospital, HospitalSpecialty

logger = logging.getLogger(__name__)

HOSPITALS_KEY = 'directory:hospitals'
HOSPITAL_SPECIALTY_KEY = 'directory:hospital_specialty'


def normalize_email_domains(value) -> list[str]:
    """``email_domain`` arrives as a list, a JSON encoded list or a plain string."""
    if isinstance(value, list):
        return value
    if isinstance(value, str) and value:
        try:
            parsed = json.loads(value)
        except ValueError:
            return [value]
        return parsed if isinstance(parsed, list) else [value]
    return []


def _fetch_json(url: str) -> list:
    try:
        response = requests.get(url, timeout=settings.DIRECTORY_TIMEOUT)
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as exc:
        logger.error('directory fetch failed for %s: %s', url, exc)
        raise UpstreamError('No se pudo obtener el directorio de hospitales') from exc
    if not isinstance(data, list):
        logger.error('directory document %s is not a JSON array', url)
        raise UpstreamError('El directorio de hospitales tiene un formato inesperado')
    return data


def _hospitals_from_db() -> list[dict]:
    rows = []
    for h in Hospital.objects.order_by('name'):
        rows.append({
            'id': h.id,
            'name': h.name,
            'city': h.city,
            'region': h.region,
            'coordinates': (
                {'latitude': h.latitude, 'longitude': h.longitude}
                if h.latitude is not None and h.longitude is not None else None
            ),
            'email_domain': h.email_domains,
            'salary_r1_fixed_eur': h.salary_r1_fixed_eur,
            'salary_r2_fixed_eur': h.salary_r2_fixed_eur,
            'salary_r3_fixed_eur': h.salary_r3_fixed_eur,
            'salary_r4_fixed_eur': h.salary_r4_fixed_eur,
        })
    return rows


def _hospital_specialty_from_db() -> list[dict]:
    return [
        {'hospital_id': hospital_id, 'speciality_id': specialty_id}
        for hospital_id, specialty_id in HospitalSpecialty.objects.values_list('hospital_id', 'specialty_id')
    ]


def _load(key: str, url: Optional[str], fallback) -> list:
    data = cache.get(key)
    if data is not None:
        return data
    if url:
        logger.info('fetching directory document %s', url)
        data = _fetch_json(url)
    else:
        data = fallback()
    cache.set(key, data, settings.DIRECTORY_CACHE_SECONDS)
    return data


def _raw_hospitals() -> list:
    return _load(HOSPITALS_KEY, settings.HOSPITALS_JSON_URL, _hospitals_from_db)


def _raw_hospital_specialty() -> list:
    return _load(HOSPITAL_SPECIALTY_KEY, settings.HOSPITAL_SPECIALTY_JSON_URL, _hospital_specialty_from_db)


def get_hospitals() -> list[dict]:
    hospitals = []
    for h in _raw_hospitals():
        hospitals.append({
            'id': h.get('id'),
            'name': h.get('name'),
            'city': h.get('city'),
            'region': h.get('region'),
            'coordinates': h.get('coordinates'),
            'salary_r1_fixed_eur': h.get('salary_r1_fixed_eur'),
            'salary_r2_fixed_eur': h.get('salary_r2_fixed_eur'),
            'salary_r3_fixed_eur': h.get('salary_r3_fixed_eur'),
            'salary_r4_fixed_eur': h.get('salary_r4_fixed_eur'),
            'email_domain': normalize_email_domains(h.get('email_domain')),
        })
    return hospitals


def get_hospital_specialty_map() -> dict[str, list[str]]:
    """Hospital id -> ids of the specialties it offers."""
    mapping: dict[str, list[str]] = {}
    for item in _raw_hospital_specialty():
        hospital_id = item.get('hospital_id')
        if hospital_id:
            mapping.setdefault(hospital_id, []).append(item.get('speciality_id'))
    return mapping


def get_specialty_counts() -> dict[str, int]:
    return {hospital_id: len(ids) for hospital_id, ids in get_hospital_specialty_map().items()}


def get_hospital_ids_by_specialty(specialty_id) -> list[str]:
    if not specialty_id:
        return []
    return [
        item.get('hospital_id')
        for item in _raw_hospital_specialty()
        if item.get('speciality_id') == specialty_id
    ]


def refresh_directory() -> list[str]:
    """Drop the cached documents and load them again; returns the keys warmed."""
    cache.delete_many([HOSPITALS_KEY, HOSPITAL_SPECIALTY_KEY])
    _raw_hospitals()
    _raw_hospital_specialty()
    return [HOSPITALS_KEY, HOSPITAL_SPECIALTY_KEY]
