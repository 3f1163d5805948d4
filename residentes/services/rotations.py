"""
Resident profile and external rotations.

An external rotation is a period a resident spends at another centre,
pinned on a map by its coordinates.  A rotation without ``end_date`` is
ongoing.
"""
from __future__ import annotations

import datetime as dt
import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from residentes.context import ActorContext
from residentes.exceptions import NotFoundError
from residentes.models import ExternalRotation, Hospital, Specialty
from residentes.services.directory import normalize_email_domains

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ('first_name', 'last_name', 'phone', 'work_email', 'city', 'user_type', 'hospital_id',
                  'specialty_id', 'residency_year')


def format_profile(user) -> dict:
    return {
        'id': user.id,
        'username': user.username,
        'email': user.email,
        'name': user.first_name,
        'surname': user.last_name,
        'phone': user.phone,
        'work_email': user.work_email,
        'city': user.city,
        'user_type': user.user_type,
        'hospital_id': user.hospital_id,
        'speciality_id': user.specialty_id,
        'resident_year': user.residency_year,
    }


def get_profile(ctx: ActorContext) -> dict:
    return format_profile(ctx.user)


def hospital_email_domains(hospital: Hospital) -> list[str]:
    domains = {str(d).strip().lower() for d in normalize_email_domains(hospital.email_domains)}
    domains.discard('')
    return sorted(domains)


def email_domain_allowed(work_email: str, hospital: Hospital) -> bool:
    """True when ``work_email`` belongs to one of the hospital's mail domains, or it lists none."""
    domains = hospital_email_domains(hospital)
    return not domains or work_email.rpartition('@')[2].strip().lower() in domains


def _check_work_email(user, changes: dict) -> None:
    """Residents of a hospital with known mail domains must use one of them."""
    user_type = changes.get('user_type', user.user_type)
    hospital_id = changes['hospital_id'] if 'hospital_id' in changes else user.hospital_id
    work_email = (changes['work_email'] if 'work_email' in changes else user.work_email) or ''
    work_email = work_email.strip()
    if user_type != 'resident' or not hospital_id:
        return
    hospital = Hospital.objects.filter(id=hospital_id).first()
    if hospital is None or email_domain_allowed(work_email, hospital):
        return
    domains = ', '.join(hospital_email_domains(hospital))
    if not work_email:
        raise ValidationError({'work_email': f'Indica tu correo corporativo ({domains})'})
    raise ValidationError({'work_email': f'El correo corporativo debe pertenecer a: {domains}'})


def update_profile(ctx: ActorContext, **changes) -> dict:
    """Update the given profile fields.

    Unknown hospital/specialty ids are rejected, and so is a resident work
    email outside the hospital's mail domains.  Nothing is saved on error.
    """
    user = ctx.user
    if changes.get('hospital_id') and not Hospital.objects.filter(id=changes['hospital_id']).exists():
        raise ValidationError({'hospital_id': 'Hospital no encontrado'})
    if changes.get('specialty_id') and not Specialty.objects.filter(id=changes['specialty_id']).exists():
        raise ValidationError({'speciality_id': 'Especialidad no encontrada'})
    if changes.keys() & {'user_type', 'hospital_id', 'work_email'}:
        _check_work_email(user, changes)
    fields = []
    for field in PROFILE_FIELDS:
        if field not in changes:
            continue
        value = changes[field]
        if isinstance(value, str):
            value = value.strip()
        if field in ('hospital_id', 'specialty_id', 'residency_year'):
            value = value or None
        elif value is None:
            value = ''
        setattr(user, field, value)
        fields.append(field)
    if fields:
        user.save(update_fields=fields)
    return format_profile(user)


def format_rotation(rotation: ExternalRotation) -> dict:
    return {
        'id': rotation.id,
        'user_id': rotation.user_id,
        'latitude': rotation.latitude,
        'longitude': rotation.longitude,
        'city': rotation.city,
        'country': rotation.country,
        'start_date': rotation.start_date.isoformat(),
        'end_date': rotation.end_date.isoformat() if rotation.end_date else None,
        'created_at': rotation.created_at.isoformat() if rotation.created_at else None,
    }


def _parse_month(month_year: str) -> tuple[dt.date, dt.date]:
    try:
        year, month = (int(p) for p in month_year.split('-'))
        start = dt.date(year, month, 1)
    except (TypeError, ValueError):
        raise ValidationError({'monthYear': 'Formato de mes no válido, usa AAAA-MM'})
    next_month = dt.date(year + month // 12, month % 12 + 1, 1)
    return start, next_month - dt.timedelta(days=1)


def list_rotations(specialty_id=None, month_year: Optional[str]=None) -> list[dict]:
    """All rotations with their owner's contact data, newest first.

    ``month_year`` (``YYYY-MM``) keeps the rotations overlapping that month;
    an ongoing rotation is treated as ending today.
    """
    qs = ExternalRotation.objects.select_related('user').order_by('-created_at', '-id')
    if specialty_id:
        qs = qs.filter(user__specialty_id=specialty_id)
    rotations = list(qs)
    if month_year:
        start, end = _parse_month(month_year)
        today = timezone.localdate()
        rotations = [r for r in rotations if r.start_date <= end and (r.end_date or today) >= start]
    return [
        {
            **format_rotation(r),
            'user_name': r.user.first_name or '',
            'user_surname': r.user.last_name or '',
            'user_email': r.user.work_email or '',
            'user_phone': r.user.phone or '',
            'user_speciality_id': r.user.specialty_id or '',
        }
        for r in rotations
    ]


def list_user_rotations(ctx: ActorContext) -> list[dict]:
    qs = ExternalRotation.objects.filter(user=ctx.user).order_by('-start_date', '-id')
    return [format_rotation(r) for r in qs]


def _check_dates(start_date, end_date) -> None:
    if end_date and start_date and end_date < start_date:
        raise ValidationError({'end_date': 'La fecha de fin no puede ser anterior a la de inicio'})


def create_rotation(ctx: ActorContext, latitude, longitude, start_date, end_date=None, city: str='',
                    country: str='') -> dict:
    _check_dates(start_date, end_date)
    rotation = ExternalRotation.objects.create(
        user=ctx.user, latitude=latitude, longitude=longitude,
        start_date=start_date, end_date=end_date or None,
        city=(city or '').strip(), country=(country or '').strip(),
    )
    return format_rotation(rotation)


def _own_rotation(ctx: ActorContext, rotation_id) -> ExternalRotation:
    rotation = ExternalRotation.objects.filter(id=rotation_id, user=ctx.user).first()
    if not rotation:
        raise NotFoundError('Rotación no encontrada')
    return rotation


def update_rotation(ctx: ActorContext, rotation_id, latitude, longitude, start_date, end_date=None, city: str='',
                    country: str='') -> dict:
    rotation = _own_rotation(ctx, rotation_id)
    _check_dates(start_date, end_date)
    rotation.latitude = latitude
    rotation.longitude = longitude
    rotation.start_date = start_date
    rotation.end_date = end_date or None
    rotation.city = (city or '').strip()
    rotation.country = (country or '').strip()
    rotation.save(update_fields=['latitude', 'longitude', 'start_date', 'end_date', 'city', 'country'])
    return format_rotation(rotation)


def delete_rotation(ctx: ActorContext, rotation_id) -> None:
    _own_rotation(ctx, rotation_id).delete()


def update_phone_and_create_rotation(ctx: ActorContext, phone: str, rotation: dict) -> dict:
    """Save the contact phone, then create the rotation that needs it."""
    phone = (phone or '').strip()
    if not phone:
        raise ValidationError({'phone': 'El teléfono es obligatorio'})
    with transaction.atomic():
        ctx.user.phone = phone
        ctx.user.save(update_fields=['phone'])
        created = create_rotation(ctx, **rotation)
    logger.info('user %s updated phone and created rotation %s', ctx.user_id, created['id'])
    return created
