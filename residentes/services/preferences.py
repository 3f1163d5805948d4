"""Ranked hospital/specialty wish list of a user."""
from typing import Sequence

from django.db import IntegrityError, transaction

from residentes.context import ActorContext
from residentes.exceptions import ConflictError, NotFoundError
from residentes.models import Hospital, HospitalPreference, Specialty
from residentes.services import ordering


def format_preference(pref: HospitalPreference) -> dict:
    return {
        'id': pref.id,
        'user_id': pref.user_id,
        'hospital_id': pref.hospital_id,
        'speciality_id': pref.specialty_id,
        'position': pref.position,
        'created_at': pref.created_at.isoformat() if pref.created_at else None,
        'hospital': {
            'id': pref.hospital.id,
            'name': pref.hospital.name,
            'city': pref.hospital.city,
            'region': pref.hospital.region,
        },
        'specialty': {'id': pref.specialty.id, 'name': pref.specialty.name},
    }


def _queryset(ctx: ActorContext):
    return HospitalPreference.objects.filter(user=ctx.user)


def list_preferences(ctx: ActorContext) -> list[dict]:
    qs = _queryset(ctx).select_related('hospital', 'specialty').order_by('position', 'created_at', 'id')
    return [format_preference(p) for p in qs]


def add_preference(ctx: ActorContext, hospital_id, specialty_id) -> dict:
    hospital = Hospital.objects.filter(id=hospital_id).first()
    if not hospital:
        raise NotFoundError('Hospital no encontrado')
    specialty = Specialty.objects.filter(id=specialty_id).first()
    if not specialty:
        raise NotFoundError('Especialidad no encontrada')
    if _queryset(ctx).filter(hospital=hospital, specialty=specialty).exists():
        raise ConflictError('Esta preferencia ya está en tu lista')
    try:
        with transaction.atomic():
            pref = HospitalPreference.objects.create(
                user=ctx.user, hospital=hospital, specialty=specialty,
                position=ordering.next_position(_queryset(ctx)),
            )
    except IntegrityError:
        raise ConflictError('Esta preferencia ya está en tu lista')
    return format_preference(pref)


def remove_preference(ctx: ActorContext, preference_id) -> None:
    deleted, _ = _queryset(ctx).filter(id=preference_id).delete()
    if not deleted:
        raise NotFoundError('Preferencia no encontrada')


def reorder_preferences(ctx: ActorContext, ordered_ids: Sequence) -> list[dict]:
    qs = _queryset(ctx)
    current = list(qs.order_by('position', 'created_at', 'id').values_list('id', flat=True))
    pairs = ordering.plan_positions(current, ordered_ids)
    ordering.apply_positions(qs, pairs)
    return [{'id': pk, 'position': position} for pk, position in pairs]
