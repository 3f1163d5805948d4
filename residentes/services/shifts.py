"""
On-call shifts (guardias), team calendars and the swap/purchase market.

Months are 1-based throughout.  A shift's ``type`` is derived from its
weekday and re-derived whenever the date changes.
"""
from __future__ import annotations

import calendar
import datetime as dt
import logging
from typing import Iterable, Optional

from django.db import transaction
from rest_framework.exceptions import ValidationError

from residentes.context import ActorContext
from residentes.exceptions import ConflictError, NotFoundError
from residentes.models import Shift, ShiftPurchaseRequest, ShiftSwapRequest
from residentes.services.audit import log_action

logger = logging.getLogger(__name__)


def shift_type_for(date: dt.date) -> str:
    weekday = date.weekday()
    if weekday == 6:
        return 'sunday'
    if weekday == 5:
        return 'saturday'
    return 'regular'


def _make_date(year, month, day) -> dt.date:
    try:
        return dt.date(int(year), int(month), int(day))
    except (TypeError, ValueError):
        raise ValidationError({'date': 'Fecha de guardia no válida'})


def format_shift(shift: Shift) -> dict:
    return {
        'id': shift.id,
        'user_id': shift.user_id,
        'date': shift.date.isoformat(),
        'type': shift.type,
        'notes': shift.notes,
        'price_eur': shift.price_eur,
        'created_at': shift.created_at.isoformat() if shift.created_at else None,
    }


def _own_shift(ctx: ActorContext, shift_id) -> Shift:
    shift = Shift.objects.filter(id=shift_id, user=ctx.user).first()
    if not shift:
        raise NotFoundError('Guardia no encontrada')
    return shift


def list_user_shifts(ctx: ActorContext) -> list[dict]:
    return [format_shift(s) for s in Shift.objects.filter(user=ctx.user).order_by('date', 'id')]


def create_shift(ctx: ActorContext, year, month, day, notes: Optional[str]=None, price_eur=None) -> dict:
    date = _make_date(year, month, day)
    shift = Shift.objects.create(
        user=ctx.user,
        date=date,
        type=shift_type_for(date),
        notes=notes or None,
        price_eur=price_eur,
    )
    logger.info('shift %s created for user %s on %s', shift.id, ctx.user_id, date)
    return format_shift(shift)


def update_shift(ctx: ActorContext, shift_id, **changes) -> dict:
    """Apply ``date``, ``notes`` and ``price_eur`` changes to an own shift."""
    shift = _own_shift(ctx, shift_id)
    fields = []
    if 'date' in changes and changes['date'] is not None:
        shift.date = changes['date']
        shift.type = shift_type_for(shift.date)
        fields += ['date', 'type']
    if 'notes' in changes:
        shift.notes = changes['notes'] or None
        fields.append('notes')
    if 'price_eur' in changes:
        shift.price_eur = changes['price_eur']
        fields.append('price_eur')
    if fields:
        shift.save(update_fields=fields)
    return format_shift(shift)


def delete_shift(ctx: ActorContext, shift_id) -> None:
    shift = _own_shift(ctx, shift_id)
    shift.delete()


def month_bounds(year: int, month: int) -> tuple[dt.date, dt.date]:
    if not 1 <= int(month) <= 12:
        raise ValidationError({'month': 'El mes debe estar entre 1 y 12'})
    last_day = calendar.monthrange(int(year), int(month))[1]
    return dt.date(int(year), int(month), 1), dt.date(int(year), int(month), last_day)


def list_team_shifts(ctx: ActorContext, hospital_id, specialty_id, month, year,
                     specialty_filters: Iterable=()) -> list[dict]:
    """Colleagues' shifts in the month, the caller's own shifts excluded.

    Colleagues share the hospital and either the given specialty or, when
    ``specialty_filters`` is not empty, any of those specialties.
    """
    if not hospital_id or not specialty_id:
        logger.warning('team shifts requested without hospital or specialty')
        return []
    start, end = month_bounds(year, month)
    qs = (
        Shift.objects.select_related('user')
        .filter(date__gte=start, date__lte=end, user__hospital_id=hospital_id)
        .exclude(user=ctx.user)
    )
    filters = [f for f in specialty_filters if f]
    if filters:
        qs = qs.filter(user__specialty_id__in=filters)
    else:
        qs = qs.filter(user__specialty_id=specialty_id)
    return [
        {
            **format_shift(s),
            'user_name': s.user.first_name or '',
            'user_surname': s.user.last_name or '',
        }
        for s in qs.order_by('date', 'id')
    ]


def format_swap(req: ShiftSwapRequest) -> dict:
    return {
        'id': req.id,
        'requester_shift_id': req.requester_shift_id,
        'target_shift_id': req.target_shift_id,
        'status': req.status,
        'created_at': req.created_at.isoformat() if req.created_at else None,
        'updated_at': req.updated_at.isoformat() if req.updated_at else None,
    }


def create_swap_request(ctx: ActorContext, requester_shift_id, target_shift_id) -> dict:
    requester_shift = _own_shift(ctx, requester_shift_id)
    target = Shift.objects.filter(id=target_shift_id).first()
    if not target:
        raise NotFoundError('Guardia no encontrada')
    if target.user_id == ctx.user_id:
        raise ValidationError({'targetShiftId': 'No puedes intercambiar una guardia contigo mismo'})
    req = ShiftSwapRequest.objects.create(requester_shift=requester_shift, target_shift=target)
    return format_swap(req)


def list_incoming_swap_requests(ctx: ActorContext) -> list[dict]:
    qs = (
        ShiftSwapRequest.objects
        .filter(target_shift__user=ctx.user, status=ShiftSwapRequest.STATUS_PENDING)
        .select_related('requester_shift__user', 'target_shift')
        .order_by('-created_at')
    )
    data = []
    for req in qs:
        row = format_swap(req)
        row['requester_shift'] = format_shift(req.requester_shift)
        row['target_shift'] = format_shift(req.target_shift)
        row['requester_name'] = req.requester_shift.user.get_full_name() or req.requester_shift.user.username
        data.append(row)
    return data


def respond_swap_request(ctx: ActorContext, request_id, accept: bool) -> dict:
    req = ShiftSwapRequest.objects.filter(id=request_id, target_shift__user=ctx.user).first()
    if not req:
        raise NotFoundError('Solicitud no encontrada')
    if req.status != ShiftSwapRequest.STATUS_PENDING:
        raise ConflictError('La solicitud ya fue respondida')
    req.status = ShiftSwapRequest.STATUS_ACCEPTED if accept else ShiftSwapRequest.STATUS_REJECTED
    req.save(update_fields=['status', 'updated_at'])
    log_action(user=ctx.user, action='shift_swap_' + req.status, object_type='shift_swap_request', object_id=req.id)
    return format_swap(req)


def format_purchase(req: ShiftPurchaseRequest) -> dict:
    return {
        'id': req.id,
        'shift_id': req.shift_id,
        'buyer_id': req.buyer_id,
        'owner_id': req.owner_id,
        'offered_price_eur': req.offered_price_eur,
        'status': req.status,
        'created_at': req.created_at.isoformat() if req.created_at else None,
        'updated_at': req.updated_at.isoformat() if req.updated_at else None,
    }


def create_purchase_request(ctx: ActorContext, shift_id, offered_price_eur=None) -> dict:
    """The caller offers to take over somebody else's shift."""
    shift = Shift.objects.filter(id=shift_id).first()
    if not shift:
        raise NotFoundError('Guardia no encontrada')
    if shift.user_id == ctx.user_id:
        raise ValidationError({'shiftId': 'No puedes comprar tu propia guardia'})
    req = ShiftPurchaseRequest.objects.create(
        shift=shift, buyer=ctx.user, owner_id=shift.user_id,
        offered_price_eur=offered_price_eur,
    )
    return format_purchase(req)


def list_incoming_purchase_requests(ctx: ActorContext) -> list[dict]:
    qs = (
        ShiftPurchaseRequest.objects
        .filter(owner=ctx.user, status=ShiftPurchaseRequest.STATUS_PENDING)
        .select_related('shift', 'buyer')
        .order_by('-created_at')
    )
    data = []
    for req in qs:
        row = format_purchase(req)
        row['shift'] = format_shift(req.shift)
        row['buyer_name'] = req.buyer.get_full_name() or req.buyer.username
        data.append(row)
    return data


def respond_purchase_request(ctx: ActorContext, request_id, status: str) -> dict:
    if status not in (ShiftPurchaseRequest.STATUS_ACCEPTED, ShiftPurchaseRequest.STATUS_REJECTED):
        raise ValidationError({'status': 'Estado no válido'})
    with transaction.atomic():
        req = ShiftPurchaseRequest.objects.select_for_update().filter(id=request_id, owner=ctx.user).first()
        if not req:
            raise NotFoundError('Solicitud no encontrada')
        if req.status != ShiftPurchaseRequest.STATUS_PENDING:
            raise ConflictError('La solicitud ya fue respondida')
        req.status = status
        req.save(update_fields=['status', 'updated_at'])
    log_action(user=ctx.user, action='shift_purchase_' + status.lower(), object_type='shift_purchase_request',
               object_id=req.id)
    return format_purchase(req)
