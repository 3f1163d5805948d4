"""
Shift (guardia) endpoints: own calendar, team calendar and the
swap/purchase requests between colleagues.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..context import resolve_current_user
from ..permissions import IsResident
from ..serializers.shifts import (
    PurchaseRequestCreateSerializer,
    PurchaseResponseSerializer,
    ShiftCreateSerializer,
    ShiftUpdateSerializer,
    SwapRequestCreateSerializer,
    SwapResponseSerializer,
    TeamShiftsQuerySerializer,
)
from ..services import shifts


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsResident])
def shift_list(request):
    ctx = resolve_current_user(request)
    if request.method == 'GET':
        return Response({'ok': True, 'data': shifts.list_user_shifts(ctx)})

    s = ShiftCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    shift = shifts.create_shift(ctx, v['year'], v['month'], v['day'],
                                notes=v.get('notes'), price_eur=v.get('price_eur'))
    return Response({'ok': True, 'data': shift}, status=201)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsResident])
def shift_detail(request, shift_id: int):
    ctx = resolve_current_user(request)
    if request.method == 'DELETE':
        shifts.delete_shift(ctx, shift_id)
        return Response({'ok': True})

    s = ShiftUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    return Response({'ok': True, 'data': shifts.update_shift(ctx, shift_id, **s.validated_data)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsResident])
def team_shifts(request):
    """Colleagues' shifts for ``?month=&year=``.

    Hospital and specialty default to the caller's own; ``specialties``
    is an optional comma separated list widening the team.
    """
    ctx = resolve_current_user(request)
    s = TeamShiftsQuerySerializer(data=request.query_params)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    data = shifts.list_team_shifts(
        ctx,
        v.get('hospitalId') or ctx.user.hospital_id,
        v.get('specialtyId') or ctx.user.specialty_id,
        v['month'], v['year'],
        specialty_filters=v.get('specialties') or (),
    )
    return Response({'ok': True, 'data': data})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsResident])
def swap_requests(request):
    """``GET`` pending requests targeting my shifts; ``POST`` proposes a swap."""
    ctx = resolve_current_user(request)
    if request.method == 'GET':
        return Response({'ok': True, 'data': shifts.list_incoming_swap_requests(ctx)})

    s = SwapRequestCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    req = shifts.create_swap_request(ctx, s.validated_data['requesterShiftId'], s.validated_data['targetShiftId'])
    return Response({'ok': True, 'data': req}, status=201)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsResident])
def swap_request_respond(request, request_id: int):
    ctx = resolve_current_user(request)
    s = SwapResponseSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    return Response({'ok': True, 'data': shifts.respond_swap_request(ctx, request_id, s.validated_data['accept'])})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsResident])
def purchase_requests(request):
    """``GET`` pending offers for my shifts; ``POST`` offers to take a shift."""
    ctx = resolve_current_user(request)
    if request.method == 'GET':
        return Response({'ok': True, 'data': shifts.list_incoming_purchase_requests(ctx)})

    s = PurchaseRequestCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    req = shifts.create_purchase_request(ctx, s.validated_data['shiftId'], s.validated_data.get('offeredPriceEur'))
    return Response({'ok': True, 'data': req}, status=201)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsResident])
def purchase_request_respond(request, request_id: int):
    ctx = resolve_current_user(request)
    s = PurchaseResponseSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    return Response({'ok': True, 'data': shifts.respond_purchase_request(ctx, request_id, s.validated_data['status'])})
