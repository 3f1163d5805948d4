"""
Profile (``/api/me``) and external rotation endpoints.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..context import resolve_current_user
from ..serializers.rotations import (
    PhoneAndRotationSerializer,
    ProfileUpdateSerializer,
    RotationQuerySerializer,
    RotationSerializer,
)
from ..services import rotations
from ..services.audit import log_action


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def me(request):
    ctx = resolve_current_user(request)
    if request.method == 'GET':
        return Response({'ok': True, 'data': rotations.get_profile(ctx)})

    s = ProfileUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    profile = rotations.update_profile(ctx, **s.to_service_kwargs())
    log_action(user=ctx.user, action='profile_update', object_type='user', object_id=ctx.user_id,
               detail={'fields': sorted(s.validated_data)})
    return Response({'ok': True, 'data': profile})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def rotation_list(request):
    """Everybody's rotations, filterable by ``specialtyId`` and ``monthYear`` (YYYY-MM)."""
    s = RotationQuerySerializer(data=request.query_params)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    data = rotations.list_rotations(
        specialty_id=v.get('specialtyId') or None,
        month_year=v.get('monthYear') or None,
    )
    return Response({'ok': True, 'data': data})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def my_rotations(request):
    ctx = resolve_current_user(request)
    if request.method == 'GET':
        return Response({'ok': True, 'data': rotations.list_user_rotations(ctx)})

    s = RotationSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    return Response({'ok': True, 'data': rotations.create_rotation(ctx, **s.validated_data)}, status=201)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def my_rotation_detail(request, rotation_id: int):
    ctx = resolve_current_user(request)
    if request.method == 'DELETE':
        rotations.delete_rotation(ctx, rotation_id)
        return Response({'ok': True})

    s = RotationSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    return Response({'ok': True, 'data': rotations.update_rotation(ctx, rotation_id, **s.validated_data)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def phone_and_rotation(request):
    """Save the contact phone first, then publish the rotation."""
    ctx = resolve_current_user(request)
    s = PhoneAndRotationSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    created = rotations.update_phone_and_create_rotation(
        ctx, s.validated_data['phone'], dict(s.validated_data['rotation']),
    )
    return Response({'ok': True, 'data': created}, status=201)
