"""
External rotation review endpoints.

Approved reviews are public.  Residents review the centres of their own
rotations and moderators approve them.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from ..context import optional_current_user, resolve_current_user
from ..permissions import IsModerator
from ..serializers.rotation_reviews import RotationReviewQuerySerializer, RotationReviewWriteSerializer
from ..services import rotation_reviews


@api_view(['GET'])
@permission_classes([AllowAny])
def question_list(request):
    return Response({'ok': True, 'data': rotation_reviews.list_questions()})


@api_view(['GET'])
@permission_classes([AllowAny])
def review_list(request):
    """Approved reviews and the caller's own, filterable by ``country`` and ``city``."""
    s = RotationReviewQuerySerializer(data=request.query_params)
    s.is_valid(raise_exception=True)
    ctx = optional_current_user(request)
    data = rotation_reviews.list_rotation_reviews(
        viewer=ctx.user if ctx else None,
        country=s.validated_data.get('country') or None,
        city=s.validated_data.get('city') or None,
    )
    return Response({'ok': True, 'data': data})


@api_view(['GET'])
@permission_classes([AllowAny])
def review_detail(request, review_id: int):
    ctx = optional_current_user(request)
    data = rotation_reviews.get_rotation_review_detail(review_id, viewer=ctx.user if ctx else None)
    return Response({'ok': True, 'data': data})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def my_review(request):
    """``GET ?rotationId=`` returns my review of that rotation or null; ``POST`` creates it."""
    ctx = resolve_current_user(request)
    if request.method == 'GET':
        rotation_id = request.query_params.get('rotationId')
        if not rotation_id:
            raise ValidationError({'rotationId': 'Este campo es obligatorio'})
        return Response({'ok': True, 'data': rotation_reviews.get_my_rotation_review(ctx, rotation_id)})

    s = RotationReviewWriteSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    if 'rotationId' not in v:
        raise ValidationError({'rotationId': 'Este campo es obligatorio'})
    review = rotation_reviews.create_rotation_review(
        ctx,
        v['rotationId'],
        v.get('externalHospitalName', ''),
        v['answers'],
        city=v.get('city'),
        country=v.get('country'),
        free_comment=v.get('freeComment'),
        is_anonymous=v.get('isAnonymous', False),
    )
    return Response({'ok': True, 'data': review}, status=201)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def my_review_detail(request, review_id: int):
    ctx = resolve_current_user(request)
    if request.method == 'DELETE':
        rotation_reviews.delete_rotation_review(ctx, review_id)
        return Response({'ok': True})

    s = RotationReviewWriteSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    review = rotation_reviews.update_rotation_review(
        ctx, review_id, v['answers'],
        external_hospital_name=v.get('externalHospitalName'),
        city=v.get('city'),
        country=v.get('country'),
        free_comment=v.get('freeComment'),
        is_anonymous=v.get('isAnonymous', False),
    )
    return Response({'ok': True, 'data': review})


@api_view(['POST'])
@permission_classes([IsModerator])
def review_approve(request, review_id: int):
    data = rotation_reviews.approve_rotation_review(review_id, moderator=request.user)
    return Response({'ok': True, 'data': data})
