"""
Review endpoints.

Anyone can read approved reviews; writing one requires a resident
account, and moderators approve them.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from ..context import optional_current_user, resolve_current_user
from ..permissions import IsModerator, IsResident
from ..serializers.reviews import ReviewQuerySerializer, ReviewWriteSerializer
from ..services import reviews


@api_view(['GET'])
@permission_classes([AllowAny])
def question_list(request):
    return Response({'ok': True, 'data': reviews.list_questions()})


@api_view(['GET'])
@permission_classes([AllowAny])
def review_summaries(request):
    s = ReviewQuerySerializer(data=request.query_params)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    data = reviews.review_summaries(
        hospital_id=v.get('hospitalId') or None,
        specialty_id=v.get('specialtyId') or None,
        search=v.get('search') or None,
    )
    return Response({'ok': True, 'data': data})


@api_view(['GET'])
@permission_classes([AllowAny])
def review_detail(request, review_id: int):
    ctx = optional_current_user(request)
    return Response({'ok': True, 'data': reviews.get_review_detail(review_id, viewer=ctx.user if ctx else None)})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsResident])
def my_review(request):
    """``GET ?hospitalId=&specialtyId=`` returns my review or null; ``POST`` creates it."""
    ctx = resolve_current_user(request)
    if request.method == 'GET':
        data = reviews.get_my_review(
            ctx,
            request.query_params.get('hospitalId') or ctx.user.hospital_id,
            request.query_params.get('specialtyId') or ctx.user.specialty_id,
        )
        return Response({'ok': True, 'data': data})

    s = ReviewWriteSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    review = reviews.create_review(
        ctx,
        v.get('hospitalId') or ctx.user.hospital_id,
        v.get('specialtyId') or ctx.user.specialty_id,
        v['answers'],
        free_comment=v.get('freeComment'),
        is_anonymous=v.get('isAnonymous', False),
    )
    return Response({'ok': True, 'data': review}, status=201)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsResident])
def my_review_detail(request, review_id: int):
    ctx = resolve_current_user(request)
    if request.method == 'DELETE':
        reviews.delete_review(ctx, review_id)
        return Response({'ok': True})

    s = ReviewWriteSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    review = reviews.update_review(
        ctx, review_id, v['answers'],
        free_comment=v.get('freeComment'), is_anonymous=v.get('isAnonymous', False),
    )
    return Response({'ok': True, 'data': review})


@api_view(['POST'])
@permission_classes([IsModerator])
def review_approve(request, review_id: int):
    return Response({'ok': True, 'data': reviews.approve_review(review_id, moderator=request.user)})
