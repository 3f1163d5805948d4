"""Resident community endpoints; work emails are only shown to signed-in users."""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..serializers.community import CommunityQuerySerializer
from ..services import community


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def community_users(request):
    s = CommunityQuerySerializer(data=request.query_params)
    s.is_valid(raise_exception=True)
    data = community.list_community_users(
        city=s.validated_data.get('city') or None,
        specialty_id=s.validated_data.get('specialtyId') or None,
    )
    return Response({'ok': True, 'data': data})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def community_cities(request):
    return Response({'ok': True, 'data': community.list_cities()})
