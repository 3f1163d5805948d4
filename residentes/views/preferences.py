from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..context import resolve_current_user
from ..serializers.preferences import PreferenceCreateSerializer, PreferenceReorderSerializer
from ..services import preferences


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def preference_list(request):
    """``GET`` the ranked wish list; ``POST`` appends a hospital/specialty pair."""
    ctx = resolve_current_user(request)
    if request.method == 'GET':
        return Response({'ok': True, 'data': preferences.list_preferences(ctx)})

    s = PreferenceCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    pref = preferences.add_preference(ctx, s.validated_data['hospitalId'], s.validated_data['specialtyId'])
    return Response({'ok': True, 'data': pref}, status=201)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def preference_detail(request, preference_id: int):
    ctx = resolve_current_user(request)
    preferences.remove_preference(ctx, preference_id)
    return Response({'ok': True})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def preference_reorder(request):
    ctx = resolve_current_user(request)
    s = PreferenceReorderSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    positions = preferences.reorder_preferences(ctx, s.validated_data['orderedIds'])
    return Response({'ok': True, 'data': positions})
