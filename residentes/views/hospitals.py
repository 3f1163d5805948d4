"""
Hospital directory endpoints.

Read-only and open to anonymous callers: the directory is public data.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from ..services import hospitals


@api_view(['GET'])
@permission_classes([AllowAny])
def hospital_list(request):
    """Query params: ``search``, ``region``, ``city``, ``specialtyId``."""
    qp = request.query_params
    data = hospitals.list_hospitals(
        search=(qp.get('search') or '').strip() or None,
        region=qp.get('region') or None,
        city=qp.get('city') or None,
        specialty_id=qp.get('specialtyId') or None,
    )
    return Response({'ok': True, 'data': data})


@api_view(['GET'])
@permission_classes([AllowAny])
def hospital_initial(request):
    try:
        limit = int(request.query_params.get('limit') or 10)
    except ValueError:
        limit = 10
    return Response({'ok': True, 'data': hospitals.initial_hospitals(limit=max(1, min(limit, 100)))})


@api_view(['GET'])
@permission_classes([AllowAny])
def region_list(request):
    return Response({'ok': True, 'data': hospitals.list_regions()})


@api_view(['GET'])
@permission_classes([AllowAny])
def hospital_specialties(request, hospital_id: str):
    return Response({'ok': True, 'data': hospitals.get_hospital_specialties(hospital_id)})


@api_view(['GET'])
@permission_classes([AllowAny])
def detailed_grades(request, hospital_id: str, specialty_id: str):
    return Response({'ok': True, 'data': hospitals.get_detailed_grades(hospital_id, specialty_id)})


@api_view(['GET'])
@permission_classes([AllowAny])
def specialty_list(request):
    return Response({'ok': True, 'data': hospitals.list_specialties()})


@api_view(['GET'])
@permission_classes([AllowAny])
def specialty_detail(request, specialty_id: str):
    return Response({'ok': True, 'data': hospitals.get_specialty(specialty_id)})
