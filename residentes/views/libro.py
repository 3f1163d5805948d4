"""
Resident activity log endpoints.

All endpoints act on the authenticated user's own log; the section is
passed explicitly (query string for reads, body for writes).
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..context import resolve_current_user
from ..serializers.libro import (
    EntryCreateSerializer,
    EventCreateSerializer,
    EventUpdateSerializer,
    MoveSerializer,
    NodeCreateSerializer,
    NodeUpdateSerializer,
    ReorderSerializer,
    SectionQuerySerializer,
)
from ..services import libro


def _section(request) -> str:
    s = SectionQuerySerializer(data=request.query_params)
    s.is_valid(raise_exception=True)
    return s.validated_data['section']


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def section_data(request):
    """Flat nodes, entries and events of ``?section=``."""
    ctx = resolve_current_user(request)
    return Response({'ok': True, 'data': libro.get_section_data(ctx, _section(request))})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def section_tree(request):
    """The section as a tree with aggregated totals and statistics."""
    ctx = resolve_current_user(request)
    return Response({'ok': True, 'data': libro.get_section_tree(ctx, _section(request))})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def node_create(request):
    ctx = resolve_current_user(request)
    s = NodeCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    node = libro.create_node(ctx, v['section'], v['name'], parent_id=v.get('parentId'), goal=v.get('goal'))
    return Response({'ok': True, 'data': node}, status=201)


@api_view(['PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def node_detail(request, node_id: int):
    """Rename a node (``PUT``/``PATCH``) or delete it with its whole subtree."""
    ctx = resolve_current_user(request)
    if request.method == 'DELETE':
        deleted = libro.delete_node(ctx, node_id)
        return Response({'ok': True, 'deleted': deleted})

    s = NodeUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    if 'goal' in v:
        node = libro.update_node(ctx, node_id, v['name'], goal=v['goal'])
    else:
        node = libro.update_node(ctx, node_id, v['name'])
    return Response({'ok': True, 'data': node})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def node_move(request, node_id: int):
    ctx = resolve_current_user(request)
    s = MoveSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    positions = libro.move_node(ctx, node_id, s.validated_data['direction'])
    return Response({'ok': True, 'data': positions})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def nodes_reorder(request):
    ctx = resolve_current_user(request)
    s = ReorderSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    positions = libro.reorder_nodes(ctx, v['section'], v.get('parentId'), v['orderedIds'])
    return Response({'ok': True, 'data': positions})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def entry_create(request):
    ctx = resolve_current_user(request)
    s = EntryCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    entry = libro.create_entry(
        ctx, v['nodeId'], v['section'], count=v.get('count', 1),
        residency_year=v.get('residencyYear'), notes=v.get('notes'),
    )
    return Response({'ok': True, 'data': entry}, status=201)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def event_create(request):
    ctx = resolve_current_user(request)
    s = EventCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    event = libro.create_event(
        ctx, v['nodeId'], v['section'], v['eventDate'],
        title=v.get('title'), description=v.get('description'), location=v.get('location'),
        residency_year=v.get('residencyYear'), notes=v.get('notes'),
    )
    return Response({'ok': True, 'data': event}, status=201)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def event_detail(request, event_id: int):
    ctx = resolve_current_user(request)
    if request.method == 'DELETE':
        libro.delete_event(ctx, event_id)
        return Response({'ok': True})

    s = EventUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    event = libro.update_event(
        ctx, event_id, v['eventDate'],
        title=v.get('title'), description=v.get('description'), location=v.get('location'),
    )
    return Response({'ok': True, 'data': event})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def template_create(request):
    """Seed an empty section with the default categories."""
    ctx = resolve_current_user(request)
    s = SectionQuerySerializer(data=request.data)
    s.is_valid(raise_exception=True)
    result = libro.create_template(ctx, s.validated_data['section'])
    return Response({'ok': True, 'data': result}, status=201)
