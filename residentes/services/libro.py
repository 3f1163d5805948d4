"""
Resident activity log ("Libro de Residente").

A section holds a forest of nodes (categories), signed count entries per
node and dated events, each event backed by one ``count = 1`` entry.
Every function takes the :class:`~residentes.context.ActorContext` of the
caller; rows belonging to other users are reported as not found.
"""
from __future__ import annotations

import json
import logging
from typing import Optional

from django.conf import settings
from django.db import transaction
from rest_framework.exceptions import ValidationError

from residentes.context import ActorContext
from residentes.exceptions import ConflictError, NotFoundError
from residentes.models import LibroEntry, LibroEvent, LibroNode
from residentes.services import ordering
from residentes.services.audit import log_action
from residentes.services.libro_tree import build_node_tree, summarize

logger = logging.getLogger(__name__)

UNSET = object()


def _node_row(node: LibroNode) -> dict:
    return {
        'id': node.id,
        'parent_node_id': node.parent_id,
        'section': node.section,
        'name': node.name,
        'goal': node.goal,
        'position': node.position,
        'created_at': node.created_at.isoformat() if node.created_at else None,
    }


def _entry_row(entry: LibroEntry) -> dict:
    return {
        'id': entry.id,
        'node_id': entry.node_id,
        'section': entry.section,
        'count': entry.count,
        'residency_year': entry.residency_year,
        'notes': entry.notes,
        'created_at': entry.created_at.isoformat() if entry.created_at else None,
    }


def _event_row(event: LibroEvent) -> dict:
    return {
        'id': event.id,
        'entry_id': event.entry_id,
        'node_id': event.node_id,
        'event_date': event.event_date.isoformat() if event.event_date else None,
        'title': event.title,
        'description': event.description,
        'location': event.location,
    }


def _require_section(section: Optional[str]) -> str:
    section = (section or '').strip()
    if not section:
        raise ValidationError({'section': 'La sección es obligatoria'})
    return section


def _own_node(ctx: ActorContext, node_id, section: Optional[str]=None) -> LibroNode:
    qs = LibroNode.objects.filter(id=node_id, user=ctx.user)
    if section:
        qs = qs.filter(section=section)
    node = qs.first()
    if not node:
        raise NotFoundError('Nodo no encontrado')
    return node


def _own_event(ctx: ActorContext, event_id) -> LibroEvent:
    event = LibroEvent.objects.select_related('entry').filter(id=event_id, node__user=ctx.user).first()
    if not event:
        raise NotFoundError('Evento no encontrado')
    return event


def get_section_data(ctx: ActorContext, section: str) -> dict:
    """Return flat ``nodes``, ``entries`` and ``events`` for one section."""
    section = _require_section(section)
    nodes = list(
        LibroNode.objects.filter(user=ctx.user, section=section).order_by('position', 'created_at', 'id')
    )
    node_ids = [n.id for n in nodes]
    entries = LibroEntry.objects.filter(node_id__in=node_ids).order_by('created_at', 'id')
    events = LibroEvent.objects.filter(node_id__in=node_ids).order_by('event_date', 'id')
    return {
        'nodes': [_node_row(n) for n in nodes],
        'entries': [_entry_row(e) for e in entries],
        'events': [_event_row(e) for e in events],
    }


def get_section_tree(ctx: ActorContext, section: str) -> dict:
    data = get_section_data(ctx, section)
    tree = build_node_tree(data['nodes'], data['entries'])
    return {
        **data,
        'tree': tree,
        'statistics': summarize(data['nodes'], data['entries'], tree),
    }


def create_node(ctx: ActorContext, section: str, name: str, parent_id=None, goal: Optional[str]=None) -> dict:
    section = _require_section(section)
    parent = _own_node(ctx, parent_id, section) if parent_id else None
    siblings = LibroNode.objects.filter(user=ctx.user, section=section, parent=parent)
    node = LibroNode.objects.create(
        user=ctx.user,
        section=section,
        name=name,
        parent=parent,
        goal=goal or None,
        position=ordering.next_position(siblings),
    )
    return _node_row(node)


def update_node(ctx: ActorContext, node_id, name: str, goal=UNSET) -> dict:
    """Rename a node; ``goal=None`` clears the goal, leaving it out keeps it."""
    node = _own_node(ctx, node_id)
    node.name = name
    fields = ['name']
    if goal is not UNSET:
        node.goal = goal or None
        fields.append('goal')
    node.save(update_fields=fields)
    return _node_row(node)


def _descendant_ids(root_id) -> list:
    """Ids of every node below ``root_id``, children before their parents."""
    levels = []
    frontier = [root_id]
    while frontier:
        children = list(LibroNode.objects.filter(parent_id__in=frontier).values_list('id', flat=True))
        if children:
            levels.append(children)
        frontier = children
    ordered = []
    for level in reversed(levels):
        ordered.extend(level)
    return ordered


def delete_node(ctx: ActorContext, node_id) -> dict:
    """Delete a node together with all its descendants, entries and events.

    The whole cascade runs in one transaction: either everything below the
    node disappears or nothing does.
    """
    node = _own_node(ctx, node_id)
    with transaction.atomic():
        ids = _descendant_ids(node.id) + [node.id]
        events, _ = LibroEvent.objects.filter(node_id__in=ids).delete()
        entries, _ = LibroEntry.objects.filter(node_id__in=ids).delete()
        # leaves first so no row is removed through the FK cascade
        for nid in ids:
            LibroNode.objects.filter(id=nid, user=ctx.user).delete()
    result = {'nodes': len(ids), 'entries': entries, 'events': events}
    log_action(user=ctx.user, action='libro_node_delete', object_type='libro_node',
               object_id=node.id, detail=result)
    return result


def create_entry(ctx: ActorContext, node_id, section: str, count: int=1,
                 residency_year: Optional[int]=None, notes: Optional[str]=None) -> dict:
    section = _require_section(section)
    node = _own_node(ctx, node_id)
    entry = LibroEntry.objects.create(
        node=node,
        section=section,
        count=1 if count is None else count,
        residency_year=residency_year or None,
        notes=notes or None,
    )
    return _entry_row(entry)


def create_event(ctx: ActorContext, node_id, section: str, event_date, title: Optional[str]=None,
                 description: Optional[str]=None, location: Optional[str]=None,
                 residency_year: Optional[int]=None, notes: Optional[str]=None) -> dict:
    """Create an event and the ``count = 1`` entry backing it."""
    section = _require_section(section)
    node = _own_node(ctx, node_id)
    with transaction.atomic():
        entry = LibroEntry.objects.create(
            node=node, section=section, count=1,
            residency_year=residency_year or None, notes=notes or None,
        )
        event = LibroEvent.objects.create(
            entry=entry,
            node=node,
            event_date=event_date,
            title=title or None,
            description=description or None,
            location=location or None,
        )
    return _event_row(event)


def update_event(ctx: ActorContext, event_id, event_date, title: Optional[str]=None,
                 description: Optional[str]=None, location: Optional[str]=None) -> dict:
    event = _own_event(ctx, event_id)
    event.event_date = event_date
    event.title = title or None
    event.description = description or None
    event.location = location or None
    event.save(update_fields=['event_date', 'title', 'description', 'location'])
    return _event_row(event)


def delete_event(ctx: ActorContext, event_id) -> None:
    event = _own_event(ctx, event_id)
    with transaction.atomic():
        entry_id = event.entry_id
        event.delete()
        LibroEntry.objects.filter(id=entry_id).delete()


def load_template(path=None) -> list[dict]:
    path = path or settings.LIBRO_TEMPLATE_PATH
    with open(path, encoding='utf-8') as fh:
        return json.load(fh)


def create_template(ctx: ActorContext, section: str, template: Optional[list]=None) -> dict:
    """Seed an empty section with the default categories and subcategories."""
    section = _require_section(section)
    if LibroNode.objects.filter(user=ctx.user, section=section).exists():
        raise ConflictError('La sección ya tiene categorías')
    template = template if template is not None else load_template()
    created = 0
    with transaction.atomic():
        for parent_pos, parent_tpl in enumerate(template):
            parent = LibroNode.objects.create(
                user=ctx.user, section=section, name=parent_tpl['name'], position=parent_pos,
            )
            created += 1
            for child_pos, child_tpl in enumerate(parent_tpl.get('children') or []):
                LibroNode.objects.create(
                    user=ctx.user, section=section, name=child_tpl['name'], parent=parent,
                    goal=child_tpl.get('goal') or None, position=child_pos,
                )
                created += 1
    logger.info('created libro template for user %s section %s (%d nodes)', ctx.user_id, section, created)
    return {'created': created}


def _siblings(ctx: ActorContext, section: str, parent_id):
    qs = LibroNode.objects.filter(user=ctx.user, section=section)
    if parent_id:
        _own_node(ctx, parent_id, section)
        return qs.filter(parent_id=parent_id)
    return qs.filter(parent__isnull=True)


def reorder_nodes(ctx: ActorContext, section: str, parent_id, ordered_ids) -> list[dict]:
    """Persist a new sibling order; returns the ``{id, position}`` pairs written."""
    section = _require_section(section)
    siblings = _siblings(ctx, section, parent_id)
    current = list(siblings.order_by('position', 'created_at', 'id').values_list('id', flat=True))
    pairs = ordering.plan_positions(current, ordered_ids)
    ordering.apply_positions(siblings, pairs)
    return [{'id': pk, 'position': position} for pk, position in pairs]


def move_node(ctx: ActorContext, node_id, direction: str) -> list[dict]:
    node = _own_node(ctx, node_id)
    siblings = _siblings(ctx, node.section, node.parent_id)
    current = list(siblings.order_by('position', 'created_at', 'id').values_list('id', flat=True))
    new_order = ordering.move_item(current, node.id, direction)
    pairs = ordering.plan_positions(current, new_order)
    ordering.apply_positions(siblings, pairs)
    return [{'id': pk, 'position': position} for pk, position in pairs]
