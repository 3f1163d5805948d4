"""
Explicit manual ordering.

Display order is persisted as an integer ``position`` per row, starting at
0.  Every reorder rewrites the position of all affected siblings in one
transaction so that a later fetch ordered by ``position`` reproduces the
requested order exactly.
"""
from __future__ import annotations

from typing import Iterable, Sequence

from django.db import transaction
from rest_framework.exceptions import ValidationError

UP = 'up'
DOWN = 'down'


def plan_positions(current_ids: Sequence, ordered_ids: Sequence) -> list[tuple]:
    """Return ``(id, position)`` pairs for ``ordered_ids``.

    ``ordered_ids`` must contain every id of ``current_ids`` exactly once.
    """
    current = [str(i) for i in current_ids]
    ordered = [str(i) for i in ordered_ids]
    if len(set(ordered)) != len(ordered):
        raise ValidationError({'orderedIds': 'El orden contiene elementos repetidos'})
    if set(ordered) != set(current):
        raise ValidationError({'orderedIds': 'El orden debe incluir exactamente los mismos elementos'})
    by_str = {str(i): i for i in current_ids}
    return [(by_str[i], position) for position, i in enumerate(ordered)]


def move_item(current_ids: Sequence, item_id, direction: str) -> list:
    """Return the id order after moving ``item_id`` one slot up or down.

    Moving the first item up or the last item down leaves the order as is.
    """
    if direction not in (UP, DOWN):
        raise ValidationError({'direction': "La dirección debe ser 'up' o 'down'"})
    ids = list(current_ids)
    keys = [str(i) for i in ids]
    if str(item_id) not in keys:
        raise ValidationError({'id': 'El elemento no pertenece a esta lista'})
    idx = keys.index(str(item_id))
    target = idx - 1 if direction == UP else idx + 1
    if 0 <= target < len(ids):
        ids[idx], ids[target] = ids[target], ids[idx]
    return ids


def apply_positions(queryset, pairs: Iterable[tuple]) -> int:
    """Write the planned positions for every row in ``pairs`` atomically."""
    pairs = list(pairs)
    wanted = {str(pk): position for pk, position in pairs}
    with transaction.atomic():
        rows = list(queryset.select_for_update().filter(pk__in=[pk for pk, _ in pairs]))
        for row in rows:
            row.position = wanted[str(row.pk)]
        queryset.model.objects.bulk_update(rows, ['position'])
    return len(rows)


def next_position(queryset) -> int:
    """Position for an item appended after ``queryset``'s current last item."""
    last = queryset.order_by('-position').values_list('position', flat=True).first()
    return 0 if last is None else last + 1
