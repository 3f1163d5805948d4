import pytest
from rest_framework.exceptions import ValidationError

from residentes.models import LibroNode
from residentes.services.ordering import (
    DOWN, UP, apply_positions, move_item, next_position, plan_positions,
)


def test_plan_positions_is_zero_based():
    assert plan_positions(['A', 'B', 'C'], ['C', 'A', 'B']) == [('C', 0), ('A', 1), ('B', 2)]


def test_plan_positions_accepts_string_ids_for_int_rows():
    assert plan_positions([1, 2], ['2', '1']) == [(2, 0), (1, 1)]


@pytest.mark.parametrize('ordered', [['A', 'B'], ['A', 'B', 'C', 'D'], ['A', 'A', 'B']])
def test_plan_positions_requires_a_permutation(ordered):
    with pytest.raises(ValidationError):
        plan_positions(['A', 'B', 'C'], ordered)


def test_move_item():
    assert move_item(['A', 'B', 'C'], 'B', UP) == ['B', 'A', 'C']
    assert move_item(['A', 'B', 'C'], 'B', DOWN) == ['A', 'C', 'B']


def test_move_past_either_end_is_noop():
    assert move_item(['A', 'B'], 'A', UP) == ['A', 'B']
    assert move_item(['A', 'B'], 'B', DOWN) == ['A', 'B']


def test_move_item_rejects_bad_input():
    with pytest.raises(ValidationError):
        move_item(['A'], 'A', 'sideways')
    with pytest.raises(ValidationError):
        move_item(['A'], 'Z', UP)


@pytest.mark.django_db
def test_reorder_persists_positions(resident):
    a, b, c = (
        LibroNode.objects.create(user=resident, section='s', name=n, position=i)
        for i, n in enumerate('ABC')
    )
    qs = LibroNode.objects.filter(user=resident, section='s')
    pairs = plan_positions([a.id, b.id, c.id], [c.id, a.id, b.id])
    assert apply_positions(qs, pairs) == 3

    positions = dict(qs.values_list('name', 'position'))
    assert positions == {'C': 0, 'A': 1, 'B': 2}
    assert list(qs.order_by('position').values_list('name', flat=True)) == ['C', 'A', 'B']


@pytest.mark.django_db
def test_next_position(resident):
    qs = LibroNode.objects.filter(user=resident)
    assert next_position(qs) == 0
    LibroNode.objects.create(user=resident, section='s', name='x', position=4)
    assert next_position(qs) == 5
