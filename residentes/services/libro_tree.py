"""
Tree aggregation for the resident activity log.

Nodes arrive as a flat list (categories and subcategories) together with
a flat list of entries (signed count deltas).  :func:`build_node_tree`
links them into a forest where every node carries ``children`` and a
computed ``total_count``:

* a leaf's total is the sum of its own entries' ``count``;
* a node with at least one child shows only the sum of its children's
  totals.  Entries logged directly on a category stop counting once it
  has a subcategory.

Nodes whose parent is not in the input are promoted to roots.  Cycles
cannot be reached from a root and are therefore never traversed.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Union


@dataclass(frozen=True)
class Root:
    """The node has no parent."""


@dataclass(frozen=True)
class Found:
    parent_id: Any


@dataclass(frozen=True)
class Missing:
    """The node names a parent that is not in the collection."""
    parent_id: Any


ParentLink = Union[Root, Found, Missing]


def _get(obj, key, default=None):
    if isinstance(obj, Mapping):
        return obj.get(key, default)
    return getattr(obj, key, default)


def parent_of(node):
    """``parent_node_id`` from serialized rows, ``parent_id`` from model instances."""
    return _get(node, 'parent_node_id', _get(node, 'parent_id'))


def resolve_parent(node, index: Mapping[Any, dict]) -> ParentLink:
    parent_id = parent_of(node)
    if parent_id is None:
        return Root()
    if parent_id in index:
        return Found(parent_id)
    return Missing(parent_id)


def direct_counts(entries: Iterable) -> dict:
    counts: dict = defaultdict(int)
    for entry in entries:
        counts[_get(entry, 'node_id')] += int(_get(entry, 'count', 0) or 0)
    return counts


def walk(roots: Iterable[dict]):
    """Yield every node of the forest in depth-first pre-order."""
    stack = list(reversed(list(roots)))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node['children']))


def _aggregate(roots: list[dict]) -> None:
    # reversed pre-order visits every child before its parent
    for node in reversed(list(walk(roots))):
        if node['children']:
            node['total_count'] = sum(child['total_count'] for child in node['children'])


def build_node_tree(nodes: Iterable, entries: Iterable) -> list[dict]:
    """Return the root nodes, deep-augmented with ``children`` and ``total_count``.

    ``nodes`` items need ``id`` and a parent reference, either
    ``parent_node_id`` or ``parent_id`` (the attribute a ``LibroNode``
    instance carries); ``entries`` items need ``node_id`` and ``count``.
    Mappings and attribute objects are both accepted; the returned nodes
    are fresh dicts.
    """
    counts = direct_counts(entries)
    index: dict[Any, dict] = {}
    ordered: list[dict] = []
    for node in nodes:
        data = dict(node) if isinstance(node, Mapping) else dict(vars(node))
        data.pop('_state', None)
        data['children'] = []
        data['total_count'] = counts.get(data['id'], 0)
        index[data['id']] = data
        ordered.append(data)

    roots: list[dict] = []
    for data in ordered:
        link = resolve_parent(data, index)
        if isinstance(link, Found):
            index[link.parent_id]['children'].append(data)
        else:
            # Root and Missing both end up at the top level
            roots.append(data)

    _aggregate(roots)
    return roots


def summarize(nodes: Iterable, entries: Iterable, roots: Iterable[dict]) -> dict:
    """Section statistics shown above the tree."""
    nodes = list(nodes)
    entries = list(entries)
    by_year: dict = {}
    for entry in entries:
        year = _get(entry, 'residency_year')
        if year:
            by_year[year] = by_year.get(year, 0) + int(_get(entry, 'count', 0) or 0)
    return {
        'totalNodes': len(nodes),
        'totalEntries': len(entries),
        'totalCount': sum(root['total_count'] for root in roots),
        'byYear': by_year,
    }
