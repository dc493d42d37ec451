"""Traversal helpers over the flat node/edge representation."""

from __future__ import annotations

from collections import deque

from .dom import Edge, Node


def find_root_nodes(nodes: list[Node], edges: list[Edge]) -> list[str]:
    """Ids of nodes with no incoming edge, in node order."""
    target_ids = {e.target_id for e in edges}
    return [n.id for n in nodes if n.id not in target_ids]


def find_children(node_id: str, edges: list[Edge]) -> list[str]:
    return [e.target_id for e in edges if e.source_id == node_id]


def find_parent(node_id: str, edges: list[Edge]) -> str | None:
    for e in edges:
        if e.target_id == node_id:
            return e.source_id
    return None


def children_map(edges: list[Edge]) -> dict[str, list[str]]:
    """source id -> target ids, in edge order."""
    children: dict[str, list[str]] = {}
    for e in edges:
        children.setdefault(e.source_id, []).append(e.target_id)
    return children


def compute_levels(nodes: list[Node], edges: list[Edge]) -> dict[str, int]:
    """
    Assign each node its breadth-first distance from the nearest root.

    All roots start the BFS together at level 0. Nodes the BFS never reaches
    (only possible when the edges contain a cycle) default to level 0.

    The returned dict is ordered by BFS visit order, then unreached nodes in
    input order, which the layout engine relies on for sibling ordering.
    """
    known = {n.id for n in nodes}
    children = children_map(edges)
    levels: dict[str, int] = {}

    queue: deque[tuple[str, int]] = deque((rid, 0) for rid in find_root_nodes(nodes, edges))
    while queue:
        node_id, level = queue.popleft()
        if node_id in levels:
            continue
        levels[node_id] = level
        for child_id in children.get(node_id, []):
            if child_id in known and child_id not in levels:
                queue.append((child_id, level + 1))

    for node in nodes:
        if node.id not in levels:
            levels[node.id] = 0

    return levels
