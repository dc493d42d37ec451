"""
Layout engine: assigns positions to measured nodes.

Two deterministic algorithms, both driven by each node's BFS level:

- radial: roots at the center, level k on a ring around them. A ring's radius
  is the larger of a size-based gap beyond the previous ring and the radius
  whose circumference fits every node at the level side by side (widths plus
  padding), so siblings cannot overlap however many there are.
- horizontal: one column per level, left to right. Nodes in a column are
  packed top to bottom using each node's real height plus padding.

Nodes must carry measured_size (the renderer measures them first). Inputs are
never mutated; every call returns fresh node copies with new positions.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace

from .config import HorizontalConfig, LayoutConfig, RadialConfig, get_config
from .dom import Edge, Err, LayoutError, LayoutType, Node, Ok, Position, Result
from .graph import compute_levels

logger = logging.getLogger(__name__)


def apply_layout(
    nodes: list[Node],
    edges: list[Edge],
    layout: LayoutType | str,
    config: LayoutConfig | None = None,
) -> Result[list[Node], LayoutError]:
    """
    Position nodes with the named layout algorithm.

    Fails fast, before computing anything, on the first node without
    measured_size; then rejects unknown layout names.
    """
    missing = _check_measured(nodes)
    if missing is not None:
        return Err(missing)

    try:
        layout_type = LayoutType(layout)
    except ValueError:
        return Err(LayoutError(
            type="invalid_layout_type",
            message=f"Invalid layout type: {layout!r}. Must be 'radial' or 'horizontal'.",
        ))

    cfg = config or get_config().layout
    if layout_type is LayoutType.RADIAL:
        return calculate_radial_positions(nodes, edges, cfg.radial)
    return calculate_horizontal_positions(nodes, edges, cfg.horizontal)


def calculate_radial_positions(
    nodes: list[Node],
    edges: list[Edge],
    config: RadialConfig | None = None,
) -> Result[list[Node], LayoutError]:
    """Place nodes on concentric rings around the center, one ring per level."""
    missing = _check_measured(nodes)
    if missing is not None:
        return Err(missing)
    if not nodes:
        return Ok([])

    cfg = config or get_config().layout.radial
    by_id = {n.id: n for n in nodes}
    rows = levels_to_rows(compute_levels(nodes, edges))
    radii = compute_ring_radii(rows, by_id, cfg)
    logger.debug("Radial layout: %d nodes on %d rings", len(nodes), len(rows))

    positions: dict[str, Position] = {}
    for level, ids in rows.items():
        radius = radii[level]
        if level == 0 and len(ids) == 1:
            positions[ids[0]] = Position(cfg.center_x, cfg.center_y)
            continue
        for index, node_id in enumerate(ids):
            # first node at the top (-90deg)
            angle = (index / len(ids)) * 2 * math.pi - math.pi / 2
            positions[node_id] = Position(
                cfg.center_x + radius * math.cos(angle),
                cfg.center_y + radius * math.sin(angle),
            )

    return Ok([replace(n, position=positions[n.id]) for n in nodes])


def compute_ring_radii(
    rows: dict[int, list[str]],
    by_id: dict[str, Node],
    cfg: RadialConfig,
) -> dict[int, float]:
    """
    Radius of every ring.

    Level 0 is 0 for a single root, else cfg.root_radius. Level k is
    max(previous radius + multiplier * average extent of level k-1,
        (sum of widths at k + count * padding) / 2pi).
    """
    radii: dict[int, float] = {}
    for level, ids in rows.items():
        if level == 0:
            radii[0] = 0.0 if len(ids) == 1 else cfg.root_radius
            continue
        parent_ids = rows.get(level - 1, [])
        parent_extent = _mean([_extent(by_id[i]) for i in parent_ids])
        minimum = radii.get(level - 1, 0.0) + cfg.level_multiplier * parent_extent

        total_width = sum(by_id[i].measured_size.width for i in ids)
        required_circumference = total_width + len(ids) * cfg.node_padding
        radii[level] = max(minimum, required_circumference / (2 * math.pi))
    return radii


def calculate_horizontal_positions(
    nodes: list[Node],
    edges: list[Edge],
    config: HorizontalConfig | None = None,
) -> Result[list[Node], LayoutError]:
    """Place nodes in columns by level, stacked top-down within a column."""
    missing = _check_measured(nodes)
    if missing is not None:
        return Err(missing)
    if not nodes:
        return Ok([])

    cfg = config or get_config().layout.horizontal
    by_id = {n.id: n for n in nodes}
    rows = levels_to_rows(compute_levels(nodes, edges))
    logger.debug("Horizontal layout: %d nodes in %d columns", len(nodes), len(rows))

    positions: dict[str, Position] = {}
    x = cfg.start_x
    for level, ids in rows.items():
        if level > 0:
            previous = rows.get(level - 1, [])
            x += _mean([by_id[i].measured_size.width for i in previous]) * cfg.column_multiplier
        y = cfg.start_y
        for node_id in ids:
            positions[node_id] = Position(x, y)
            y += by_id[node_id].measured_size.height + cfg.node_padding

    return Ok([replace(n, position=positions[n.id]) for n in nodes])


def levels_to_rows(levels: dict[str, int]) -> dict[int, list[str]]:
    """Invert id -> level into level -> ids, levels ascending, ids in BFS order."""
    rows: dict[int, list[str]] = {}
    for node_id, level in levels.items():
        rows.setdefault(level, []).append(node_id)
    return dict(sorted(rows.items()))


def _check_measured(nodes: list[Node]) -> LayoutError | None:
    for node in nodes:
        if node.measured_size is None:
            return LayoutError(
                type="missing_measured_size",
                message=f"Node {node.content!r} is missing measured_size. Measure nodes before applying layout.",
                node_id=node.id,
            )
    return None


def _extent(node: Node) -> float:
    size = node.measured_size
    return max(size.width, size.height)


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0
