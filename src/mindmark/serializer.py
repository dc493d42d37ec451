"""
Graph -> markdown serializer, the inverse of mindmark.parser.

Output shape:
    <!-- mindmark-layout: radial -->

    # Root {.color-blue}

    - item
      - nested item
    ---
    # Next group

Root nodes (no incoming edge) are grouped by group_id in first-seen order and
walked depth-first along their outgoing edges. Free-form links are not part
of the format; only the tree edges survive.
"""

from __future__ import annotations

import re

from .dom import (
    DEFAULT_LAYOUT,
    MAX_HEADER_LEVEL,
    MAX_LIST_LEVEL,
    CodeNode,
    Edge,
    Err,
    HeaderNode,
    ImageNode,
    LayoutType,
    Node,
    Ok,
    Result,
    SerializeError,
    TextNode,
)
from .graph import children_map
from .tokens import restore_style_tokens

LAYOUT_DIRECTIVE = "<!-- mindmark-layout: {layout} -->"
GROUP_SEPARATOR = "---"
BACKTICK_RUN = re.compile(r"`+")


def serialize(nodes: list[Node], edges: list[Edge], layout: LayoutType | str) -> Result[str, SerializeError]:
    """
    Serialize nodes and edges to markdown text.

    Returns Err(SerializeError) only for malformed graphs: edges pointing at
    unknown nodes, nodes of unknown type or out-of-range level, or nodes that
    can only be reached through a cycle.
    """
    error = _validate(nodes, edges)
    if error is not None:
        return Err(error)

    lines: list[str] = [LAYOUT_DIRECTIVE.format(layout=_layout_value(layout)), ""]

    if not nodes:
        return Ok(_finish(lines))

    by_id = {n.id: n for n in nodes}
    children = children_map(edges)
    targets = {e.target_id for e in edges}
    roots = [n for n in nodes if n.id not in targets]

    visited: set[str] = set()

    def walk(node: Node, depth: int) -> None:
        """depth: nesting of the enclosing list item, 0 outside lists."""
        if node.id in visited:
            return
        visited.add(node.id)
        # list items and the code/images under them sit in the enclosing item's content column
        _emit(node, lines, "  " * depth)
        if isinstance(node, TextNode):
            depth += 1
        elif isinstance(node, HeaderNode):
            depth = 0
        for child_id in children.get(node.id, []):
            walk(by_id[child_id], depth)

    groups: dict[str | None, list[Node]] = {}
    for root in roots:
        groups.setdefault(root.group_id, []).append(root)

    for i, group_roots in enumerate(groups.values()):
        if i > 0:
            _blank(lines)
            lines.append(GROUP_SEPARATOR)
            lines.append("")
        for root in group_roots:
            walk(root, 0)

    unreached = [n.id for n in nodes if n.id not in visited]
    if unreached:
        return Err(SerializeError(
            type="circular_reference",
            message=f"{len(unreached)} node(s) are only reachable through a cycle",
            node_id=unreached[0],
        ))

    return Ok(_finish(lines))


def _layout_value(layout: LayoutType | str) -> str:
    try:
        return LayoutType(layout).value
    except ValueError:
        return DEFAULT_LAYOUT.value


def _validate(nodes: list[Node], edges: list[Edge]) -> SerializeError | None:
    ids: set[str] = set()
    for node in nodes:
        if isinstance(node, HeaderNode):
            bad_level = not 1 <= node.level <= MAX_HEADER_LEVEL
        elif isinstance(node, TextNode):
            bad_level = not 1 <= node.level <= MAX_LIST_LEVEL
        elif isinstance(node, (CodeNode, ImageNode)):
            bad_level = False
        else:
            return SerializeError(
                type="invalid_node",
                message=f"Unknown node type: {getattr(node, 'type', type(node).__name__)!r}",
                node_id=getattr(node, "id", None),
            )
        if bad_level:
            return SerializeError(
                type="invalid_node",
                message=f"Node level {node.level} out of range for {node.type} node",
                node_id=node.id,
            )
        if node.id in ids:
            return SerializeError(type="invalid_node", message=f"Duplicate node id {node.id!r}", node_id=node.id)
        ids.add(node.id)

    for edge in edges:
        if edge.source_id not in ids or edge.target_id not in ids:
            return SerializeError(
                type="invalid_edge",
                message=f"Edge {edge.source_id!r} -> {edge.target_id!r} references a missing node",
                edge_id=edge.id,
            )
        if edge.source_id == edge.target_id:
            return SerializeError(
                type="invalid_edge",
                message=f"Edge on {edge.source_id!r} is a self-loop",
                edge_id=edge.id,
            )
    return None


def _emit(node: Node, lines: list[str], indent: str = "") -> None:
    """Append the markdown for one node (children are handled by the walk)."""
    tokens = node.style.split()

    if isinstance(node, HeaderNode):
        _blank(lines)
        lines.append(f"{'#' * node.level} {restore_style_tokens(node.content, tokens)}")
        lines.append("")
    elif isinstance(node, TextNode):
        lines.append(f"{indent}- {restore_style_tokens(node.content, tokens)}")
    elif isinstance(node, CodeNode):
        _blank(lines)
        fence = _fence_for(node.content)
        lines.append(f"{indent}{fence}{restore_style_tokens(node.language, tokens)}")
        if node.content:
            lines.extend(f"{indent}{line}" if line else "" for line in node.content.split("\n"))
        lines.append(f"{indent}{fence}")
        lines.append("")
    elif isinstance(node, ImageNode):
        _blank(lines)
        lines.append(indent + restore_style_tokens(f"![{node.alt_text}]({node.image_url})", tokens))
        lines.append("")


def _fence_for(code: str) -> str:
    """Backtick fence longer than any backtick run inside the code (at least 3)."""
    longest = max((len(run) for run in BACKTICK_RUN.findall(code)), default=0)
    return "`" * max(3, longest + 1)


def _blank(lines: list[str]) -> None:
    """Make sure a block element starts after an empty line."""
    if lines and lines[-1] != "":
        lines.append("")


def _finish(lines: list[str]) -> str:
    while lines and lines[-1] == "":
        lines.pop()
    return "\n".join(lines)
