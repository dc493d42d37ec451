"""
DOM - Document Object Model for Mindmark

Every outline document becomes a flat list of typed nodes plus parent -> child
edges. Nodes come in four variants sharing one base shape; the ``type`` tag
tells them apart.

Key invariant: edges only ever point from a parent to a child that both exist
in the same graph, and they form a forest. The parser guarantees this; the
serializer and layout engine check it.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Generic, Literal, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")

MAX_HEADER_LEVEL = 6
MAX_LIST_LEVEL = 5
DEFAULT_CODE_LANGUAGE = "text"


def new_id() -> str:
    return uuid.uuid4().hex


class LayoutType(str, Enum):
    RADIAL = "radial"
    HORIZONTAL = "horizontal"


DEFAULT_LAYOUT = LayoutType.RADIAL


@dataclass
class Position:
    x: float = 0.0
    y: float = 0.0


@dataclass
class Size:
    width: float
    height: float


@dataclass(kw_only=True)
class BaseNode:
    """Fields shared by every node variant."""
    content: str
    id: str = field(default_factory=new_id)
    style: str = ""  # raw space-separated token names, resolved by the renderer
    position: Position = field(default_factory=Position)
    measured_size: Size | None = None  # set by the renderer after first paint
    group_id: str | None = None  # shared by nodes between two --- separators


@dataclass(kw_only=True)
class TextNode(BaseNode):
    """List item; level is the indentation depth (1-5)."""
    level: int
    type: Literal["text"] = "text"


@dataclass(kw_only=True)
class HeaderNode(BaseNode):
    """ATX heading; level is the number of #'s (1-6)."""
    level: int
    type: Literal["header"] = "header"


@dataclass(kw_only=True)
class CodeNode(BaseNode):
    """Fenced code block. Content is the code, verbatim."""
    language: str = DEFAULT_CODE_LANGUAGE
    expanded: bool = False
    type: Literal["code"] = "code"


@dataclass(kw_only=True)
class ImageNode(BaseNode):
    """Image; content mirrors alt_text for display."""
    image_url: str
    alt_text: str
    type: Literal["image"] = "image"


Node = Union[TextNode, HeaderNode, CodeNode, ImageNode]

NODE_CLASSES: dict[str, type] = {
    "text": TextNode,
    "header": HeaderNode,
    "code": CodeNode,
    "image": ImageNode,
}


@dataclass
class Edge:
    """A directional parent -> child edge."""
    source_id: str
    target_id: str
    id: str = field(default_factory=new_id)


@dataclass
class Graph:
    """Result of parsing one document."""
    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    layout: LayoutType = DEFAULT_LAYOUT


# ============================================================================
# Result values
# ============================================================================

@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T
    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E
    ok: ClassVar[bool] = False


Result = Union[Ok[T], Err[E]]


ParseErrorType = Literal["syntax_error", "token_extraction_error", "invalid_structure"]
SerializeErrorType = Literal["invalid_node", "invalid_edge", "circular_reference"]
LayoutErrorType = Literal["missing_measured_size", "circular_dependency", "invalid_layout_type"]
ValidationErrorType = Literal["invalid_field", "out_of_range", "required_field"]


@dataclass
class ParseError:
    type: ParseErrorType
    message: str
    line: int | None = None


@dataclass
class SerializeError:
    type: SerializeErrorType
    message: str
    node_id: str | None = None
    edge_id: str | None = None


@dataclass
class LayoutError:
    type: LayoutErrorType
    message: str
    node_id: str | None = None


@dataclass
class ValidationError:
    type: ValidationErrorType
    message: str
    field: str
    value: Any = None


# ============================================================================
# JSON codec
# ============================================================================

def node_to_dict(node: Node) -> dict[str, Any]:
    """Encode a node with the camelCase keys the state container uses."""
    data: dict[str, Any] = {
        "id": node.id,
        "type": node.type,
        "content": node.content,
        "style": node.style,
        "position": {"x": node.position.x, "y": node.position.y},
    }
    if node.measured_size is not None:
        data["measuredSize"] = {
            "width": node.measured_size.width,
            "height": node.measured_size.height,
        }
    if node.group_id is not None:
        data["groupId"] = node.group_id

    if isinstance(node, (TextNode, HeaderNode)):
        data["level"] = node.level
    elif isinstance(node, CodeNode):
        data["language"] = node.language
        data["expanded"] = node.expanded
    elif isinstance(node, ImageNode):
        data["imageUrl"] = node.image_url
        data["altText"] = node.alt_text
    return data


def node_from_dict(data: dict[str, Any]) -> Node:
    """Decode a node. Raises ValueError on unknown types or missing keys."""
    node_type = data.get("type") if isinstance(data, dict) else None
    if node_type not in NODE_CLASSES:
        raise ValueError(f"Unknown node type: {node_type!r}")

    try:
        common: dict[str, Any] = {
            "id": str(data["id"]),
            "content": str(data.get("content", "")),
            "style": str(data.get("style", "")),
            "group_id": data.get("groupId"),
        }
        pos = data.get("position") or {}
        common["position"] = Position(float(pos.get("x", 0)), float(pos.get("y", 0)))
        size = data.get("measuredSize")
        if size is not None:
            common["measured_size"] = Size(float(size["width"]), float(size["height"]))

        if node_type == "text":
            return TextNode(level=int(data["level"]), **common)
        if node_type == "header":
            return HeaderNode(level=int(data["level"]), **common)
        if node_type == "code":
            return CodeNode(
                language=str(data.get("language", DEFAULT_CODE_LANGUAGE)),
                expanded=bool(data.get("expanded", False)),
                **common,
            )
        alt_text = str(data.get("altText", common["content"]))
        return ImageNode(image_url=str(data["imageUrl"]), alt_text=alt_text, **common)
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed {node_type} node: missing or invalid {e}") from e


def edge_to_dict(edge: Edge) -> dict[str, Any]:
    return {"id": edge.id, "sourceId": edge.source_id, "targetId": edge.target_id}


def edge_from_dict(data: dict[str, Any]) -> Edge:
    try:
        return Edge(
            source_id=str(data["sourceId"]),
            target_id=str(data["targetId"]),
            id=str(data.get("id") or new_id()),
        )
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed edge: missing {e}") from e


def graph_to_dict(nodes: list[Node], edges: list[Edge], layout: LayoutType | str) -> dict[str, Any]:
    return {
        "layout": LayoutType(layout).value,
        "nodes": [node_to_dict(n) for n in nodes],
        "edges": [edge_to_dict(e) for e in edges],
    }


def graph_from_dict(data: dict[str, Any]) -> Graph:
    """Decode a graph document; an unknown layout falls back to the default."""
    if not isinstance(data, dict):
        raise ValueError("Graph document must be a JSON object")
    try:
        layout = LayoutType(data.get("layout", DEFAULT_LAYOUT.value))
    except ValueError:
        layout = DEFAULT_LAYOUT
    return Graph(
        nodes=[node_from_dict(n) for n in data.get("nodes", [])],
        edges=[edge_from_dict(e) for e in data.get("edges", [])],
        layout=layout,
    )
