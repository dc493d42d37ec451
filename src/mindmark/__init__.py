"""Mindmark: markdown outline <-> mind-map graph, with layout and style tokens."""

from .dom import (
    CodeNode,
    Edge,
    Err,
    Graph,
    HeaderNode,
    ImageNode,
    LayoutError,
    LayoutType,
    Node,
    Ok,
    ParseError,
    Position,
    SerializeError,
    Size,
    TextNode,
    ValidationError,
)
from .layout import apply_layout
from .parser import parse
from .serializer import serialize
from .tokens import DEFAULT_TOKENS, StyleResolver, parse_tokens

__all__ = [
    "CodeNode",
    "DEFAULT_TOKENS",
    "Edge",
    "Err",
    "Graph",
    "HeaderNode",
    "ImageNode",
    "LayoutError",
    "LayoutType",
    "Node",
    "Ok",
    "ParseError",
    "Position",
    "SerializeError",
    "Size",
    "StyleResolver",
    "TextNode",
    "ValidationError",
    "apply_layout",
    "parse",
    "parse_tokens",
    "serialize",
]
