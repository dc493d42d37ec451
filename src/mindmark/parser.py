"""
Markdown -> graph parser.

Lexes the document with markdown-it-py and walks the block tree in document
order, turning headings, list items, code blocks and images into nodes and
their nesting into parent -> child edges.

Structure:
- "# A" opens heading slot 1; "### B" attaches to the nearest open slot with
  a smaller level (A), even when levels are skipped
- a list's first-level items attach to the deepest open heading; nested
  items attach to the item they are nested under
- code blocks and images attach to the most recently opened heading or item
- "---" starts a new group and closes every open slot
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from .dom import (
    DEFAULT_CODE_LANGUAGE,
    DEFAULT_LAYOUT,
    MAX_LIST_LEVEL,
    Edge,
    Err,
    Graph,
    LayoutType,
    Node,
    Ok,
    ParseError,
    Result,
    new_id,
)
from .factories import (
    create_code_node,
    create_edge,
    create_header_node,
    create_image_node,
    create_text_node,
)
from .tokens import extract_style_tokens

logger = logging.getLogger(__name__)

# <!-- layout: horizontal -->, <!-- mindmark-layout: radial -->, ...
LAYOUT_DIRECTIVE_PATTERN = re.compile(r"<!--\s*(?:[\w-]+-)?layout:\s*([\w-]+)\s*-->", re.IGNORECASE)

LIST_TYPES = ("bullet_list", "ordered_list")
CODE_TYPES = ("fence", "code_block")

_LEXER = MarkdownIt("commonmark")


@dataclass
class HierarchyStack:
    """Open heading and list-item slots for one parse call."""
    headings: dict[int, Node] = field(default_factory=dict)  # heading level -> node
    items: dict[int, Node] = field(default_factory=dict)  # list nesting depth (uncapped) -> node
    last: Node | None = None  # most recently opened heading or item

    def heading_parent(self, level: int) -> Node | None:
        """Nearest open heading with a strictly smaller level."""
        lower = [lvl for lvl in self.headings if lvl < level]
        return self.headings[max(lower)] if lower else None

    def deepest_heading(self) -> Node | None:
        return self.headings[max(self.headings)] if self.headings else None

    def item_parent(self, depth: int) -> Node | None:
        """Item enclosing a list at this depth; None for a first-level list."""
        return self.items.get(depth - 1) if depth > 1 else None

    def open_heading(self, level: int, node: Node) -> None:
        for lvl in [lvl for lvl in self.headings if lvl >= level]:
            del self.headings[lvl]
        self.items.clear()
        self.headings[level] = node
        self.last = node

    def open_item(self, depth: int, node: Node) -> None:
        for d in [d for d in self.items if d >= depth]:
            del self.items[d]
        self.items[depth] = node
        self.last = node

    def clear(self) -> None:
        self.headings.clear()
        self.items.clear()
        self.last = None


class _Abort(Exception):
    """Stops the walk with a ParseError."""

    def __init__(self, error: ParseError):
        super().__init__(error.message)
        self.error = error


def extract_layout_directive(text: str) -> LayoutType:
    """Layout named by the directive comment, or the default when absent/unknown."""
    match = LAYOUT_DIRECTIVE_PATTERN.search(text)
    if match:
        try:
            return LayoutType(match.group(1).lower())
        except ValueError:
            logger.debug("Ignoring unknown layout directive %r", match.group(1))
    return DEFAULT_LAYOUT


def parse(text: str) -> Result[Graph, ParseError]:
    """
    Parse markdown text into nodes, edges and a layout type.

    Never raises: lexer failures come back as Err(ParseError).
    """
    layout = extract_layout_directive(text or "")

    if not text or not text.strip():
        return Ok(Graph(nodes=[], edges=[], layout=layout))

    try:
        tree = SyntaxTreeNode(_LEXER.parse(text))
    except Exception as e:
        return Err(ParseError(type="syntax_error", message=str(e) or "Unknown parsing error"))

    walker = _DocumentWalker()
    try:
        for block in tree.children:
            walker.visit(block)
    except _Abort as abort:
        return Err(abort.error)

    return Ok(Graph(nodes=walker.nodes, edges=walker.edges, layout=layout))


class _DocumentWalker:
    """Accumulates nodes and edges while visiting top-level blocks."""

    def __init__(self):
        self.nodes: list[Node] = []
        self.edges: list[Edge] = []
        self.stack = HierarchyStack()
        self.group_id: str | None = None

    def visit(self, block: SyntaxTreeNode) -> None:
        if block.type == "heading":
            self._heading(block)
        elif block.type in LIST_TYPES:
            self._list(block, depth=1)
        elif block.type in CODE_TYPES:
            self._code(block, parent=self.stack.last)
        elif block.type == "paragraph":
            self._image(block, parent=self.stack.last)
        elif block.type == "hr":
            self.group_id = new_id()
            self.stack.clear()
        # paragraphs of plain text, quotes, html (incl. the layout directive) carry no nodes

    def _add(self, node: Node, parent: Node | None) -> None:
        node.group_id = self.group_id
        self.nodes.append(node)
        if parent is not None:
            edge = create_edge(parent.id, node.id)
            if edge.ok:
                self.edges.append(edge.value)

    def _heading(self, block: SyntaxTreeNode) -> None:
        level = int(block.tag[1])
        # setext headings may span lines; keep them on one
        text = " ".join(line.strip() for line in _inline_text(block).splitlines())
        content, tokens = extract_style_tokens(text)

        created = create_header_node(content, level, " ".join(tokens))
        if not created.ok:
            raise _Abort(ParseError(
                type="token_extraction_error",
                message=f"Failed to create header node: {created.error.message}",
                line=_line_of(block),
            ))

        node = created.value
        self._add(node, self.stack.heading_parent(level))
        self.stack.open_heading(level, node)

    def _list(self, block: SyntaxTreeNode, depth: int) -> None:
        level = min(depth, MAX_LIST_LEVEL)
        for item in block.children:
            children = item.children
            text = _inline_text(children[0]) if children and children[0].type == "paragraph" else ""
            content, tokens = extract_style_tokens(text)

            created = create_text_node(content, level, " ".join(tokens))
            if not created.ok:
                logger.warning("Skipping list item at line %s: %s", _line_of(item), created.error.message)
                continue

            node = created.value
            self._add(node, self.stack.item_parent(depth) or self.stack.deepest_heading())
            self.stack.open_item(depth, node)

            for child in children[1:]:
                if child.type in LIST_TYPES:
                    self._list(child, depth + 1)
                elif child.type in CODE_TYPES:
                    self._code(child, parent=node)
                elif child.type == "paragraph":
                    self._image(child, parent=node)

    def _code(self, block: SyntaxTreeNode, parent: Node | None) -> None:
        info, tokens = extract_style_tokens(block.info.strip() if block.type == "fence" else "")
        language = info.split()[0] if info.split() else DEFAULT_CODE_LANGUAGE
        code = block.content[:-1] if block.content.endswith("\n") else block.content

        created = create_code_node(code, language, " ".join(tokens))
        if not created.ok:
            logger.warning("Skipping code block at line %s: %s", _line_of(block), created.error.message)
            return
        self._add(created.value, parent)

    def _image(self, block: SyntaxTreeNode, parent: Node | None) -> None:
        """Image-only paragraphs become image nodes; other paragraphs are dropped."""
        inline = block.children[0] if block.children else None
        if inline is None:
            return
        images = [c for c in inline.children if c.type == "image"]
        content, tokens = extract_style_tokens(inline.content.strip())
        if len(images) != 1 or not (content.startswith("![") and content.endswith(")")):
            return

        image = images[0]
        created = create_image_node(image.content, str(image.attrs.get("src", "")), " ".join(tokens))
        if not created.ok:
            logger.warning("Skipping image at line %s: %s", _line_of(block), created.error.message)
            return
        self._add(created.value, parent)


def _inline_text(block: SyntaxTreeNode) -> str:
    """Raw text of a heading/paragraph, taken from its inline child."""
    for child in block.children:
        if child.type == "inline":
            return child.content
    return ""


def _line_of(block: SyntaxTreeNode) -> int | None:
    return block.map[0] + 1 if block.map else None
