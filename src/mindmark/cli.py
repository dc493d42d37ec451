"""
CLI interface for Mindmark.

Pipe-friendly front end to the four core operations:

    mindmark parse notes.md            # markdown -> graph JSON
    mindmark serialize graph.json      # graph JSON -> markdown
    mindmark layout notes.md --node-size 120x40
    mindmark style "color-blue h2 rough"
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import Any

from .config import get_config, get_token_definitions
from .dom import Graph, LayoutType, Size, graph_from_dict, graph_to_dict
from .layout import apply_layout
from .parser import parse
from .serializer import serialize
from .tokens import parse_tokens


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="mindmark",
        description="Convert markdown outlines to mind-map graphs and back",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log diagnostics (unknown tokens, skipped items) to stderr",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    parse_cmd = commands.add_parser("parse", help="Markdown -> graph JSON")
    parse_cmd.add_argument("file", nargs="?", help="Input file (reads from stdin if not provided)")

    serialize_cmd = commands.add_parser("serialize", help="Graph JSON -> markdown")
    serialize_cmd.add_argument("file", nargs="?", help="Input file (reads from stdin if not provided)")

    layout_cmd = commands.add_parser("layout", help="Markdown or graph JSON -> positioned graph JSON")
    layout_cmd.add_argument("file", nargs="?", help="Input file (reads from stdin if not provided)")
    layout_cmd.add_argument(
        "--layout",
        "-l",
        choices=[t.value for t in LayoutType],
        help="Override the document's layout type",
    )
    layout_cmd.add_argument(
        "--node-size",
        "-n",
        type=str,
        help="Size as WIDTHxHEIGHT for nodes without a measured size (e.g., 120x40)",
    )

    style_cmd = commands.add_parser("style", help="Resolve a style string to attributes JSON")
    style_cmd.add_argument("style", help="Space-separated token names (e.g., 'color-blue h2')")
    style_cmd.add_argument(
        "--tokens",
        "-t",
        type=str,
        help="JSON file of extra token definitions",
    )

    return parser.parse_args(args)


def read_input(filepath: str | None) -> str:
    """Read from file or stdin."""
    if filepath:
        with open(filepath, encoding="utf-8") as f:
            return f.read()
    return sys.stdin.read()


def parse_size(size_str: str) -> Size:
    """
    Parse size string like '120x40' into a Size.
    """
    parts = size_str.lower().split("x")
    if len(parts) != 2:
        raise ValueError(f"Invalid size format: {size_str}. Use WIDTHxHEIGHT (e.g., 120x40)")

    try:
        width = float(parts[0])
        height = float(parts[1])
    except ValueError as e:
        raise ValueError(
            f"Invalid size format: {size_str}. Both WIDTH and HEIGHT must be numbers"
        ) from e

    if width <= 0:
        raise ValueError(f"Width must be > 0, got {width:g}")
    if height <= 0:
        raise ValueError(f"Height must be > 0, got {height:g}")

    return Size(width, height)


def load_graph(content: str) -> Graph:
    """
    Read a graph from either graph JSON or markdown.

    Raises ValueError when the content is neither.
    """
    if content.lstrip().startswith("{"):
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid graph JSON: {e}") from e
        return graph_from_dict(data)

    result = parse(content)
    if not result.ok:
        raise ValueError(f"{result.error.type}: {result.error.message}")
    return result.value


def load_token_file(path: str) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Token file {path} must contain a JSON object")
    return data


def dump_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def run_parse(content: str) -> str:
    result = parse(content)
    if not result.ok:
        raise ValueError(f"{result.error.type}: {result.error.message}")
    graph = result.value
    return dump_json(graph_to_dict(graph.nodes, graph.edges, graph.layout))


def run_serialize(content: str) -> str:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid graph JSON: {e}") from e
    graph = graph_from_dict(data)

    result = serialize(graph.nodes, graph.edges, graph.layout)
    if not result.ok:
        raise ValueError(f"{result.error.type}: {result.error.message}")
    return result.value


def run_layout(content: str, layout: str | None, node_size: Size | None) -> str:
    graph = load_graph(content)
    layout_type = LayoutType(layout) if layout else graph.layout

    nodes = graph.nodes
    if node_size is not None:
        nodes = [
            n if n.measured_size is not None else replace(n, measured_size=Size(node_size.width, node_size.height))
            for n in nodes
        ]

    result = apply_layout(nodes, graph.edges, layout_type, get_config().layout)
    if not result.ok:
        raise ValueError(f"{result.error.type}: {result.error.message}")
    return dump_json(graph_to_dict(result.value, graph.edges, layout_type))


def run_style(style: str, token_file: str | None) -> str:
    token_defs = get_token_definitions()
    if token_file:
        token_defs.update(load_token_file(token_file))
    return dump_json(parse_tokens(style, token_defs))


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parsed = parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if parsed.command == "style":
        try:
            print(run_style(parsed.style, parsed.tokens))
        except (OSError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        return 0

    # Read content
    try:
        content = read_input(parsed.file)
    except FileNotFoundError:
        print(f"Error: File not found: {parsed.file}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error reading input: {e}", file=sys.stderr)
        return 1

    try:
        if parsed.command == "parse":
            output = run_parse(content)
        elif parsed.command == "serialize":
            output = run_serialize(content)
        else:
            node_size = parse_size(parsed.node_size) if parsed.node_size else None
            output = run_layout(content, parsed.layout, node_size)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
