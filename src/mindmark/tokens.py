"""
Style tokens.

A node's style is a space-separated list of token names ("color-blue h4 neat").
A token is either atomic (a dict of rendering attributes) or composite (a
string naming other tokens). Resolution merges attributes left to right, so
later tokens override earlier ones.

Composite expansion is bounded by MAX_TOKEN_DEPTH rather than cycle
detection: a circular definition just unwinds until the cap and stops.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)

MAX_TOKEN_DEPTH = 10

StyleObject = dict[str, Any]
TokenDefinitions = Mapping[str, "StyleObject | str"]

# Trailing "{.tok1 .tok2}" annotation, optional surrounding whitespace
STYLE_ANNOTATION_PATTERN = re.compile(r"\s*\{(\.[\w-]+(?:\s+\.[\w-]+)*)\}\s*$")

DEFAULT_TOKENS: dict[str, StyleObject | str] = {
    # Colors
    "color-blue": {"stroke": "#2563eb", "fill": "#dbeafe"},
    "color-red": {"stroke": "#dc2626", "fill": "#fee2e2"},
    "color-mint": {"stroke": "#059669", "fill": "#d1fae5"},
    "color-yellow": {"stroke": "#ca8a04", "fill": "#fef9c3"},
    "color-gray": {"stroke": "#64748b", "fill": "#f1f5f9"},
    "color-purple": {"stroke": "#7c3aed", "fill": "#ede9fe"},
    "color-orange": {"stroke": "#ea580c", "fill": "#fed7aa"},
    "color-pink": {"stroke": "#db2777", "fill": "#fce7f3"},
    # Sizes (font only; boxes are sized from content)
    "h1": {"fontSize": 24},
    "h2": {"fontSize": 20},
    "h3": {"fontSize": 18},
    "h4": {"fontSize": 16},
    "h5": {"fontSize": 14},
    "h6": {"fontSize": 12},
    # Feel (hand-drawn roughness)
    "smooth": {"roughness": 0.5},
    "neat": {"roughness": 1.0},
    "rough": {"roughness": 1.5},
    "sketchy": {"roughness": 2.0},
    "messy": {"roughness": 2.5},
    # Border
    "thin": {"strokeWidth": 1},
    "normal": {"strokeWidth": 2},
    "thick": {"strokeWidth": 3},
    "bold": {"strokeWidth": 4},
    # Shape
    "shape-none": {"shape": "none"},
    "shape-rect": {"shape": "rect"},
    "shape-circle": {"shape": "circle"},
    "shape-rounded": {"shape": "rounded"},
}


def parse_tokens(style: str, token_defs: TokenDefinitions, depth: int = 0) -> StyleObject:
    """
    Resolve a style string into one merged attribute dict.

    Unknown tokens are skipped with a warning. Past MAX_TOKEN_DEPTH nested
    composite expansions the branch yields nothing.

    >>> parse_tokens("a b", {"a": {"x": 1}, "b": {"x": 2}})
    {'x': 2}
    """
    if depth > MAX_TOKEN_DEPTH:
        logger.warning(
            "Token recursion depth exceeded (max %d levels). Style: %r",
            MAX_TOKEN_DEPTH,
            style,
        )
        return {}

    result: StyleObject = {}
    for token_name in style.split():
        result.update(resolve_token(token_name, token_defs, depth))
    return result


def resolve_token(token_name: str, token_defs: TokenDefinitions, depth: int) -> StyleObject:
    """Resolve one token name; composite tokens recurse one level deeper."""
    value = token_defs.get(token_name)

    if value is None:
        logger.warning("Unknown token: %r", token_name)
        return {}

    if isinstance(value, str):
        return parse_tokens(value, token_defs, depth + 1)

    if isinstance(value, Mapping):
        return dict(value)

    logger.warning("Invalid token value type for %r: %r", token_name, value)
    return {}


class StyleResolver:
    """
    Memoizing front end to parse_tokens for one token dictionary.

    The renderer resolves the same handful of style strings on every repaint;
    results are cached per style string and handed out as copies so callers
    cannot corrupt the cache.
    """

    def __init__(self, token_defs: TokenDefinitions):
        self._token_defs = token_defs
        self._cache: dict[str, StyleObject] = {}

    def resolve(self, style: str) -> StyleObject:
        key = " ".join(style.split())
        if key not in self._cache:
            self._cache[key] = parse_tokens(key, self._token_defs)
        return dict(self._cache[key])

    def clear(self) -> None:
        self._cache.clear()


# ============================================================================
# Inline annotations
# ============================================================================

def extract_style_tokens(text: str) -> tuple[str, list[str]]:
    """
    Split a trailing style annotation off a line of text.

    >>> extract_style_tokens("Header {.color-blue .h1}")
    ('Header', ['color-blue', 'h1'])
    """
    match = STYLE_ANNOTATION_PATTERN.search(text)
    if not match:
        return text, []
    content = text[:match.start()].rstrip()
    tokens = [t.lstrip(".") for t in match.group(1).split()]
    return content, [t for t in tokens if t]


def restore_style_tokens(content: str, tokens: list[str]) -> str:
    """Inverse of extract_style_tokens."""
    if not tokens:
        return content
    annotation = " ".join(f".{t}" for t in tokens)
    return f"{content} {{{annotation}}}"
