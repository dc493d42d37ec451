"""
Unit tests for style token resolution and inline annotations.
"""

import logging

from mindmark.tokens import (
    DEFAULT_TOKENS,
    MAX_TOKEN_DEPTH,
    StyleResolver,
    extract_style_tokens,
    parse_tokens,
    resolve_token,
    restore_style_tokens,
)


def _chain(length: int) -> dict:
    """t0 -> t1 -> ... -> t{length-1} composites ending in an atomic token."""
    defs = {f"t{i}": f"t{i + 1}" for i in range(length)}
    defs[f"t{length}"] = {"x": 1}
    return defs


class TestParseTokens:
    def test_last_token_wins(self):
        assert parse_tokens("a b", {"a": {"x": 1}, "b": {"x": 2}}) == {"x": 2}

    def test_attributes_merge(self):
        result = parse_tokens("color-blue h4 neat", DEFAULT_TOKENS)
        assert result == {"stroke": "#2563eb", "fill": "#dbeafe", "fontSize": 16, "roughness": 1.0}

    def test_empty_style(self):
        assert parse_tokens("", DEFAULT_TOKENS) == {}

    def test_extra_whitespace(self):
        assert parse_tokens("  thin \t  bold ", DEFAULT_TOKENS) == {"strokeWidth": 4}

    def test_unknown_token_skipped_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="mindmark.tokens"):
            result = parse_tokens("thin nope", DEFAULT_TOKENS)
        assert result == {"strokeWidth": 1}
        assert "nope" in caplog.text

    def test_composite_token(self):
        defs = dict(DEFAULT_TOKENS, title="color-red h1 bold")
        assert parse_tokens("title", defs) == {
            "stroke": "#dc2626",
            "fill": "#fee2e2",
            "fontSize": 24,
            "strokeWidth": 4,
        }

    def test_later_token_overrides_composite(self):
        defs = dict(DEFAULT_TOKENS, title="color-red h1")
        result = parse_tokens("title color-blue", defs)
        assert result["stroke"] == "#2563eb"
        assert result["fontSize"] == 24

    def test_short_chain_resolves(self):
        assert parse_tokens("t0", _chain(5)) == {"x": 1}

    def test_long_chain_halts_at_depth_limit(self, caplog):
        with caplog.at_level(logging.WARNING, logger="mindmark.tokens"):
            result = parse_tokens("t0", _chain(15))
        assert result == {}
        assert "depth exceeded" in caplog.text

    def test_chain_at_limit_still_resolves(self):
        # t0 is expanded at depth 0, the atomic token is reached at depth MAX
        assert parse_tokens("t0", _chain(MAX_TOKEN_DEPTH)) == {"x": 1}

    def test_cycle_terminates(self):
        defs = {"a": "b", "b": "a", "c": {"y": 3}}
        assert parse_tokens("a c", defs) == {"y": 3}

    def test_pure(self):
        defs = {"a": {"x": 1}, "b": "a"}
        first = parse_tokens("b", defs)
        first["x"] = 99
        assert defs == {"a": {"x": 1}, "b": "a"}
        assert parse_tokens("b", defs) == {"x": 1}

    def test_defaults_not_aliased(self):
        result = parse_tokens("thin", DEFAULT_TOKENS)
        result["strokeWidth"] = 100
        assert DEFAULT_TOKENS["thin"] == {"strokeWidth": 1}


class TestResolveToken:
    def test_atomic(self):
        assert resolve_token("shape-circle", DEFAULT_TOKENS, 0) == {"shape": "circle"}

    def test_invalid_value_type(self, caplog):
        with caplog.at_level(logging.WARNING, logger="mindmark.tokens"):
            assert resolve_token("n", {"n": 42}, 0) == {}
        assert "Invalid token value" in caplog.text


class TestStyleResolver:
    def test_caches_per_style(self):
        defs = {"a": {"x": 1}}
        resolver = StyleResolver(defs)
        assert resolver.resolve("a") == {"x": 1}
        defs["a"] = {"x": 2}
        assert resolver.resolve("a") == {"x": 1}
        resolver.clear()
        assert resolver.resolve("a") == {"x": 2}

    def test_returns_copies(self):
        resolver = StyleResolver(DEFAULT_TOKENS)
        resolver.resolve("thin")["strokeWidth"] = 50
        assert resolver.resolve("thin") == {"strokeWidth": 1}

    def test_whitespace_variants_share_entry(self):
        resolver = StyleResolver(DEFAULT_TOKENS)
        assert resolver.resolve("thin  bold") == resolver.resolve(" thin bold ")


class TestStyleAnnotations:
    def test_extract(self):
        assert extract_style_tokens("Header {.color-blue .h1}") == ("Header", ["color-blue", "h1"])

    def test_no_annotation(self):
        assert extract_style_tokens("No tokens") == ("No tokens", [])

    def test_annotation_must_be_trailing(self):
        text = "A {.x} in the middle"
        assert extract_style_tokens(text) == (text, [])

    def test_braces_without_dots_are_content(self):
        assert extract_style_tokens("set {a, b}") == ("set {a, b}", [])

    def test_annotation_only(self):
        assert extract_style_tokens("{.thin}") == ("", ["thin"])

    def test_restore(self):
        assert restore_style_tokens("Header", ["color-blue", "h1"]) == "Header {.color-blue .h1}"

    def test_restore_without_tokens(self):
        assert restore_style_tokens("Plain", []) == "Plain"

    def test_restore_is_inverse(self):
        content, tokens = extract_style_tokens("Item {.rough .shape-rect}")
        assert restore_style_tokens(content, tokens) == "Item {.rough .shape-rect}"
