"""
Node and edge factories.

Every factory validates its input and returns Ok(value) or Err(ValidationError)
instead of raising, so the parser can decide per node whether a failure aborts
the document or just skips one item.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlsplit

from .dom import (
    MAX_HEADER_LEVEL,
    MAX_LIST_LEVEL,
    CodeNode,
    Edge,
    Err,
    HeaderNode,
    ImageNode,
    Ok,
    Result,
    TextNode,
    ValidationError,
)

ALLOWED_URL_SCHEMES = ("http", "https")


# ============================================================================
# Validation helpers
# ============================================================================

def validate_level(level: Any, min_level: int, max_level: int, field_name: str) -> Result[bool, ValidationError]:
    if isinstance(level, bool) or not isinstance(level, int):
        return Err(ValidationError(
            type="invalid_field",
            message=f"{field_name} must be an integer",
            field=field_name,
            value=level,
        ))
    if level < min_level or level > max_level:
        return Err(ValidationError(
            type="out_of_range",
            message=f"{field_name} must be between {min_level} and {max_level}",
            field=field_name,
            value=level,
        ))
    return Ok(True)


def validate_non_empty_string(value: Any, field_name: str) -> Result[bool, ValidationError]:
    if not isinstance(value, str) or not value.strip():
        return Err(ValidationError(
            type="required_field",
            message=f"{field_name} is required and must be a non-empty string",
            field=field_name,
            value=value,
        ))
    return Ok(True)


def validate_url(url: Any, field_name: str) -> Result[bool, ValidationError]:
    """
    Accept http(s) URLs and scheme-less relative paths.

    Anything else with a scheme (javascript:, ftp:, ...) is rejected, as is
    whitespace inside the URL, which would not survive a markdown round trip.
    """
    required = validate_non_empty_string(url, field_name)
    if not required.ok:
        return required
    if any(ch.isspace() for ch in url):
        return Err(ValidationError(
            type="invalid_field",
            message=f"{field_name} must not contain whitespace",
            field=field_name,
            value=url,
        ))
    scheme = urlsplit(url).scheme.lower()
    if scheme and scheme not in ALLOWED_URL_SCHEMES:
        return Err(ValidationError(
            type="invalid_field",
            message=f"{field_name} must use http or https protocol",
            field=field_name,
            value=url,
        ))
    return Ok(True)


# ============================================================================
# Node factories
# ============================================================================

def create_text_node(content: str, level: int, style: str = "") -> Result[TextNode, ValidationError]:
    """Create a list-item node (level 1-5)."""
    checked = validate_non_empty_string(content, "content")
    if not checked.ok:
        return checked
    checked = validate_level(level, 1, MAX_LIST_LEVEL, "level")
    if not checked.ok:
        return checked
    return Ok(TextNode(content=content.strip(), level=level, style=style))


def create_header_node(content: str, level: int, style: str = "") -> Result[HeaderNode, ValidationError]:
    """Create a heading node (level 1-6)."""
    checked = validate_non_empty_string(content, "content")
    if not checked.ok:
        return checked
    checked = validate_level(level, 1, MAX_HEADER_LEVEL, "level")
    if not checked.ok:
        return checked
    return Ok(HeaderNode(content=content.strip(), level=level, style=style))


def create_code_node(content: str, language: str, style: str = "") -> Result[CodeNode, ValidationError]:
    """Create a code node. Empty code is allowed, a missing language is not."""
    if not isinstance(content, str):
        return Err(ValidationError(
            type="invalid_field",
            message="content must be a string",
            field="content",
            value=content,
        ))
    checked = validate_non_empty_string(language, "language")
    if not checked.ok:
        return checked
    return Ok(CodeNode(content=content, language=language.strip().lower(), style=style))


def create_image_node(alt_text: str, image_url: str, style: str = "") -> Result[ImageNode, ValidationError]:
    checked = validate_non_empty_string(alt_text, "altText")
    if not checked.ok:
        return checked
    checked = validate_url(image_url, "imageUrl")
    if not checked.ok:
        return checked
    alt = alt_text.strip()
    return Ok(ImageNode(content=alt, alt_text=alt, image_url=image_url, style=style))


# ============================================================================
# Edge factory
# ============================================================================

def create_edge(source_id: str, target_id: str) -> Result[Edge, ValidationError]:
    checked = validate_non_empty_string(source_id, "sourceId")
    if not checked.ok:
        return checked
    checked = validate_non_empty_string(target_id, "targetId")
    if not checked.ok:
        return checked
    if source_id == target_id:
        return Err(ValidationError(
            type="invalid_field",
            message="Cannot create edge with same source and target (self-loop)",
            field="targetId",
            value=target_id,
        ))
    return Ok(Edge(source_id=source_id, target_id=target_id))
