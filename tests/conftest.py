"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import os

import pytest

from mindmark.config import reset_config
from mindmark.dom import Size
from mindmark.factories import create_edge, create_header_node, create_text_node


@pytest.fixture(autouse=True)
def isolate_config(monkeypatch, tmp_path):
    """Never read the developer's ~/.config/mindmark or MINDMARK_* env vars."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for key in list(os.environ):
        if key.startswith("MINDMARK_"):
            monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def measured_tree():
    """Root header with two measured list children (widths 100 and 120)."""
    root = create_header_node("Root", 1).value
    root.measured_size = Size(150, 60)
    left = create_text_node("Left", 1).value
    left.measured_size = Size(100, 40)
    right = create_text_node("Right", 1).value
    right.measured_size = Size(120, 50)
    edges = [create_edge(root.id, left.id).value, create_edge(root.id, right.id).value]
    return [root, left, right], edges
