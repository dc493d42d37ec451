"""
Configuration for Mindmark.

All tunable parameters in one place. Loaded from:
1. Defaults (this file)
2. Config file (~/.config/mindmark/config.toml) if exists
3. Environment variables (MINDMARK_*) override file
4. CLI flags override everything
"""

from __future__ import annotations

import contextlib
import logging
import os
import tomllib  # stdlib in 3.11+
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .tokens import DEFAULT_TOKENS, StyleObject

logger = logging.getLogger(__name__)


@dataclass
class RadialConfig:
    """Concentric-ring layout constants (px)."""
    center_x: float = 500.0
    center_y: float = 500.0
    root_radius: float = 100.0  # inner circle used when there are several roots
    level_multiplier: float = 1.5  # ring gap as a multiple of the parent level's average node extent
    node_padding: float = 20.0  # arc length reserved between siblings


@dataclass
class HorizontalConfig:
    """Column layout constants (px)."""
    start_x: float = 100.0
    start_y: float = 100.0
    column_multiplier: float = 1.5  # column gap as a multiple of the previous column's average width
    node_padding: float = 20.0  # vertical gap between stacked nodes


@dataclass
class LayoutConfig:
    radial: RadialConfig = field(default_factory=RadialConfig)
    horizontal: HorizontalConfig = field(default_factory=HorizontalConfig)


@dataclass
class Config:
    """Root config with all settings."""
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    tokens: dict[str, StyleObject | str] = field(default_factory=dict)  # custom tokens over DEFAULT_TOKENS


def get_config_path() -> Path:
    """Get config file path, respecting XDG."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "mindmark" / "config.toml"
    return Path.home() / ".config" / "mindmark" / "config.toml"


def load_config() -> Config:
    """Load config from file if exists, else return defaults."""
    config = Config()
    path = get_config_path()

    if path.exists():
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
            config = _apply_toml(config, data)
        except (OSError, tomllib.TOMLDecodeError, AttributeError, TypeError, ValueError) as e:
            logger.warning("Ignoring config file %s: %s", path, e)
            config = Config()

    # env var overrides
    config = _apply_env(config)

    return config


def _apply_toml(config: Config, data: dict[str, Any]) -> Config:
    """Apply toml data to config."""
    if "radial" in data:
        r = data["radial"]
        for attr in ("center_x", "center_y", "root_radius", "level_multiplier", "node_padding"):
            if attr in r:
                setattr(config.layout.radial, attr, float(r[attr]))

    if "horizontal" in data:
        h = data["horizontal"]
        for attr in ("start_x", "start_y", "column_multiplier", "node_padding"):
            if attr in h:
                setattr(config.layout.horizontal, attr, float(h[attr]))

    if "tokens" in data:
        for name, value in data["tokens"].items():
            if isinstance(value, (str, dict)):
                config.tokens[name] = value
            else:
                logger.warning("Ignoring token %r: expected a table or a string, got %r", name, value)

    return config


def _apply_env(config: Config) -> Config:
    """Apply environment variable overrides."""
    env_map: dict[str, tuple[str, str]] = {
        "MINDMARK_RADIAL_CENTER_X": ("radial", "center_x"),
        "MINDMARK_RADIAL_CENTER_Y": ("radial", "center_y"),
        "MINDMARK_RADIAL_ROOT_RADIUS": ("radial", "root_radius"),
        "MINDMARK_RADIAL_LEVEL_MULTIPLIER": ("radial", "level_multiplier"),
        "MINDMARK_RADIAL_NODE_PADDING": ("radial", "node_padding"),
        "MINDMARK_HORIZONTAL_START_X": ("horizontal", "start_x"),
        "MINDMARK_HORIZONTAL_START_Y": ("horizontal", "start_y"),
        "MINDMARK_HORIZONTAL_COLUMN_MULTIPLIER": ("horizontal", "column_multiplier"),
        "MINDMARK_HORIZONTAL_NODE_PADDING": ("horizontal", "node_padding"),
    }

    for env_key, (section, attr) in env_map.items():
        val = os.environ.get(env_key)
        if val is not None:
            with contextlib.suppress(ValueError):
                setattr(getattr(config.layout, section), attr, float(val))

    return config


# Module-level config instance, loaded once on first use
_config: Config | None = None


def get_config() -> Config:
    """Get the global config instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Drop the cached config so the next get_config() reloads it."""
    global _config
    _config = None


def get_token_definitions(config: Config | None = None) -> dict[str, StyleObject | str]:
    """DEFAULT_TOKENS with the configured custom tokens layered on top."""
    cfg = config or get_config()
    merged: dict[str, StyleObject | str] = dict(DEFAULT_TOKENS)
    merged.update(cfg.tokens)
    return merged
