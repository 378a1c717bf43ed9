"""Engine configuration.

Settings live in an optional TOML file::

    [scoria]
    indent_unit       = 20
    max_preview_depth = 1
    palette           = ["#FDE2E4", "#E2ECE9", "#BEE1E6"]
    ignored_dirs      = [".obsidian", ".trash"]

and can be overridden from the environment with ``SCORIA_INDENT_UNIT`` and
``SCORIA_MAX_PREVIEW_DEPTH``.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

log = logging.getLogger(__name__)

# Pastel tints for date/tag/alias pills.
DEFAULT_PALETTE: tuple[str, ...] = (
    "#FDE2E4",
    "#FAD2E1",
    "#E2ECE9",
    "#BEE1E6",
    "#F0EFEB",
    "#DFE7FD",
    "#CDDAFD",
    "#FFF1E6",
    "#E9F5DB",
    "#F1E3F3",
)

_ENV_OVERRIDES = {
    "SCORIA_INDENT_UNIT": "indent_unit",
    "SCORIA_MAX_PREVIEW_DEPTH": "max_preview_depth",
}


@dataclass(frozen=True)
class EngineConfig:
    """Visual and traversal knobs shared by the renderer and the scanner."""

    #: Horizontal indent added per nested-list level.
    indent_unit: int = 20
    #: Heading font size is ``max(min_font_size, heading_base_size - level * heading_step)``.
    heading_base_size: int = 32
    heading_step: int = 4
    min_font_size: int = 12
    #: How many levels of hover previews may be stacked.  Links rendered at
    #: this depth carry no preview of their own.
    max_preview_depth: int = 1
    palette: tuple[str, ...] = DEFAULT_PALETTE
    #: Directory names the folder scanner never descends into.
    ignored_dirs: frozenset[str] = field(default_factory=lambda: frozenset({".obsidian"}))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EngineConfig":
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                log.warning("Ignoring unknown config key %r", key)
                continue
            if key == "palette":
                value = tuple(str(v) for v in value)
                if not value:
                    raise ValueError("palette must contain at least one colour")
            elif key == "ignored_dirs":
                value = frozenset(str(v) for v in value)
            else:
                value = int(value)
            kwargs[key] = value
        return cls(**kwargs)

    def with_env(self, environ: dict[str, str] | None = None) -> "EngineConfig":
        """Return a copy with ``SCORIA_*`` environment overrides applied."""
        env = os.environ if environ is None else environ
        changes: dict[str, int] = {}
        for var, attr in _ENV_OVERRIDES.items():
            raw = env.get(var)
            if raw is None:
                continue
            try:
                changes[attr] = int(raw)
            except ValueError:
                log.warning("Ignoring %s=%r: not an integer", var, raw)
        return replace(self, **changes) if changes else self


def load_config(path: Path | None = None) -> EngineConfig:
    """Load the ``[scoria]`` table of *path* (if given and present), then apply env overrides."""
    config = EngineConfig()
    if path is not None and Path(path).is_file():
        with Path(path).open("rb") as fh:
            data = tomllib.load(fh)
        config = EngineConfig.from_dict(data.get("scoria", {}))
        log.debug("Loaded engine config from %s", path)
    return config.with_env()
