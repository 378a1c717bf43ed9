"""YAML front-matter extraction into a typed, lossless :class:`Metadata`."""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import yaml

from scoria.markdown import fence_lines, front_matter_node, parse

log = logging.getLogger(__name__)

WELL_KNOWN_KEYS = frozenset({"date", "tags", "aliases"})

# Accepted string spellings for ``date:``, tried in order.  ``%d-%b-%y`` is
# what freshly created notes are stamped with.
_DATE_FORMATS = (
    "%Y-%m-%d",
    "%d-%b-%y",
    "%d-%b-%Y",
    "%Y/%m/%d",
    "%d/%m/%Y",
    "%d %B %Y",
    "%B %d, %Y",
)


def _frozen(mapping: Mapping[Any, Any]) -> Mapping[Any, Any]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class Metadata:
    """Strongly-typed view of a note's front-matter.

    ``extra`` keeps every key other than ``date``, ``tags`` and ``aliases``
    exactly as YAML deserialised it (keys included, so ``1`` and ``"1"`` stay
    apart), so nothing is lost.  Snapshots compare by value but are not
    hashable.
    """

    date: dt.date | None = None
    tags: tuple[str, ...] = ()
    aliases: tuple[str, ...] = ()
    extra: Mapping[Any, Any] = field(default_factory=lambda: _frozen({}))

    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", tuple(self.tags))
        object.__setattr__(self, "aliases", tuple(self.aliases))
        clashing = WELL_KNOWN_KEYS.intersection(self.extra)
        if clashing:
            raise ValueError(f"extra must not contain {sorted(clashing)}")
        if not isinstance(self.extra, MappingProxyType):
            object.__setattr__(self, "extra", _frozen(self.extra))

    @property
    def has_badges(self) -> bool:
        """True when the renderer should show a badge row."""
        return bool(self.tags or self.aliases)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat() if self.date else None,
            "tags": list(self.tags),
            "aliases": list(self.aliases),
            "extra": dict(self.extra),
        }


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------


def to_string_list(value: Any) -> tuple[str, ...]:
    """Scalar -> singleton, sequence -> stringified non-blank items, ``None`` -> empty."""
    if value is None:
        return ()
    if isinstance(value, (list, tuple, set)):
        items = [str(v) for v in value if v is not None]
    else:
        items = [str(value)]
    return tuple(s for s in items if s.strip())


def to_date(value: Any) -> dt.date | None:
    """Best-effort conversion of a ``date:`` value; ``None`` when unparseable."""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    for fmt in _DATE_FORMATS:
        try:
            return dt.datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    try:
        return dt.datetime.fromisoformat(text).date()
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def extract_metadata(raw_text: str) -> Metadata | None:
    """Parse the front-matter fence at the top of *raw_text*.

    Returns ``None`` when there is no fence, the fence is incomplete, or its
    YAML is broken.  Never raises for malformed front-matter.
    """
    node = front_matter_node(parse(raw_text))
    if node is None:
        return None

    lines = fence_lines(raw_text, node)
    if lines is None or len(lines) < 3:  # fence + something + fence
        return None
    inner = "\n".join(lines[1:-1])

    try:
        data = yaml.safe_load(inner)
    except yaml.YAMLError as e:
        log.debug("Ignoring malformed front-matter: %s", e)
        return None

    if data is None:
        return Metadata()
    if not isinstance(data, dict):
        log.debug("Ignoring front-matter that is not a mapping (%s)", type(data).__name__)
        return None

    return Metadata(
        date=to_date(data.get("date")),
        tags=to_string_list(data.get("tags")),
        aliases=to_string_list(data.get("aliases")),
        extra={k: v for k, v in data.items() if k not in WELL_KNOWN_KEYS},
    )
