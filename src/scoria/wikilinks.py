"""``[[WikiLink]]`` scanning for paragraph text."""

from __future__ import annotations

import re
from dataclasses import dataclass

from scoria.link_index import slug_of

# [[Target]] or [[Target|Alias]]
WIKILINK_RE = re.compile(r"\[\[([^\[\]|]+)(?:\|([^\[\]]*))?\]\]")
# Obsidian heading / block suffixes on a target: Note#Heading, Note^block
_SUFFIX_RE = re.compile(r"[#^].*$")


@dataclass(frozen=True)
class WikiLink:
    """One ``[[target|alias]]`` occurrence."""

    target: str
    alias: str | None
    start: int
    end: int

    @property
    def slug(self) -> str:
        """Lookup key: target without directory, ``.md`` or ``#``/``^`` suffix."""
        return slug_of(_SUFFIX_RE.sub("", self.target))

    @property
    def display(self) -> str:
        """Alias when given, otherwise the filename portion of the target."""
        if self.alias is not None and self.alias.strip():
            return self.alias.strip()
        return self.target.replace("\\", "/").rsplit("/", 1)[-1]


def split_wikilinks(text: str) -> list[str | WikiLink]:
    """Split *text* into plain strings and :class:`WikiLink` items, in order.

    Text between, before and after links is kept verbatim; empty strings are
    not emitted.
    """
    parts: list[str | WikiLink] = []
    pos = 0
    for m in WIKILINK_RE.finditer(text):
        target = m.group(1).strip()
        if not target:
            continue
        if m.start() > pos:
            parts.append(text[pos : m.start()])
        parts.append(WikiLink(target, m.group(2), m.start(), m.end()))
        pos = m.end()
    if pos < len(text):
        parts.append(text[pos:])
    return parts

