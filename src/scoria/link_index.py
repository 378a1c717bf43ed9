"""NoteLinkIndex: vault-wide lookup from slug / full path to a Note.

The index is an ordinary object owned by whoever loads the vault (usually a
:class:`scoria.workspace.Workspace`).  Slug keys and path keys are both
compared case-insensitively.  A later registration for a slug that is
already taken wins; the collision is logged.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from scoria.note import Note

log = logging.getLogger(__name__)

_MARKDOWN_SUFFIX = ".md"


def slug_of(name: str) -> str:
    """Convert a filename or wiki-link target to its slug (strip directory / ``.md``)."""
    base = name.replace("\\", "/").rsplit("/", 1)[-1].strip()
    if base.lower().endswith(_MARKDOWN_SUFFIX):
        base = base[: -len(_MARKDOWN_SUFFIX)]
    return base


def canonical_path(path: str | os.PathLike[str]) -> str:
    """Absolute, normalised form of *path* with ``/`` separators."""
    return os.path.normpath(os.path.abspath(os.fspath(path))).replace("\\", "/")


def _key(value: str) -> str:
    return value.casefold()


class NoteLinkIndex:
    """Bidirectional ``slug -> Note`` and ``path -> Note`` lookup."""

    def __init__(self, notes: Iterable["Note"] | None = None) -> None:
        self._lock = threading.Lock()
        self._by_slug: dict[str, Note] = {}
        self._by_path: dict[str, Note] = {}
        if notes is not None:
            self.rebuild(notes)

    # ------------------------------------------------------------------
    # Build / refresh
    # ------------------------------------------------------------------

    def add_or_update(self, note: "Note") -> None:
        """Register *note* under its slug and canonical path, overwriting older entries."""
        with self._lock:
            self._register(self._by_slug, self._by_path, note)

    def rebuild(self, notes: Iterable["Note"]) -> None:
        """Replace the whole index with the file notes in *notes*, in order.

        The new maps are built aside and swapped in at once, so a concurrent
        resolve sees either the old index or the new one.
        """
        by_slug: dict[str, Note] = {}
        by_path: dict[str, Note] = {}
        count = 0
        for note in notes:
            if note.is_directory:
                continue
            self._register(by_slug, by_path, note)
            count += 1
        with self._lock:
            self._by_slug = by_slug
            self._by_path = by_path
        log.debug("Link index rebuilt: %d notes, %d slugs", count, len(by_slug))

    @staticmethod
    def _register(by_slug: dict[str, "Note"], by_path: dict[str, "Note"], note: "Note") -> None:
        slug_key = _key(slug_of(note.name))
        previous = by_slug.get(slug_key)
        if previous is not None and previous is not note:
            log.warning(
                "Duplicate note slug %r: %s shadows %s", slug_of(note.name), note.path, previous.path
            )
        by_slug[slug_key] = note
        by_path[_key(canonical_path(note.path))] = note

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------

    def resolve_by_slug(self, slug: str) -> "Note | None":
        with self._lock:
            return self._by_slug.get(_key(slug))

    def resolve_by_path(self, path: str | os.PathLike[str]) -> "Note | None":
        key = _key(canonical_path(path))
        with self._lock:
            return self._by_path.get(key)

    def notes(self) -> list["Note"]:
        """Distinct notes reachable through the slug map."""
        with self._lock:
            return list(self._by_slug.values())

    def __contains__(self, slug: object) -> bool:
        return isinstance(slug, str) and self.resolve_by_slug(slug) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_slug)

