"""Core Note dataclass: one file or directory entry in the vault."""

from __future__ import annotations

import weakref
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from scoria.link_index import slug_of

if TYPE_CHECKING:
    from scoria.metadata import Metadata


@dataclass(eq=False)
class Note:
    """A markdown file or a directory in the vault tree.

    Notes compare by identity: there is exactly one ``Note`` per filesystem
    entry.  The parent link is a weak reference so a child never keeps its
    ancestors alive.
    """

    name: str
    path: Path
    is_directory: bool = False
    metadata: "Metadata | None" = None
    children: list["Note"] = field(default_factory=list)
    _parent_ref: "weakref.ref[Note] | None" = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    def __setattr__(self, key: str, value: Any) -> None:
        if key == "is_directory" and "is_directory" in self.__dict__:
            raise AttributeError("is_directory cannot change after creation")
        super().__setattr__(key, value)

    # ------------------------------------------------------------------
    # Tree
    # ------------------------------------------------------------------

    @property
    def parent(self) -> "Note | None":
        return self._parent_ref() if self._parent_ref is not None else None

    @property
    def slug(self) -> str:
        """Filename without directory and ``.md`` extension."""
        return slug_of(self.name)

    def add_child(self, child: "Note") -> "Note":
        if not self.is_directory:
            raise ValueError(f"{self.name!r} is a file and cannot hold children")
        child._parent_ref = weakref.ref(self)
        self.children.append(child)
        return child

    def walk(self) -> Iterator["Note"]:
        """Yield this note and every descendant, depth-first in child order."""
        yield self
        for child in self.children:
            yield from child.walk()

    # ------------------------------------------------------------------
    # File content
    # ------------------------------------------------------------------

    def read_text(self) -> str:
        if self.is_directory:
            raise ValueError(f"{self.name!r} is a directory")
        return self.path.read_text(encoding="utf-8", errors="replace")

    def write_text(self, text: str) -> None:
        if self.is_directory:
            raise ValueError(f"{self.name!r} is a directory")
        # newline="" keeps the editor's line endings byte-for-byte
        with self.path.open("w", encoding="utf-8", newline="") as fh:
            fh.write(text)

    # ------------------------------------------------------------------
    # Rename / move
    # ------------------------------------------------------------------

    def rename(self, new_name: str) -> None:
        """Commit an on-disk rename: keep ``name`` and ``path`` consistent."""
        self._rebase(self.path.with_name(new_name))

    def move(self, new_dir: Path) -> None:
        """Commit an on-disk move into *new_dir*."""
        self._rebase(Path(new_dir) / self.name)

    def _rebase(self, new_path: Path) -> None:
        old_path = self.path
        self.name = new_path.name
        self.path = new_path
        for descendant in self.walk():
            if descendant is self:
                continue
            descendant.path = new_path / descendant.path.relative_to(old_path)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": str(self.path),
            "is_directory": self.is_directory,
            "metadata": self.metadata.to_dict() if self.metadata is not None else None,
            "children": [c.to_dict() for c in self.children],
        }


def iter_notes(roots: list[Note]) -> Iterator[Note]:
    """Flatten a list of tree roots into a depth-first stream of notes."""
    for root in roots:
        yield from root.walk()
