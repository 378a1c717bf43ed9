"""Workspace: the editor surface that drives the document engine.

Holds the open vault (tree + link index), the note being edited, its live
text and the latest render.  Rendered checkboxes and wiki-links call back
into the workspace, which patches the text or switches notes and renders
again::

    ws = Workspace()
    ws.load_folder(Path("~/notes").expanduser())
    ws.select(ws.index.resolve_by_slug("Inbox"))
    ws.document.task_items()[0].toggle()   # text patched, re-rendered
    ws.save()
"""

from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path

from scoria.config import EngineConfig
from scoria.editor_sync import apply_task_toggle
from scoria.link_index import NoteLinkIndex, canonical_path
from scoria.metadata import Metadata, extract_metadata
from scoria.nodes import Document
from scoria.note import Note, iter_notes
from scoria.renderer import DocumentRenderer
from scoria.scanner import scan_folder, scan_folder_async

log = logging.getLogger(__name__)

NEW_NOTE_BASENAME = "New Note"
NEW_NOTE_DATE_FORMAT = "%d-%b-%y"


class Workspace:
    """One open vault and one note in the editor."""

    def __init__(
        self,
        config: EngineConfig | None = None,
        index: NoteLinkIndex | None = None,
        renderer: DocumentRenderer | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.index = index if index is not None else NoteLinkIndex()
        self.renderer = renderer or DocumentRenderer(self.index, self.config)
        self.root: Path | None = None
        self.tree: list[Note] = []
        #: Tree selection (file or directory).
        self.selected: Note | None = None
        #: File note whose text is in the editor.
        self.current: Note | None = None
        self.text = ""
        self.metadata: Metadata | None = None
        self.document: Document = self.renderer.render("")

    @property
    def is_folder_open(self) -> bool:
        return self.root is not None

    # ------------------------------------------------------------------
    # Vault loading
    # ------------------------------------------------------------------

    def load_folder(self, root: Path) -> None:
        self._install(Path(root), scan_folder(root, self.config))

    async def load_folder_async(self, root: Path) -> None:
        """Scan off-thread, then swap the tree and index in a single step."""
        notes = await scan_folder_async(root, self.config)
        self._install(Path(root), notes)

    def _install(self, root: Path, notes: list[Note]) -> None:
        self.root = root
        self.tree = notes
        self.index.rebuild(iter_notes(notes))
        # The rescan produced new Note objects; follow the open note by path.
        if self.current is not None:
            self.current = self.index.resolve_by_path(self.current.path) or self.current
        if self.selected is not None:
            self.selected = self.find(self.selected.path)
        log.info("Vault loaded: %s (%d notes)", root, len(self.index))

    def find(self, path: Path) -> Note | None:
        """Tree entry (file or directory) at *path*."""
        key = canonical_path(path)
        for note in iter_notes(self.tree):
            if canonical_path(note.path) == key:
                return note
        return None

    # ------------------------------------------------------------------
    # Selection and editing
    # ------------------------------------------------------------------

    def select(self, note: Note | None) -> None:
        """Select *note* in the tree; file notes are loaded into the editor."""
        self.selected = note
        if note is not None and not note.is_directory:
            self.open(note)

    def open(self, note: Note) -> None:
        if note.is_directory:
            raise ValueError(f"Cannot edit directory {note.path}")
        self.current = note
        self.text = note.read_text()
        self.render()

    def set_text(self, text: str) -> Document:
        """Editor changed: keep the text and render it afresh."""
        self.text = text
        return self.render()

    def render(self) -> Document:
        if self.current is None:
            self.metadata = None
            self.document = self.renderer.render("")
            return self.document

        self.metadata = extract_metadata(self.text) if self.text else None
        self.document = self.renderer.render(
            self.text,
            self.metadata,
            self._on_task_toggled,
            self._on_link_activated,
        )
        self.current.metadata = self.metadata
        return self.document

    def save(self) -> None:
        if self.current is None:
            raise ValueError("No note is open")
        self.current.write_text(self.text)
        log.info("Saved %s", self.current.path)

    # ------------------------------------------------------------------
    # Render callbacks
    # ------------------------------------------------------------------

    def _on_task_toggled(self, line_index: int, checked: bool) -> None:
        self.text = apply_task_toggle(self.text, line_index, checked)
        self.render()

    def _on_link_activated(self, slug: str) -> None:
        target = self.index.resolve_by_slug(slug)
        if target is None:
            log.debug("Wiki-link target %r not in vault; ignoring click", slug)
            return
        self.select(target)

    # ------------------------------------------------------------------
    # Note management
    # ------------------------------------------------------------------

    def create_note(self, today: dt.date | None = None) -> Note | None:
        """Write a starter note next to the selection and open it.

        The new file lands in the selected directory, the selected note's
        directory, or the vault root, named ``New Note.md`` or ``New Note N.md``.
        """
        if self.root is None:
            return None

        if self.selected is None:
            directory = self.root
        elif self.selected.is_directory:
            directory = self.selected.path
        else:
            directory = self.selected.path.parent
        if not directory.is_dir():
            return None

        name = NEW_NOTE_BASENAME
        n = 1
        while (directory / f"{name}.md").exists():
            name = f"{NEW_NOTE_BASENAME} {n}"
            n += 1

        stamp = (today or dt.date.today()).strftime(NEW_NOTE_DATE_FORMAT)
        path = directory / f"{name}.md"
        path.write_text(f"---\ndate: {stamp}\ntags: []\n---\n\n# {name}\n\n", encoding="utf-8")
        log.info("Created %s", path)

        self.load_folder(self.root)
        note = self.index.resolve_by_path(path)
        if note is not None:
            self.select(note)
        return note

    def rename(self, note: Note, new_name: str) -> None:
        """Rename *note* on disk and re-register it (and any descendants) in the index."""
        target = note.path.with_name(new_name)
        if target.exists():
            raise FileExistsError(f"{target} already exists")
        note.path.rename(target)
        note.rename(new_name)
        for entry in note.walk():
            if not entry.is_directory:
                self.index.add_or_update(entry)
