"""Folder scanner: builds the vault's Note tree from disk.

Ordering per directory: sub-directories first, then ``*.md`` files, each
group sorted by name.  Vault-metadata folders such as ``.obsidian`` are
skipped.  Every file note comes back with its front-matter already parsed.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from scoria.config import EngineConfig
from scoria.metadata import extract_metadata
from scoria.note import Note

log = logging.getLogger(__name__)


def scan_folder(root: Path, config: EngineConfig | None = None) -> list[Note]:
    """Return the top-level notes under *root* (directories carry their children)."""
    root = Path(root)
    if not root.is_dir():
        raise FileNotFoundError(f"Vault folder does not exist: {root}")
    config = config or EngineConfig()
    notes = _scan_dir(root, config)
    log.info("Scanned %s: %d top-level entries", root, len(notes))
    return notes


async def scan_folder_async(root: Path, config: EngineConfig | None = None) -> list[Note]:
    """Run :func:`scan_folder` in a worker thread; the caller gets the whole list at once."""
    return await asyncio.to_thread(scan_folder, root, config)


def _scan_dir(directory: Path, config: EngineConfig) -> list[Note]:
    entries: list[Note] = []

    for sub in sorted(p for p in directory.iterdir() if p.is_dir()):
        if sub.name in config.ignored_dirs:
            continue
        folder = Note(sub.name, sub, is_directory=True)
        for child in _scan_dir(sub, config):
            folder.add_child(child)
        entries.append(folder)

    for path in sorted(p for p in directory.glob("*.md") if p.is_file()):
        note = Note(path.name, path)
        try:
            note.metadata = extract_metadata(note.read_text())
        except OSError as e:
            log.warning("Cannot read %s: %s", path, e)
        entries.append(note)

    return entries
