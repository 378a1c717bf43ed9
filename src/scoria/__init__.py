"""Scoria markdown document engine."""

from scoria.config import EngineConfig, load_config
from scoria.editor_sync import apply_task_toggle
from scoria.link_index import NoteLinkIndex, canonical_path, slug_of
from scoria.metadata import Metadata, extract_metadata
from scoria.note import Note
from scoria.renderer import DocumentRenderer
from scoria.scanner import scan_folder, scan_folder_async
from scoria.workspace import Workspace

__all__ = [
    "DocumentRenderer",
    "EngineConfig",
    "Metadata",
    "Note",
    "NoteLinkIndex",
    "Workspace",
    "apply_task_toggle",
    "canonical_path",
    "extract_metadata",
    "load_config",
    "scan_folder",
    "scan_folder_async",
    "slug_of",
]
