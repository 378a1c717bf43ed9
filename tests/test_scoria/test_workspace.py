"""Integration tests for scoria.workspace: editor, renderer and index together."""

import asyncio
import datetime as dt
from pathlib import Path

import pytest

from scoria.nodes import Heading
from scoria.workspace import Workspace

TODAY = dt.date(2026, 10, 19)


def _write_note(directory: Path, name: str, content: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture()
def vault(tmp_path: Path) -> Path:
    _write_note(tmp_path, "Inbox.md", "---\ntags: [x,y]\n---\n# H\n\n- [ ] one\n\nSee [[Intro|the intro]].\n")
    _write_note(tmp_path, "Intro.md", "# Intro\n\nBack to [[Inbox]] or [[Nowhere]].\n")
    _write_note(tmp_path / "projects", "Plan.md", "# Plan\n")
    return tmp_path


@pytest.fixture()
def ws(vault: Path) -> Workspace:
    workspace = Workspace()
    workspace.load_folder(vault)
    return workspace


class TestLoading:
    def test_index_built(self, ws: Workspace):
        assert ws.is_folder_open
        assert {n.slug for n in ws.index.notes()} == {"Inbox", "Intro", "Plan"}

    def test_nothing_open_renders_empty(self, ws: Workspace):
        assert ws.current is None
        assert ws.document.children == ()
        assert ws.render().children == ()

    def test_async_load(self, vault: Path):
        workspace = Workspace()
        asyncio.run(workspace.load_folder_async(vault))
        assert workspace.index.resolve_by_slug("plan") is not None

    def test_find(self, ws: Workspace, vault: Path):
        assert ws.find(vault / "projects").is_directory
        assert ws.find(vault / "missing.md") is None


class TestEditing:
    def test_open_note_renders(self, ws: Workspace):
        ws.select(ws.index.resolve_by_slug("Inbox"))
        assert ws.metadata.tags == ("x", "y")
        assert ws.current.metadata == ws.metadata
        assert [type(n).__name__ for n in ws.document.children] == [
            "BadgeRow",
            "Heading",
            "ListBlock",
            "Paragraph",
        ]

    def test_selecting_directory_keeps_editor(self, ws: Workspace, vault: Path):
        ws.select(ws.index.resolve_by_slug("Inbox"))
        ws.select(ws.find(vault / "projects"))
        assert ws.selected.is_directory
        assert ws.current.slug == "Inbox"

    def test_open_directory_raises(self, ws: Workspace, vault: Path):
        with pytest.raises(ValueError):
            ws.open(ws.find(vault / "projects"))

    def test_set_text_rerenders(self, ws: Workspace):
        ws.select(ws.index.resolve_by_slug("Intro"))
        doc = ws.set_text("# Changed\n")
        assert doc.children == (Heading(level=1, text="Changed", font_size=28),)
        assert ws.metadata is None

    def test_toggle_round_trip(self, ws: Workspace, vault: Path):
        ws.select(ws.index.resolve_by_slug("Inbox"))
        (task,) = ws.document.task_items()
        assert task.source_line_index == 5

        task.toggle()

        assert ws.text.split("\n")[5] == "- [x] one"
        (task,) = ws.document.task_items()
        assert task.checked
        # Disk is untouched until save.
        assert "- [ ] one" in (vault / "Inbox.md").read_text(encoding="utf-8")
        ws.save()
        assert "- [x] one" in (vault / "Inbox.md").read_text(encoding="utf-8")

    def test_stale_toggle_is_ignored(self, ws: Workspace):
        ws.select(ws.index.resolve_by_slug("Inbox"))
        (task,) = ws.document.task_items()
        ws.set_text("short")
        task.toggle()
        assert ws.text == "short"

    def test_save_without_note(self, ws: Workspace):
        with pytest.raises(ValueError):
            ws.save()


class TestLinks:
    def test_activation_switches_note(self, ws: Workspace):
        ws.select(ws.index.resolve_by_slug("Inbox"))
        (link,) = ws.document.links()
        assert link.display == "the intro"
        link.activate()
        assert ws.current.slug == "Intro"
        assert ws.document.children[0].text == "Intro"

    def test_unresolved_activation_is_noop(self, ws: Workspace):
        ws.select(ws.index.resolve_by_slug("Intro"))
        before = ws.document
        _, nowhere = ws.document.links()
        nowhere.activate()
        assert ws.current.slug == "Intro"
        assert ws.document is before

    def test_preview_reads_target_from_disk(self, ws: Workspace):
        ws.select(ws.index.resolve_by_slug("Inbox"))
        (link,) = ws.document.links()
        link.preview.link_entered()
        assert link.preview.content.children[0].text == "Intro"


class TestNoteManagement:
    def test_create_note_in_root(self, ws: Workspace, vault: Path):
        first = ws.create_note(TODAY)
        second = ws.create_note(TODAY)
        assert first.path == vault / "New Note.md"
        assert second.path == vault / "New Note 1.md"
        assert ws.current is second
        text = (vault / "New Note.md").read_text(encoding="utf-8")
        assert text == "---\ndate: 19-Oct-26\ntags: []\n---\n\n# New Note\n\n"
        assert ws.metadata.date == TODAY

    def test_create_note_next_to_selection(self, ws: Workspace, vault: Path):
        ws.select(ws.index.resolve_by_slug("Plan"))
        note = ws.create_note(TODAY)
        assert note.path == vault / "projects" / "New Note.md"

    def test_create_note_in_selected_directory(self, ws: Workspace, vault: Path):
        ws.select(ws.find(vault / "projects"))
        note = ws.create_note(TODAY)
        assert note.parent is ws.find(vault / "projects")

    def test_create_note_without_folder(self):
        assert Workspace().create_note(TODAY) is None

    def test_rename(self, ws: Workspace, vault: Path):
        note = ws.index.resolve_by_slug("Intro")
        ws.rename(note, "Welcome.md")
        assert (vault / "Welcome.md").exists()
        assert not (vault / "Intro.md").exists()
        assert ws.index.resolve_by_slug("Welcome") is note
        assert ws.index.resolve_by_path(vault / "Welcome.md") is note

    def test_rename_directory_reindexes_children(self, ws: Workspace, vault: Path):
        folder = ws.find(vault / "projects")
        ws.rename(folder, "work")
        plan = ws.index.resolve_by_slug("Plan")
        assert plan.path == vault / "work" / "Plan.md"
        assert plan.read_text() == "# Plan\n"

    def test_rename_onto_existing_file(self, ws: Workspace):
        with pytest.raises(FileExistsError):
            ws.rename(ws.index.resolve_by_slug("Intro"), "Inbox.md")
