"""Unit tests for scoria.note."""

import gc
from pathlib import Path

import pytest

from scoria.metadata import Metadata
from scoria.note import Note, iter_notes


@pytest.fixture()
def tree(tmp_path: Path) -> Note:
    root = Note("Projects", tmp_path / "Projects", is_directory=True)
    sub = root.add_child(Note("Archive", tmp_path / "Projects" / "Archive", is_directory=True))
    sub.add_child(Note("Old.md", tmp_path / "Projects" / "Archive" / "Old.md"))
    root.add_child(Note("Plan.md", tmp_path / "Projects" / "Plan.md"))
    return root


class TestTree:
    def test_slug(self, tmp_path: Path):
        assert Note("Daily Log.md", tmp_path / "Daily Log.md").slug == "Daily Log"

    def test_path_is_coerced(self, tmp_path: Path):
        note = Note("a.md", str(tmp_path / "a.md"))
        assert isinstance(note.path, Path)

    def test_parent_links(self, tree: Note):
        plan = tree.children[1]
        assert plan.parent is tree
        assert tree.parent is None

    def test_parent_is_weak(self, tmp_path: Path):
        folder = Note("F", tmp_path / "F", is_directory=True)
        child = folder.add_child(Note("c.md", tmp_path / "F" / "c.md"))
        del folder
        gc.collect()
        assert child.parent is None

    def test_file_cannot_hold_children(self, tmp_path: Path):
        note = Note("a.md", tmp_path / "a.md")
        with pytest.raises(ValueError):
            note.add_child(Note("b.md", tmp_path / "b.md"))

    def test_is_directory_is_fixed(self, tmp_path: Path):
        note = Note("a.md", tmp_path / "a.md")
        with pytest.raises(AttributeError):
            note.is_directory = True

    def test_walk_is_depth_first(self, tree: Note):
        assert [n.name for n in tree.walk()] == ["Projects", "Archive", "Old.md", "Plan.md"]

    def test_iter_notes_flattens_roots(self, tree: Note, tmp_path: Path):
        loose = Note("Loose.md", tmp_path / "Loose.md")
        assert [n.name for n in iter_notes([tree, loose])][-1] == "Loose.md"

    def test_identity_equality(self, tmp_path: Path):
        assert Note("a.md", tmp_path / "a.md") != Note("a.md", tmp_path / "a.md")


class TestFileContent:
    def test_round_trip(self, tmp_path: Path):
        note = Note("a.md", tmp_path / "a.md")
        note.write_text("# Title\r\n\r\nbody\n")
        assert (tmp_path / "a.md").read_bytes() == b"# Title\r\n\r\nbody\n"

    def test_invalid_utf8_is_replaced(self, tmp_path: Path):
        (tmp_path / "bad.md").write_bytes(b"ok \xff end")
        assert Note("bad.md", tmp_path / "bad.md").read_text() == "ok � end"

    def test_directory_has_no_text(self, tree: Note):
        with pytest.raises(ValueError):
            tree.read_text()
        with pytest.raises(ValueError):
            tree.write_text("x")


class TestRename:
    def test_file_rename(self, tmp_path: Path):
        note = Note("a.md", tmp_path / "a.md")
        note.rename("b.md")
        assert note.name == "b.md"
        assert note.path == tmp_path / "b.md"
        assert note.slug == "b"

    def test_directory_rename_rebases_descendants(self, tree: Note, tmp_path: Path):
        tree.rename("Work")
        assert [n.path for n in tree.walk()] == [
            tmp_path / "Work",
            tmp_path / "Work" / "Archive",
            tmp_path / "Work" / "Archive" / "Old.md",
            tmp_path / "Work" / "Plan.md",
        ]

    def test_move(self, tree: Note, tmp_path: Path):
        old = tree.children[0].children[0]
        old.move(tmp_path / "Elsewhere")
        assert old.path == tmp_path / "Elsewhere" / "Old.md"
        assert old.name == "Old.md"


class TestToDict:
    def test_shape(self, tmp_path: Path):
        folder = Note("F", tmp_path / "F", is_directory=True)
        folder.add_child(Note("a.md", tmp_path / "F" / "a.md", metadata=Metadata(tags=("t",))))
        data = folder.to_dict()
        assert data["is_directory"] is True
        assert data["metadata"] is None
        (child,) = data["children"]
        assert child["name"] == "a.md"
        assert child["metadata"]["tags"] == ["t"]
