import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pathlib import Path

import pytest

from quicknotes.core.errors import NoteNotFoundError, StorageError
from quicknotes.core.notes import NoteStore


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


def test_notes_dir_created_on_first_access(home):
    store = NoteStore()
    assert not (home / ".notes").exists()

    assert store.list_titles() == []
    assert (home / ".notes").is_dir()


def test_create_writes_txt_file(home):
    store = NoteStore()
    store.create("Foo", "bar")

    path = home / ".notes" / "Foo.txt"
    assert path.read_text(encoding="utf-8") == "bar"
    assert store.titles == ["Foo"]


def test_create_then_list(home):
    store = NoteStore()
    store.create("Foo", "bar")
    assert "Foo" in store.list_titles()


def test_create_overwrites_and_does_not_duplicate_title(home):
    store = NoteStore()
    store.create("Foo", "one")
    store.create("Foo", "two")

    assert store.read("Foo") == "two"
    assert store.titles == ["Foo"]


def test_read_is_idempotent(home):
    store = NoteStore()
    store.create("Foo", "line 1\nline 2\n")
    assert store.read("Foo") == store.read("Foo") == "line 1\nline 2\n"


def test_update_then_read(home):
    store = NoteStore()
    store.create("Shopping", "eggs")
    store.update("Shopping", "eggs, milk")
    assert store.read("Shopping") == "eggs, milk"


def test_update_creates_missing_note(home):
    store = NoteStore()
    store.update("Fresh", "text")

    assert store.read("Fresh") == "text"
    assert store.titles == ["Fresh"]


def test_read_missing_raises_not_found(home):
    store = NoteStore()
    with pytest.raises(NoteNotFoundError) as exc:
        store.read("Nope")
    assert exc.value.operation == "read"
    assert exc.value.subject == "Nope"


def test_delete_removes_file_and_title(home):
    store = NoteStore()
    store.create("Foo", "bar")
    store.create("Other", "x")

    store.delete("Foo")

    with pytest.raises(NoteNotFoundError):
        store.read("Foo")
    assert "Foo" not in store.list_titles()
    assert store.titles == ["Other"]


def test_delete_missing_drops_stale_title(home):
    store = NoteStore()
    store.create("Foo", "bar")
    (home / ".notes" / "Foo.txt").unlink()

    with pytest.raises(NoteNotFoundError):
        store.delete("Foo")
    assert store.titles == []


def test_list_only_counts_txt_files(home):
    store = NoteStore()
    store.create("b", "")
    store.create("A", "")
    notes = home / ".notes"
    (notes / ".todos").write_text('{"items": []}', encoding="utf-8")
    (notes / "image.png").write_bytes(b"\x89PNG")
    (notes / "folder.txt").mkdir()

    assert store.list_titles() == ["A", "b"]


def test_refresh_resyncs_with_disk(home):
    store = NoteStore()
    store.create("Kept", "")
    (home / ".notes" / "External.txt").write_text("from elsewhere", encoding="utf-8")

    assert store.refresh() == ["External", "Kept"]
    assert store.titles == ["External", "Kept"]


def test_dir_recomputed_per_call(tmp_path, monkeypatch):
    first = tmp_path / "one"
    second = tmp_path / "two"
    store = NoteStore()

    monkeypatch.setenv("HOME", str(first))
    store.create("Foo", "1")
    monkeypatch.setenv("HOME", str(second))
    store.create("Foo", "2")

    assert (first / ".notes" / "Foo.txt").read_text(encoding="utf-8") == "1"
    assert (second / ".notes" / "Foo.txt").read_text(encoding="utf-8") == "2"


def test_explicit_home(tmp_path):
    store = NoteStore(home=tmp_path)
    store.create("Foo", "bar")
    assert (tmp_path / ".notes" / "Foo.txt").exists()


def test_title_with_separator_rejected(home):
    store = NoteStore()
    with pytest.raises(StorageError):
        store.create("a/b", "x")
    assert store.titles == []
    assert not (home / ".notes" / "a").exists()


def test_title_with_nul_rejected(home):
    store = NoteStore()
    for call in (
        lambda: store.create("a\x00b", "x"),
        lambda: store.read("a\x00b"),
        lambda: store.update("a\x00b", "x"),
        lambda: store.delete("a\x00b"),
    ):
        with pytest.raises(StorageError):
            call()
    assert store.titles == []


def _disk_full(*args, **kwargs):
    raise OSError(28, "No space left on device")


def test_create_write_failure_keeps_titles(home, monkeypatch):
    store = NoteStore()
    store.create("Kept", "k")
    monkeypatch.setattr("quicknotes.core.notes.atomic_write_text", _disk_full)

    with pytest.raises(StorageError) as exc:
        store.create("Lost", "x")

    assert exc.value.operation == "create"
    assert store.titles == ["Kept"]
    assert not (home / ".notes" / "Lost.txt").exists()


def test_update_write_failure_keeps_titles_and_content(home, monkeypatch):
    store = NoteStore()
    store.create("Kept", "old")
    monkeypatch.setattr("quicknotes.core.notes.atomic_write_text", _disk_full)

    with pytest.raises(StorageError):
        store.update("Kept", "new")
    with pytest.raises(StorageError):
        store.update("Fresh", "new")

    assert store.titles == ["Kept"]
    assert (home / ".notes" / "Kept.txt").read_text(encoding="utf-8") == "old"


def test_delete_failure_keeps_title_and_file(home, monkeypatch):
    store = NoteStore()
    store.create("Locked", "x")

    def denied(self, missing_ok=False):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "unlink", denied)

    with pytest.raises(StorageError) as exc:
        store.delete("Locked")

    assert not isinstance(exc.value, NoteNotFoundError)
    assert store.titles == ["Locked"]
    assert (home / ".notes" / "Locked.txt").exists()


def test_unicode_content_round_trips(home):
    store = NoteStore()
    store.create("Заметка", "привет ✓")
    assert store.read("Заметка") == "привет ✓"


def test_no_temp_files_left_behind(home):
    store = NoteStore()
    store.create("Foo", "bar")
    store.update("Foo", "baz")
    assert sorted(p.name for p in (home / ".notes").iterdir()) == ["Foo.txt"]
