import sys
import os
import json

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest

from quicknotes.core.errors import SerializationError
from quicknotes.core.todos import Todo, TodoStore


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


def test_add_is_in_memory_only(home):
    todos = TodoStore()
    todo = todos.add("Test todo")

    assert todo == Todo(description="Test todo", due_date=None)
    assert len(todos) == 1
    assert not (home / ".notes" / ".todos").exists()


def test_save_then_load_concrete(home):
    todos = TodoStore()
    todos.add("Buy milk", 1700000000)
    todos.save()
    del todos

    loaded = TodoStore.load()
    assert len(loaded) == 1
    assert loaded.items[0].description == "Buy milk"
    assert loaded.items[0].due_date == 1700000000


def test_round_trip_keeps_order(home):
    todos = TodoStore()
    todos.add("first", None)
    todos.add("second", 1627849200)
    todos.add("third", 0)
    todos.save()

    assert TodoStore.load().items == todos.items


def test_snapshot_format(home):
    todos = TodoStore()
    todos.add("a", 5)
    todos.add("b")
    todos.save()

    raw = json.loads((home / ".notes" / ".todos").read_text(encoding="utf-8"))
    assert raw == {"items": [
        {"description": "a", "due_date": 5},
        {"description": "b", "due_date": None},
    ]}


def test_remove_in_range(home):
    todos = TodoStore()
    todos.add("a")
    todos.add("b")
    todos.add("c")

    removed = todos.remove(1)

    assert removed.description == "b"
    assert [t.description for t in todos] == ["a", "c"]


@pytest.mark.parametrize("index", [2, 3, 100, -1])
def test_remove_out_of_range_is_noop(home, index):
    todos = TodoStore()
    todos.add("a")
    todos.add("b")

    assert todos.remove(index) is None
    assert [t.description for t in todos] == ["a", "b"]


def test_load_missing_snapshot_is_empty(home):
    loaded = TodoStore.load()
    assert len(loaded) == 0
    assert (home / ".notes").is_dir()


@pytest.mark.parametrize("content", [
    "",
    "not json",
    '{"items": [{"due_date": 1}]}',
    '{"items": [{"description": "x", "due_date": "tomorrow"}]}',
    '[1, 2, 3]',
])
def test_load_malformed_raises_and_keeps_file(home, content):
    path = home / ".notes" / ".todos"
    path.parent.mkdir(parents=True)
    path.write_text(content, encoding="utf-8")

    with pytest.raises(SerializationError):
        TodoStore.load()
    assert path.read_text(encoding="utf-8") == content


def test_save_overwrites_whole_file(home):
    todos = TodoStore()
    todos.add("a")
    todos.add("b")
    todos.save()
    todos.remove(0)
    todos.save()

    assert [t.description for t in TodoStore.load()] == ["b"]


def test_due_label():
    assert Todo(description="x").due_label() == ""
    assert Todo(description="x", due_date=1700000000).due_label() != ""
