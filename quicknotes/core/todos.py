from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from pydantic import BaseModel, Field, ValidationError

from quicknotes.settings import APP_NAME, TODOS_FILE_NAME
from .errors import SerializationError, StorageError
from .filesystem import atomic_write_text, notes_dir

log = logging.getLogger(f"{APP_NAME}.todos")


class Todo(BaseModel):
    """A short description with an optional due date (Unix timestamp, seconds)."""
    description: str
    due_date: Optional[int] = None

    def due_label(self) -> str:
        if self.due_date is None:
            return ""
        return datetime.fromtimestamp(self.due_date).strftime("%Y-%m-%d %H:%M")


class TodoSnapshot(BaseModel):
    """On-disk shape of the `.todos` file."""
    items: list[Todo] = Field(default_factory=list)


class TodoStore:
    """
    Ordered todo list plus its single snapshot file (~/.notes/.todos).

    The in-memory list is the working copy. Mutations do not persist by
    themselves: call `save()` afterwards, which rewrites the whole file.
    """

    def __init__(self, items: list[Todo] | None = None, *, home: Path | None = None):
        self.items: list[Todo] = list(items or [])
        self.home = home

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Todo]:
        return iter(self.items)

    def __repr__(self) -> str:
        return f"TodoStore(home={self.home!r}, items={len(self.items)})"

    # ───────────────────────── paths ─────────────────────────

    @staticmethod
    def snapshot_path(home: Path | None = None) -> Path:
        try:
            return notes_dir(home) / TODOS_FILE_NAME
        except OSError as e:
            raise StorageError("open notes directory", detail=str(e)) from e

    # ───────────────────────── in-memory ─────────────────────────

    def add(self, description: str, due_date: int | None = None) -> Todo:
        todo = Todo(description=description, due_date=due_date)
        self.items.append(todo)
        return todo

    def remove(self, index: int) -> Todo | None:
        """
        Remove the item at `index`. Out-of-range indices (stale UI rows)
        are ignored and return None.
        """
        if 0 <= index < len(self.items):
            return self.items.pop(index)
        log.debug("Todo remove ignored: index=%d size=%d", index, len(self.items))
        return None

    # ───────────────────────── persistence ─────────────────────────

    def save(self) -> None:
        path = self.snapshot_path(self.home)
        try:
            data = TodoSnapshot(items=self.items).model_dump_json()
        except ValueError as e:
            raise SerializationError("save todos", detail=str(e)) from e
        try:
            atomic_write_text(path, data)
        except OSError as e:
            raise StorageError("save todos", detail=str(e)) from e
        log.debug("Todos saved: count=%d path=%s", len(self.items), path)

    @classmethod
    def load(cls, home: Path | None = None) -> "TodoStore":
        """
        Read the snapshot. A missing file means an empty list; malformed
        content raises SerializationError and the file is left as it is.
        """
        path = cls.snapshot_path(home)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            log.info("No todo snapshot yet: %s", path)
            return cls(home=home)
        except UnicodeDecodeError as e:
            raise SerializationError("load todos", detail=str(e)) from e
        except OSError as e:
            raise StorageError("load todos", detail=str(e)) from e

        try:
            snapshot = TodoSnapshot.model_validate_json(raw)
        except ValidationError as e:
            raise SerializationError("load todos", detail=_first_error(e)) from e

        log.debug("Todos loaded: count=%d", len(snapshot.items))
        return cls(snapshot.items, home=home)


def _first_error(err: ValidationError) -> str:
    first = err.errors()[0]
    loc = ".".join(str(p) for p in first.get("loc", ())) or "document"
    return f"{loc}: {first.get('msg', 'invalid')}"
