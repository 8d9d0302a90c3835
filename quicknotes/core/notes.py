from __future__ import annotations

import logging
import unicodedata
from pathlib import Path

from quicknotes.settings import APP_NAME, NOTE_SUFFIX
from .errors import NoteNotFoundError, StorageError
from .filesystem import atomic_write_text, notes_dir

log = logging.getLogger(f"{APP_NAME}.notes")


class NoteStore:
    """
    Titles of the notes in ~/.notes and the file operations behind them.

    The files on disk are the source of truth; `titles` is a cache that
    `refresh()` rebuilds from a directory scan. Note content is never kept
    in memory.
    """

    def __init__(self, home: Path | None = None):
        self.home = home
        self.titles: list[str] = []

    def __repr__(self) -> str:
        return f"NoteStore(home={self.home!r}, titles={len(self.titles)})"

    # ───────────────────────── paths ─────────────────────────

    def notes_dir(self) -> Path:
        try:
            return notes_dir(self.home)
        except OSError as e:
            raise StorageError("open notes directory", detail=str(e)) from e

    def path_for(self, title: str, *, operation: str = "resolve") -> Path:
        # a title is a bare file name: no separators, nothing outside ~/.notes
        if not title or Path(title).name != title:
            raise StorageError(operation, title, "invalid note title")
        if any(unicodedata.category(ch) == "Cc" for ch in title):
            raise StorageError(operation, title, "control character in note title")
        return self.notes_dir() / f"{title}{NOTE_SUFFIX}"

    # ───────────────────────── listing ─────────────────────────

    def list_titles(self) -> list[str]:
        directory = self.notes_dir()
        try:
            titles = [p.stem for p in directory.glob(f"*{NOTE_SUFFIX}") if p.is_file()]
        except OSError as e:
            raise StorageError("list notes", detail=str(e)) from e
        return sorted(titles, key=str.lower)

    def refresh(self) -> list[str]:
        self.titles = self.list_titles()
        log.debug("Notes rescanned: count=%d", len(self.titles))
        return list(self.titles)

    # ───────────────────────── CRUD ─────────────────────────

    def create(self, title: str, initial_content: str = "") -> None:
        """Write a new note file. An existing file with that title is overwritten."""
        self._write(title, initial_content, operation="create")
        self._remember(title)
        log.info("Note created: %s", title)

    def read(self, title: str) -> str:
        path = self.path_for(title, operation="read")
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise NoteNotFoundError("read", title, "no such note") from e
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError("read", title, str(e)) from e

    def update(self, title: str, new_content: str) -> None:
        """Replace the note's full contents (creates the file if it is missing)."""
        self._write(title, new_content, operation="update")
        self._remember(title)
        log.debug("Note updated: %s chars=%d", title, len(new_content))

    def delete(self, title: str) -> None:
        path = self.path_for(title, operation="delete")
        try:
            path.unlink()
        except FileNotFoundError as e:
            # already gone on disk: the cached title is stale
            self._forget(title)
            raise NoteNotFoundError("delete", title, "no such note") from e
        except OSError as e:
            raise StorageError("delete", title, str(e)) from e
        self._forget(title)
        log.info("Note deleted: %s", title)

    # ───────────────────────── internal ─────────────────────────

    def _write(self, title: str, text: str, *, operation: str) -> None:
        path = self.path_for(title, operation=operation)
        try:
            atomic_write_text(path, text)
        except OSError as e:
            raise StorageError(operation, title, str(e)) from e

    def _remember(self, title: str) -> None:
        if title not in self.titles:
            self.titles.append(title)

    def _forget(self, title: str) -> None:
        self.titles = [t for t in self.titles if t != title]
