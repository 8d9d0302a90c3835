from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from quicknotes.settings import APP_NAME, NEW_NOTE_TEXT, NEW_TODO_TEXT
from quicknotes.core.errors import NoteNotFoundError, SerializationError, StorageError, StoreError
from quicknotes.core.filenames import safe_filename, unique_title
from quicknotes.core.filesystem import copy_to_recovery, write_recovery_copy
from quicknotes.core.notes import NoteStore
from quicknotes.core.todos import TodoStore

log = logging.getLogger(f"{APP_NAME}.session")

Result = tuple[bool, Optional[str]]
OK: Result = (True, None)


class SessionController:
    """
    Glue between the window and the two stores.

    Responsibilities:
    - load notes and todos at startup (a broken todo file never blocks startup)
    - keep the editor buffer of the open note and flush it only when dirty
    - persist every todo mutation, rolling it back if the save fails
    - turn store failures into (ok, error_message) results for the UI

    Every public method takes the session lock, so a read-modify-write such
    as "pick a free title, then create" sees one consistent state.
    """

    def __init__(self, home: Path | None = None):
        self.home = home
        self._lock = threading.RLock()

        self.notes = NoteStore(home)
        self.todos = TodoStore(home=home)
        self.startup_errors: list[str] = []
        # set while an unreadable .todos has no byte-exact recovery copy
        self._snapshot_quarantined = False

        self.selected_note: str | None = None
        self._buffer: str = ""
        # last text known to be on disk for the selected note
        self._last_saved_text: str = ""
        self._dirty = False

        self._load()

    # ───────────────────────── startup ─────────────────────────

    def _load(self) -> None:
        try:
            self.notes.refresh()
        except StoreError as e:
            log.error("Could not list notes at startup: %s", e)
            self.startup_errors.append(str(e))

        try:
            self.todos = TodoStore.load(self.home)
        except SerializationError as e:
            self.startup_errors.append(self._keep_corrupt_snapshot(e))
        except StoreError as e:
            log.error("Could not read todo list at startup: %s", e)
            self.startup_errors.append(str(e))
        log.info(
            "Session loaded: notes=%d todos=%d", len(self.notes.titles), len(self.todos)
        )

    def _keep_corrupt_snapshot(self, err: SerializationError) -> str:
        """The corrupt file stays where it is; a byte-exact copy goes to the recovery directory."""
        log.warning("Todo snapshot is malformed, starting empty: %s", err)
        msg = f"The todo list could not be read ({err.detail}). Starting with an empty list."
        # todo saves are refused until the original bytes exist somewhere else
        self._snapshot_quarantined = True
        try:
            rec = self._copy_corrupt_snapshot()
        except StoreError as e:
            log.error("%s", e)
            return f"{msg} No copy could be kept, so todo changes will not be saved."
        if rec is None:
            return msg
        return f"{msg} A copy was kept at {rec}."

    def _copy_corrupt_snapshot(self) -> Path | None:
        path = TodoStore.snapshot_path(self.home)
        try:
            rec = copy_to_recovery(path, "todos", home=self.home)
        except FileNotFoundError:
            log.info("Corrupt todo snapshot is gone, nothing to keep: %s", path)
            rec = None
        except OSError as e:
            raise StorageError("copy unreadable todo file", detail=str(e)) from e
        else:
            log.warning("Recovery copy of todo snapshot written: %s", rec)
        self._snapshot_quarantined = False
        return rec

    # ───────────────────────── notes ─────────────────────────

    @property
    def current_text(self) -> str:
        return self._buffer

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    def note_titles(self) -> list[str]:
        with self._lock:
            return list(self.notes.titles)

    def select_note(self, title: str) -> Result:
        with self._lock:
            if title == self.selected_note:
                return OK

            ok, err = self._flush_locked()
            if not ok:
                return ok, err

            try:
                text = self.notes.read(title)
            except NoteNotFoundError as e:
                # deleted behind our back: resync the cached titles
                self._refresh_locked()
                return self._fail(e)
            except StoreError as e:
                return self._fail(e)

            self._open(title, text)
            log.info("Note opened: %s", title)
            return OK

    def edit_current(self, text: str) -> None:
        with self._lock:
            if self.selected_note is None:
                return
            self._buffer = text
            self._dirty = text != self._last_saved_text

    def flush_current(self) -> Result:
        with self._lock:
            return self._flush_locked()

    def create_note(self, title: str | None = None, content: str = NEW_NOTE_TEXT) -> Result:
        with self._lock:
            ok, err = self._flush_locked()
            if not ok:
                return ok, err

            title = unique_title(safe_filename(title), self.notes.titles)
            try:
                self.notes.create(title, content)
            except StoreError as e:
                return self._fail(e)

            self._open(title, content)
            return OK

    def delete_note(self, title: str | None = None) -> Result:
        with self._lock:
            title = title or self.selected_note
            if title is None:
                return False, "No note selected."

            try:
                self.notes.delete(title)
            except StoreError as e:
                if isinstance(e, NoteNotFoundError) and title == self.selected_note:
                    self._close_note()
                return self._fail(e)

            # unsaved edits of a deleted note are discarded, not flushed
            if title == self.selected_note:
                self._close_note()
            return OK

    def reload_notes(self) -> Result:
        with self._lock:
            try:
                self.notes.refresh()
            except StoreError as e:
                return self._fail(e)
            return OK

    # ───────────────────────── todos ─────────────────────────

    def add_todo(self, description: str, due_date: int | None = None) -> Result:
        with self._lock:
            description = (description or "").strip() or NEW_TODO_TEXT
            self.todos.add(description, due_date)
            try:
                self._save_todos_locked()
            except StoreError as e:
                self.todos.remove(len(self.todos) - 1)
                return self._fail(e, f"Could not add todo {description!r}")
            log.info("Todo added: %s due=%s", description, due_date)
            return OK

    def delete_todo(self, index: int) -> Result:
        with self._lock:
            removed = self.todos.remove(index)
            if removed is None:
                return OK
            try:
                self._save_todos_locked()
            except StoreError as e:
                self.todos.items.insert(index, removed)
                return self._fail(e, f"Could not delete todo #{index + 1}")
            log.info("Todo deleted: index=%d", index)
            return OK

    # ───────────────────────── shutdown ─────────────────────────

    def close(self) -> Result:
        with self._lock:
            return self._flush_locked()

    # ───────────────────────── internal ─────────────────────────

    def _open(self, title: str, text: str) -> None:
        self.selected_note = title
        self._buffer = text
        self._last_saved_text = text
        self._dirty = False

    def _close_note(self) -> None:
        self.selected_note = None
        self._buffer = ""
        self._last_saved_text = ""
        self._dirty = False

    def _flush_locked(self) -> Result:
        title = self.selected_note
        if title is None or not self._dirty:
            return OK

        text = self._buffer
        try:
            self.notes.update(title, text)
        except StoreError as e:
            try:
                rec = write_recovery_copy(title, text, home=self.home)
                log.warning("Recovery copy written: %s", rec)
            except OSError:
                log.exception("Failed to write recovery copy for %s", title)
            return self._fail(e)

        self._last_saved_text = text
        self._dirty = False
        return OK

    def _save_todos_locked(self) -> None:
        if self._snapshot_quarantined:
            self._copy_corrupt_snapshot()
        self.todos.save()

    def _refresh_locked(self) -> None:
        try:
            self.notes.refresh()
        except StoreError as e:
            log.warning("Note rescan failed: %s", e)

    @staticmethod
    def _fail(err: StoreError, prefix: str | None = None) -> Result:
        log.warning("%s", err)
        msg = f"{prefix}: {err}" if prefix else str(err)
        return False, msg
