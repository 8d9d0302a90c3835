from __future__ import annotations
from pathlib import Path

APP_NAME = "quicknotes"
APP_DIR = Path.home() / f".{APP_NAME}"
LOG_DIR = APP_DIR / "logs"
LOG_PATH = LOG_DIR / f"{APP_NAME}.log"

NOTES_DIR_NAME = ".notes"
NOTE_SUFFIX = ".txt"
TODOS_FILE_NAME = ".todos"

NEW_NOTE_TITLE = "New Note"
NEW_NOTE_TEXT = "This is a new note."
NEW_TODO_TEXT = "New Todo"

# periodic flush of the open note (only writes when dirty)
FLUSH_INTERVAL_MS = 10_000
PREVIEW_DEBOUNCE_MS = 300


def normalize_theme(name: str | None) -> str:
    name = (name or "").strip().lower()
    return name if name in ("dark", "light") else "dark"
