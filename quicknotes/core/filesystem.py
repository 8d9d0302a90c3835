from __future__ import annotations

import os
import uuid
from datetime import datetime
from pathlib import Path

from quicknotes.settings import APP_NAME, NOTES_DIR_NAME
from .filenames import safe_filename

# ───────────────────────── paths ─────────────────────────


def notes_dir(home: Path | None = None) -> Path:
    """
    ~/.notes, created if missing.

    Resolved from the current home directory on every call (never cached),
    so a changed HOME is picked up by the next store operation.
    """
    base = Path(home) if home is not None else Path.home()
    path = base / NOTES_DIR_NAME
    path.mkdir(parents=True, exist_ok=True)
    return path


def recovery_dir(home: Path | None = None) -> Path:
    base = Path(home) if home is not None else Path.home()
    return base / f".{APP_NAME}" / "recovery"


# ───────────────────────── public API ─────────────────────────


def atomic_write_text(path: Path, text: str, *, encoding: str = "utf-8") -> None:
    """
    Atomic-ish file write:
    - write to temp file in same directory
    - fsync
    - replace()

    A crash mid-write leaves the previous file intact. Line endings are
    written exactly as given.
    """
    atomic_write_bytes(path, text.encode(encoding))


def atomic_write_bytes(path: Path, data: bytes) -> None:
    path = Path(path)
    parent = path.parent
    parent.mkdir(parents=True, exist_ok=True)

    tmp_path = parent / f".{path.name}.tmp-{uuid.uuid4().hex}"

    try:
        with open(tmp_path, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        tmp_path.replace(path)
    finally:
        # only left behind when replace() did not happen
        tmp_path.unlink(missing_ok=True)


def write_recovery_copy(name: str, text: str, *, home: Path | None = None) -> Path:
    """
    Best-effort emergency copy when a normal save fails.

    Writes a timestamped file into ~/.quicknotes/recovery/.
    """
    rec_path = _recovery_path(name, home)
    atomic_write_text(rec_path, text)
    return rec_path


def copy_to_recovery(src: Path, name: str, *, home: Path | None = None) -> Path:
    """
    Byte-exact copy of a file that could not be loaded. The content is never
    decoded, and the copy is read back and compared before it counts.
    """
    data = Path(src).read_bytes()
    rec_path = _recovery_path(name, home)
    atomic_write_bytes(rec_path, data)
    if rec_path.read_bytes() != data:
        raise OSError(f"recovery copy {rec_path} does not match {src}")
    return rec_path


def _recovery_path(name: str, home: Path | None) -> Path:
    stem = safe_filename(name, fallback="Untitled")
    ts = datetime.now().strftime("%Y%m%d-%H%M%S")
    return recovery_dir(home) / f"{stem}.recovery.{ts}.txt"
