from __future__ import annotations

import re
import unicodedata
from typing import Iterable

from quicknotes.settings import NEW_NOTE_TITLE, NOTE_SUFFIX

WINDOWS_RESERVED_NAMES = {
    "con", "prn", "aux", "nul",
    *(f"com{i}" for i in range(1, 10)),
    *(f"lpt{i}" for i in range(1, 10)),
}

INVALID_CHARS_RE = re.compile(r'[<>:"/\\|?*\u0000-\u001f]')
WHITESPACE_RE = re.compile(r"\s+")

MAX_TITLE_LENGTH = 120


def safe_filename(title: str | None, *, fallback: str = NEW_NOTE_TITLE) -> str:
    """
    Turn user input into a note title that is safe to use as a file name.

    The result never contains path separators, never starts with a dot
    (no hidden files) and never ends in the note suffix, so
    `<title>.txt` maps back to the same title when the directory is scanned.
    """
    if title is None:
        return fallback

    name = unicodedata.normalize("NFKC", str(title))
    name = "".join(ch for ch in name if unicodedata.category(ch)[0] != "C")
    name = WHITESPACE_RE.sub(" ", name.strip())

    name = name.replace("/", "-").replace("\\", "-")
    name = INVALID_CHARS_RE.sub("_", name)
    name = name.lstrip(". ")

    base = name.split(".", 1)[0].strip().lower()
    if base in WINDOWS_RESERVED_NAMES:
        name = f"_{name}"

    name = name[:MAX_TITLE_LENGTH].rstrip(" .")
    # "x.txt.txt" would otherwise list back as "x.txt"
    while name.lower().endswith(NOTE_SUFFIX):
        name = name[: -len(NOTE_SUFFIX)].rstrip(" .")

    return name or fallback


def unique_title(title: str, existing: Iterable[str]) -> str:
    """`title`, or `title 2`, `title 3`, ... if it is already taken (case-insensitive)."""
    taken = {t.casefold() for t in existing}
    if title.casefold() not in taken:
        return title
    n = 2
    while f"{title} {n}".casefold() in taken:
        n += 1
    return f"{title} {n}"
