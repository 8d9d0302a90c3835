from __future__ import annotations


class StoreError(Exception):
    """
    Base class for failures raised by the note and todo stores.

    `operation` is a short verb ("read", "save", ...) and `subject` the note
    title or todo index involved, so callers can build a user-facing message
    without parsing the exception text.
    """

    def __init__(self, operation: str, subject: object = None, detail: str = ""):
        self.operation = operation
        self.subject = subject
        self.detail = detail
        super().__init__(self._format())

    def _format(self) -> str:
        what = f"{self.operation} failed"
        if self.subject is not None:
            what = f"{self.operation} {self.subject!r} failed"
        return f"{what}: {self.detail}" if self.detail else what


class NoteNotFoundError(StoreError):
    """The requested note title has no backing file."""


class StorageError(StoreError):
    """Directory or file could not be created, opened, read or written."""


class SerializationError(StoreError):
    """The todo snapshot could not be encoded or decoded."""
