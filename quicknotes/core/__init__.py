from .errors import NoteNotFoundError, SerializationError, StorageError, StoreError
from .filenames import safe_filename, unique_title
from .notes import NoteStore
from .todos import Todo, TodoSnapshot, TodoStore

__all__ = ["NoteNotFoundError",
           "SerializationError",
           "StorageError",
           "StoreError",
           "safe_filename",
           "unique_title",
           "NoteStore",
           "Todo",
           "TodoSnapshot",
           "TodoStore"
           ]
