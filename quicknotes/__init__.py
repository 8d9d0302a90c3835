from .core import NoteStore, Todo, TodoStore
from .session import SessionController

__all__ = [
    "NoteStore",
    "Todo",
    "TodoStore",
    "SessionController",
]
