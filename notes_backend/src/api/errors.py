from __future__ import annotations

from typing import List


class NotesError(Exception):
    """Base class for failures reported by the notes store."""


# PUBLIC_INTERFACE
class NoteValidationError(NotesError):
    """
    Input failed the store's checks. Carries every violation, not just the first.
    """

    def __init__(self, messages: List[str]) -> None:
        super().__init__("Validation failed")
        self.messages = list(messages)


# PUBLIC_INTERFACE
class NoteNotFoundError(NotesError):
    """The referenced note id does not exist."""

    def __init__(self, note_id: str) -> None:
        super().__init__("Note not found")
        self.note_id = note_id


# PUBLIC_INTERFACE
class PersistenceError(NotesError):
    """The data file could not be written; the mutation was not applied."""
