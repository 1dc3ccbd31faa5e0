from __future__ import annotations

import json
import logging
import os
import tempfile
import uuid
from datetime import datetime, timezone
from pathlib import Path
from threading import RLock
from typing import Any, List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from .errors import NoteNotFoundError, NoteValidationError, PersistenceError
from .models import NoteEntity

logger = logging.getLogger(__name__)

_NOTES_ADAPTER = TypeAdapter(List[NoteEntity])

SEED_NOTES = (
    ("Welcome to Notes", "This is your first note. Feel free to edit or delete it."),
    ("Second Note", "Add as many notes as you like. The API supports full CRUD."),
)


class _Unset:
    """Marker for a field that was not supplied at all (distinct from None)."""

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


# PUBLIC_INTERFACE
class NotesStore:
    """
    File-backed notes store.

    Holds the authoritative, ordered list of notes in memory (newest first) and
    mirrors it to a single JSON file after every successful mutation. All
    operations are serialized on one lock, so the store can be shared by the
    worker threads FastAPI uses for sync endpoints.
    """

    def __init__(self, data_file: Union[str, Path]) -> None:
        self._lock = RLock()
        self._path = Path(data_file)
        self._notes: List[NoteEntity] = self._load()

    def _now(self) -> str:
        return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")

    def _new_id(self) -> str:
        return str(uuid.uuid4())

    def _seed(self) -> List[NoteEntity]:
        now = self._now()
        return [
            {"id": self._new_id(), "title": title, "content": content, "createdAt": now, "updatedAt": now}
            for title, content in SEED_NOTES
        ]

    def _load(self) -> List[NoteEntity]:
        if not self._path.exists():
            seed = self._seed()
            try:
                self._write(seed)
            except PersistenceError:
                logger.warning("Could not create notes file %s; starting empty", self._path, exc_info=True)
                return []
            logger.info("Created %s with %d seed notes", self._path, len(seed))
            return seed

        try:
            # Bytes, so invalid UTF-8 surfaces as a ValidationError too
            notes = _NOTES_ADAPTER.validate_json(self._path.read_bytes(), strict=True)
        except (OSError, ValidationError) as exc:
            # Unreadable or malformed file: serve an empty collection instead of failing startup
            logger.warning("Ignoring unusable notes file %s: %s", self._path, exc)
            return []
        if len({n["id"] for n in notes}) != len(notes):
            logger.warning("Ignoring notes file %s: duplicate note ids", self._path)
            return []
        logger.info("Loaded %d notes from %s", len(notes), self._path)
        return notes

    def _write(self, notes: List[NoteEntity]) -> None:
        """Replace the data file with the given collection; raise PersistenceError on failure."""
        tmp_path: Optional[str] = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(notes, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self._path)
            tmp_path = None
        except (OSError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Failed to write notes file {self._path}") from exc
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)

    def _commit(self, notes: List[NoteEntity]) -> None:
        # Memory only changes once the file write has gone through
        self._write(notes)
        self._notes = notes

    def _index_of(self, note_id: str) -> int:
        for i, note in enumerate(self._notes):
            if note["id"] == note_id:
                return i
        raise NoteNotFoundError(note_id)

    def reload(self) -> None:
        """Re-read the data file, seeding it if missing."""
        with self._lock:
            self._notes = self._load()

    def list(self) -> List[NoteEntity]:
        """Return copies of all notes in stored order."""
        with self._lock:
            return [n.copy() for n in self._notes]

    def get_by_id(self, note_id: str) -> Optional[NoteEntity]:
        """Return a copy of the note with this id, or None."""
        with self._lock:
            for note in self._notes:
                if note["id"] == note_id:
                    return note.copy()
            return None

    def create(self, title: Any = UNSET, content: Any = UNSET) -> NoteEntity:
        """
        Validate and prepend a new note, persist, and return it.

        Raises:
            NoteValidationError: with every violated rule.
            PersistenceError: if the data file could not be written.
        """
        errors: List[str] = []
        if not _is_text(title):
            errors.append("title is required and must be a non-empty string")
        if content is not UNSET and not isinstance(content, str):
            errors.append("content must be a string")
        if errors:
            raise NoteValidationError(errors)

        now = self._now()
        note: NoteEntity = {
            "id": self._new_id(),
            "title": title.strip(),
            "content": "" if content is UNSET else content,
            "createdAt": now,
            "updatedAt": now,
        }
        with self._lock:
            self._commit([note, *self._notes])
        logger.info("Created note %s", note["id"])
        return note.copy()

    def update(self, note_id: str, title: Any = UNSET, content: Any = UNSET) -> NoteEntity:
        """
        Apply a partial update. Only supplied fields change; position is kept.

        Raises:
            NoteNotFoundError: if no note has this id.
            NoteValidationError: with every violated rule; the note is untouched.
            PersistenceError: if the data file could not be written.
        """
        with self._lock:
            idx = self._index_of(note_id)

            errors: List[str] = []
            if title is not UNSET and not _is_text(title):
                errors.append("title must be a non-empty string when provided")
            if content is not UNSET and not isinstance(content, str):
                errors.append("content must be a string when provided")
            if errors:
                raise NoteValidationError(errors)

            updated = self._notes[idx].copy()
            if title is not UNSET:
                updated["title"] = title.strip()
            if content is not UNSET:
                updated["content"] = content
            updated["updatedAt"] = self._now()

            notes = list(self._notes)
            notes[idx] = updated
            self._commit(notes)
        logger.info("Updated note %s", note_id)
        return updated.copy()

    def remove(self, note_id: str) -> NoteEntity:
        """
        Delete a note and return it.

        Raises:
            NoteNotFoundError: if no note has this id.
            PersistenceError: if the data file could not be written.
        """
        with self._lock:
            idx = self._index_of(note_id)
            removed = self._notes[idx]
            self._commit(self._notes[:idx] + self._notes[idx + 1:])
        logger.info("Removed note %s", note_id)
        return removed.copy()
