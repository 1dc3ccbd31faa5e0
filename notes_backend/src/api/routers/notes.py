from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Request, status

from ..errors import NoteNotFoundError
from ..schemas import ErrorBody, NoteCreate, NoteEnvelope, NoteListEnvelope, NoteUpdate
from ..store import NotesStore
from ..utils import data_envelope

router = APIRouter(
    prefix="/api/notes",
    tags=["notes"],
)

_NOT_FOUND = {404: {"model": ErrorBody, "description": "Note not found"}}
_INVALID = {400: {"model": ErrorBody, "description": "Validation error"}}


# PUBLIC_INTERFACE
def get_store(request: Request) -> NotesStore:
    """
    Dependency returning the store attached to the running application.

    Raises:
        RuntimeError: if the app was neither given a store nor started through its lifespan.
    """
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise RuntimeError("store not initialised: pass one to create_app() or run the app lifespan")
    return store


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=NoteListEnvelope,
    summary="List notes",
    description="Return all notes, newest first.",
    responses={200: {"description": "List of notes"}},
)
def list_notes(store: NotesStore = Depends(get_store)) -> Dict[str, Any]:
    """
    List all notes.
    """
    return data_envelope(store.list())


# PUBLIC_INTERFACE
@router.get(
    "/{note_id}",
    response_model=NoteEnvelope,
    summary="Get note by id",
    responses={200: {"description": "A note"}, **_NOT_FOUND},
)
def get_note(note_id: str, store: NotesStore = Depends(get_store)) -> Dict[str, Any]:
    """
    Retrieve a single note by its id.
    """
    note = store.get_by_id(note_id)
    if note is None:
        raise NoteNotFoundError(note_id)
    return data_envelope(note)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=NoteEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create note",
    description="Create a new note and return it. `content` defaults to an empty string.",
    responses={201: {"description": "Note created"}, **_INVALID},
)
def create_note(
    payload: Optional[NoteCreate] = Body(default=None),
    store: NotesStore = Depends(get_store),
) -> Dict[str, Any]:
    """
    Create a new note. A missing body is treated as an empty object.
    """
    fields = payload.provided() if payload is not None else {}
    return data_envelope(store.create(**fields))


def _update(note_id: str, payload: Optional[NoteUpdate], store: NotesStore) -> Dict[str, Any]:
    fields = payload.provided() if payload is not None else {}
    return data_envelope(store.update(note_id, **fields))


# PUBLIC_INTERFACE
@router.put(
    "/{note_id}",
    response_model=NoteEnvelope,
    summary="Update note",
    description="Update the supplied fields of a note; omitted fields are left unchanged.",
    responses={200: {"description": "Updated note"}, **_INVALID, **_NOT_FOUND},
)
def put_note(
    note_id: str,
    payload: Optional[NoteUpdate] = Body(default=None),
    store: NotesStore = Depends(get_store),
) -> Dict[str, Any]:
    """
    Update a note. Same partial semantics as PATCH.
    """
    return _update(note_id, payload, store)


# PUBLIC_INTERFACE
@router.patch(
    "/{note_id}",
    response_model=NoteEnvelope,
    summary="Patch note",
    description="Partially update fields of a note.",
    responses={200: {"description": "Updated note"}, **_INVALID, **_NOT_FOUND},
)
def patch_note(
    note_id: str,
    payload: Optional[NoteUpdate] = Body(default=None),
    store: NotesStore = Depends(get_store),
) -> Dict[str, Any]:
    """
    Partial update of a note.
    """
    return _update(note_id, payload, store)


# PUBLIC_INTERFACE
@router.delete(
    "/{note_id}",
    response_model=NoteEnvelope,
    summary="Delete note",
    description="Delete a note and return the removed record.",
    responses={200: {"description": "Deleted note"}, **_NOT_FOUND},
)
def delete_note(note_id: str, store: NotesStore = Depends(get_store)) -> Dict[str, Any]:
    """
    Delete a note. Returns the removed note, 404 if not found.
    """
    return data_envelope(store.remove(note_id))
