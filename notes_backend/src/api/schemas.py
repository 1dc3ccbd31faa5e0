from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _NoteInput(BaseModel):
    # Field types are left open so the store can report its own messages
    # for wrong types instead of a framework-level 422.
    title: Any = Field(default=None, description="Note title; must be a non-empty string")
    content: Any = Field(default=None, description="Note body; must be a string")

    def provided(self) -> Dict[str, Any]:
        """
        Return only the fields present in the request body, so an explicit null
        can be told apart from an omitted field.
        """
        return {name: getattr(self, name) for name in self.model_fields_set}


# PUBLIC_INTERFACE
class NoteCreate(_NoteInput):
    """
    Schema for creating a note. `title` is required; `content` defaults to "".
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Groceries",
                "content": "Milk, eggs, bread",
            }
        }
    )


# PUBLIC_INTERFACE
class NoteUpdate(_NoteInput):
    """
    Schema for updating a note.
    All fields are optional; only provided fields will be updated.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "content": "Milk, eggs, bread, and paper towels",
            }
        }
    )


# PUBLIC_INTERFACE
class NoteOut(BaseModel):
    """
    Schema returned by the API for a note.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "8f0c8a4e-3b5e-4f7d-9a57-2f6f4c1d8e21",
                "title": "Groceries",
                "content": "Milk, eggs, bread",
                "createdAt": "2026-01-25T10:15:30.123456Z",
                "updatedAt": "2026-01-26T09:00:00.000001Z",
            }
        }
    )

    id: str = Field(..., description="Unique identifier (UUID)")
    title: str = Field(..., description="Note title")
    content: str = Field(..., description="Note body")
    createdAt: str = Field(..., description="Creation timestamp (ISO8601, UTC)")
    updatedAt: str = Field(..., description="Last update timestamp (ISO8601, UTC)")


class NoteEnvelope(BaseModel):
    """Single-note response body."""
    data: NoteOut


class NoteListEnvelope(BaseModel):
    """List response body."""
    data: List[NoteOut]


class ErrorBody(BaseModel):
    """Error response body."""
    error: str = Field(..., description="Short error message")
    details: Optional[List[Any]] = Field(default=None, description="Individual problems, when there are several")
