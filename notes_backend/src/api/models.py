from __future__ import annotations

from typing_extensions import TypedDict


# PUBLIC_INTERFACE
class NoteEntity(TypedDict):
    """
    A note as it is held in memory and written to the JSON data file.

    Fields:
    - id: Random UUID4 string, immutable
    - title: Trimmed, non-empty title
    - content: Body text, empty string when not supplied
    - createdAt: UTC ISO8601 creation timestamp, immutable
    - updatedAt: UTC ISO8601 timestamp of the last successful change
    """

    id: str
    title: str
    content: str
    createdAt: str
    updatedAt: str
