from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Union


# PUBLIC_INTERFACE
def data_envelope(payload: Union[Dict[str, Any], Sequence[Any], Iterable[Any]]) -> Dict[str, Any]:
    """
    Wrap a response payload in the standard `{"data": ...}` envelope.

    Args:
        payload: A single record (dict) or an iterable of records.

    Returns:
        Dict with the single key `data`.
    """
    if isinstance(payload, dict):
        return {"data": payload}
    # Ensure lists are materialized (in case an iterator is passed)
    materialized: List[Any] = list(payload) if not isinstance(payload, list) else payload
    return {"data": materialized}


# PUBLIC_INTERFACE
def error_body(message: str, details: Optional[Iterable[Any]] = None) -> Dict[str, Any]:
    """Build an error response body; `details` is included only when given."""
    body: Dict[str, Any] = {"error": message}
    if details is not None:
        body["details"] = list(details)
    return body
