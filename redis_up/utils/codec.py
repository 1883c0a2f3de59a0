"""JSON text encoding for the registry file and ``info --format json``."""

import json
from typing import Any

from ..core.errors import DeserializationError, SerializationError


def to_json_string(document: Any) -> str:
    """Render a JSON-mode document with stable key order and two-space indent.

    Callers dump pydantic models with ``mode="json"`` first, so only plain
    JSON types reach here.
    """
    try:
        return json.dumps(document, indent=2, sort_keys=True, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Cannot encode registry document: {e}") from e


def from_json_string(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise DeserializationError(f"Invalid JSON at line {e.lineno}: {e.msg}") from e
