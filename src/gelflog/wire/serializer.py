"""GELF JSON encoding."""

from __future__ import annotations

import json
from typing import Any, Dict

from ..core.errors import SerializationError
from ..core.message import GelfMessage

__all__ = ["serialize", "deserialize"]


def serialize(message: GelfMessage) -> bytes:
    """Encode ``message`` as a compact UTF-8 GELF JSON object."""

    try:
        text = json.dumps(
            message.fields(),
            ensure_ascii=False,
            allow_nan=False,
            sort_keys=True,
            separators=(",", ":"),
        )
        return text.encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Cannot encode GELF message: {exc}") from exc


def deserialize(data: bytes) -> Dict[str, Any]:
    """Decode an uncompressed GELF payload back into a mapping."""

    payload = json.loads(data.decode("utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("GELF payload must be a JSON object")
    return payload
