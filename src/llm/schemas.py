from __future__ import annotations
from typing import Any, Dict

SHIFT_FIELDS = ["date", "dayOfWeek", "startTime", "endTime", "location"]

# Provider-neutral response schema (OpenAPI subset accepted by Gemini, OpenAI
# json_schema and Ollama's `format`).
SHIFT_ITEM_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "date": {
            "type": "string",
            "description": "The full date of the shift in YYYY-MM-DD format, taken from the date column.",
        },
        "dayOfWeek": {
            "type": "string",
            "description": "The day of the week exactly as written on the schedule.",
        },
        "startTime": {
            "type": "string",
            "description": "The shift's start time in 24-hour HH:MM format.",
        },
        "endTime": {
            "type": "string",
            "description": "The shift's end time in 24-hour HH:MM format.",
        },
        "location": {
            "type": "string",
            "description": "The location/store of the shift from the column header.",
        },
    },
    "required": list(SHIFT_FIELDS),
    "propertyOrdering": list(SHIFT_FIELDS),
}

SHIFT_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "shifts": {"type": "array", "items": SHIFT_ITEM_SCHEMA},
    },
    "required": ["shifts"],
    "propertyOrdering": ["shifts"],
}


def strip_ordering(schema: Any) -> Any:
    """Drop Gemini-only keys for providers that use plain JSON Schema."""
    if isinstance(schema, dict):
        return {
            k: strip_ordering(v)
            for k, v in schema.items()
            if k != "propertyOrdering"
        }
    if isinstance(schema, list):
        return [strip_ordering(v) for v in schema]
    return schema
