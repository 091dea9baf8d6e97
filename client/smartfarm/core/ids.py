"""
Identifier normalisation at the API boundary.

The backend returns identifiers in several shapes depending on the route:
plain strings, integers, Mongo extended JSON (``{"$oid": ...}``) or a
nested document carrying ``_id``/``id``. Schemas run every identifier
through ``normalize_id`` once, so the rest of the package only sees ``str``.
"""

from typing import Annotated, Any

from pydantic import BeforeValidator

_NESTED_KEYS = ("$oid", "_id", "id")


def normalize_id(value: Any) -> str:
    """Coerce a supported identifier shape to a non-empty string."""
    # bool is an int subclass; True is never a real identifier
    if isinstance(value, bool):
        raise ValueError(f"Unsupported identifier: {value!r}")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Identifier must not be empty")
        return text
    if isinstance(value, dict):
        for key in _NESTED_KEYS:
            if key in value:
                return normalize_id(value[key])
    raise ValueError(f"Unsupported identifier: {value!r}")


Identifier = Annotated[str, BeforeValidator(normalize_id)]
