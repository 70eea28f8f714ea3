from collections.abc import Mapping

from marshmallow import ValidationError


def not_blank(value: str) -> None:
    if value is None or not str(value).strip():
        raise ValidationError("Field cannot be blank.")


def strip_strings(data, keys):
    """Trim the listed string fields of an incoming mapping (form or JSON)."""
    if not isinstance(data, Mapping):
        raise ValidationError("Invalid input type.")
    cleaned = dict(data.items())
    for key in keys:
        if isinstance(cleaned.get(key), str):
            cleaned[key] = cleaned[key].strip()
    return cleaned


def lower(value):
    return value.strip().lower() if isinstance(value, str) else value
