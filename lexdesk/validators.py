import math
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import TypeAdapter, ValidationError

from lexdesk.responses import APIError

_datetime_adapter = TypeAdapter(datetime)


def ensure_valid_id(value: str, label: str) -> str:
    """Reject path ids that are not UUIDs with a 400 instead of a 404."""
    try:
        uuid.UUID(str(value))
    except ValueError:
        raise APIError(400, f"Invalid {label} ID")
    return value


def as_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or None if it is not a number.

    Numeric strings are accepted; booleans, NaN and infinities are not.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            value = float(value)
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    number = float(value)
    if not math.isfinite(number):
        return None
    return number


def as_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    try:
        parsed = _datetime_adapter.validate_python(value)
    except ValidationError:
        return None
    return to_naive_utc(parsed)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def null_field_errors(values: Dict[str, Any], model) -> Dict[str, str]:
    """Map each field explicitly set to None on a NOT NULL column to an error."""
    columns = model.__table__.columns
    return {
        field: f"{field.replace('_', ' ').capitalize()} cannot be empty"
        for field, value in values.items()
        if value is None and field in columns and not columns[field].nullable
    }


def reject_null_fields(values: Dict[str, Any], model) -> None:
    errors = null_field_errors(values, model)
    if errors:
        raise APIError(422, "Validation Error", errors)
