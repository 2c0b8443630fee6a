"""
Small request-body validation helpers.

Routes collect field errors in a ``FieldErrors`` and call ``raise_if_any()``
once, which produces the 422 ``{"message", "error", "errors"}`` payload.
"""
import math
from datetime import date, datetime, time

from flask import request

from utils.errors import NotFoundError, ValidationError


class FieldErrors:
    def __init__(self):
        self.errors = {}

    def add(self, field: str, message: str):
        self.errors.setdefault(field, []).append(message)

    def __contains__(self, field):
        return field in self.errors

    def raise_if_any(self):
        if self.errors:
            raise ValidationError(self.errors)


def json_body() -> dict:
    """The request's JSON object, or {} when the body is missing or not an object."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def parse_time(value):
    """Parse "HH:MM" into a time, or return None."""
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except ValueError:
        return None


def parse_date(value):
    """Parse "YYYY-MM-DD" into a date, or return None."""
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def parse_number(value):
    """Finite float, or None. NaN and infinity are rejected."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def parse_int(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if not isinstance(value, str) or not value.strip().isascii():
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def parse_bool(value):
    if isinstance(value, bool):
        return value
    if value in (1, "1", "true", "True"):
        return True
    if value in (0, "0", "false", "False"):
        return False
    return None


def require_time(data: dict, field: str, errors: FieldErrors, label: str, required=True):
    raw = data.get(field)
    if raw is None or raw == "":
        if required:
            errors.add(field, f"{label} is required.")
        return None
    value = parse_time(raw)
    if value is None:
        errors.add(field, f"{label} must be in HH:mm format.")
    return value


def require_date(data: dict, field: str, errors: FieldErrors, label: str, required=True):
    raw = data.get(field)
    if raw is None or raw == "":
        if required:
            errors.add(field, f"{label} is required.")
        return None
    value = parse_date(raw)
    if value is None:
        errors.add(field, f"{label} must be a valid date (YYYY-MM-DD).")
    return value


def get_or_404(model, object_id, message="Resource not found"):
    obj = model.query.get(object_id)
    if obj is None:
        raise NotFoundError(message)
    return obj


def format_time(value: time):
    return value.strftime("%H:%M") if value else None


def format_dt(value: datetime):
    return value.isoformat() if value else None
