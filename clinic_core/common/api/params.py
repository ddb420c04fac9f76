# clinic_core/common/api/params.py
from __future__ import annotations

from datetime import date

from django.utils.dateparse import parse_date
from rest_framework.exceptions import ValidationError as DRFValidationError


def int_or_none(value: str | None, field_name: str) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(str(value))
    except (TypeError, ValueError):
        raise DRFValidationError({field_name: "A valid integer is required."})


def require_int(value, field_name: str) -> int:
    parsed = int_or_none(value, field_name)
    if parsed is None:
        raise DRFValidationError({field_name: "This field is required."})
    return parsed


def bool_or_none(value: str | None) -> bool | None:
    if value is None or value == "":
        return None
    return str(value).strip().lower() in ("1", "true", "yes")


def date_or_none(value: str | None, field_name: str) -> date | None:
    if not value:
        return None
    try:
        parsed = parse_date(str(value))
    except ValueError:
        parsed = None
    if parsed is None:
        raise DRFValidationError({field_name: "Invalid date. Use YYYY-MM-DD."})
    return parsed
