"""Helpers for the resource layer that consumes call results."""

import typing as t
from datetime import datetime

from .domain.exceptions import ApiError

NOT_FOUND_STATUS_CODE = 404


def pluck_data(payload: t.Any) -> t.Any:
    """Return the ``data`` member of an API response envelope."""
    if not isinstance(payload, dict) or "data" not in payload:
        raise ValueError("Expected response envelope with a 'data' field")
    return payload["data"]


def catch_not_found_or_raise(error: Exception) -> None:
    """Swallow a 404 ApiError (the resource does not exist), re-raise the rest.

    Meant to be called from an ``except`` block of a getter that should
    return None for missing resources.
    """
    if isinstance(error, ApiError) and error.status_code == NOT_FOUND_STATUS_CODE:
        return None
    raise error


def parse_date_fields(value: t.Any) -> t.Any:
    """Recursively convert ISO-8601 strings under ``*At`` keys to datetimes.

    Strings that do not parse are left as they are.
    """
    if isinstance(value, list):
        return [parse_date_fields(item) for item in value]
    if not isinstance(value, dict):
        return value

    parsed: dict[str, t.Any] = {}
    for key, item in value.items():
        if isinstance(item, str) and key.endswith("At"):
            parsed[key] = _parse_datetime(item)
        else:
            parsed[key] = parse_date_fields(item)
    return parsed


def _parse_datetime(text: str) -> datetime | str:
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return text
