"""Utility functions for the airstats package."""

import json
import math
import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

import requests

from .exceptions import UpstreamError

_NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def text_value(value: Any) -> str:
    """Render a raw field value as text (lists are comma-joined)."""
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(text_value(v) for v in value if v is not None)
    return str(value)


def first_text(value: Any) -> str:
    """First element of a lookup/list field, or the value itself, as text."""
    if isinstance(value, list):
        return text_value(value[0]) if value else ""
    return text_value(value)


def coerce_value(value: str) -> Union[float, str]:
    """
    Convert a table cell to a number when it looks numeric.

    Args:
        value: Trimmed cell text

    Returns:
        A float for numeric text, otherwise the text unchanged
    """
    if not _NUMBER_PATTERN.fullmatch(value):
        return value
    number = float(value)
    if not math.isfinite(number):
        return value
    return number


def parse_table(header_line: Optional[str], body_text: Optional[str]) -> List[Dict[str, Any]]:
    """
    Parse a semicolon-delimited table into row dictionaries.

    The header line names the columns; every line of the body holds one row
    with values aligned to the headers. Rows whose value count differs from
    the header count are dropped. The ``Year`` column is renamed ``year``.

    Args:
        header_line: Column names separated by ``;``
        body_text: Newline-separated rows, values separated by ``;``

    Returns:
        List of rows in input order
    """
    if not header_line or not body_text:
        return []

    headers = [h.strip() for h in header_line.split(";")]
    keys = ["year" if h == "Year" else h for h in headers]

    rows = []
    for line in body_text.splitlines():
        if not line.strip():
            continue
        values = [v.strip() for v in line.split(";")]
        if len(values) != len(keys):
            continue
        rows.append({key: coerce_value(value) for key, value in zip(keys, values)})
    return rows


def parse_datetime(date_string: Any) -> Optional[datetime]:
    """Parse the date formats found in update timestamp fields."""
    if not date_string or not isinstance(date_string, str):
        return None
    date_string = date_string.strip()

    try:
        return datetime.fromisoformat(date_string.replace("Z", "+00:00"))
    except ValueError:
        pass

    formats = [
        "%Y-%m-%dT%H:%M:%S.%f%z",  # ISO with milliseconds and timezone
        "%d.%m.%Y",               # European date format
        "%d/%m/%Y",
        "%d-%m-%Y",
        "%Y/%m/%d",
    ]

    for fmt in formats:
        try:
            return datetime.strptime(date_string, fmt)
        except ValueError:
            continue

    return None


def handle_api_errors(response: requests.Response) -> None:
    """Raise UpstreamError for any non-success records API response."""
    if 200 <= response.status_code < 300:
        return

    try:
        error_data = response.json()
        error_info = error_data.get("error")
        if isinstance(error_info, dict):
            message = error_info.get("message") or error_info.get("type") or "Unknown error"
            raise UpstreamError(f"API Error {response.status_code}: {message}")
        if isinstance(error_info, str):
            raise UpstreamError(f"API Error {response.status_code}: {error_info}")
    except (json.JSONDecodeError, ValueError, AttributeError):
        pass

    # Fallback for non-JSON error responses
    raise UpstreamError(f"HTTP {response.status_code}: {response.text}")


def normalize_text(value: Any) -> str:
    """Case- and whitespace-insensitive comparison key."""
    return " ".join(text_value(value).split()).lower()
