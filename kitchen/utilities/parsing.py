"""Lenient numeric parsing for values coming from stored JSON records."""
import math
from datetime import date, datetime
from typing import Any, Optional

from kitchen.utilities.constants import DATE_FORMAT


def parse_number(value: Any, default: float = 0.0) -> float:
    """Return value as a finite float, or default when it cannot be parsed.

    Booleans, blanks, NaN and infinities all count as unparseable.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def parse_bool(value: Any, default: bool = False) -> bool:
    """Read a stored flag; "false", "0", "no" and blanks are False rather than truthy strings."""
    if value is None:
        return default
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("true", "1", "yes", "y", "on"):
            return True
        if text in ("false", "0", "no", "n", "off", ""):
            return False
        return default
    return bool(value)


def parse_date(value: Any) -> Optional[date]:
    """Parse a DD-MM-YYYY (or ISO) date, returning None for anything else."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    for fmt in (DATE_FORMAT, "%Y-%m-%d"):
        try:
            return datetime.strptime(value.strip(), fmt).date()
        except ValueError:
            continue
    return None


def format_date(value: Optional[date]) -> str:
    return value.strftime(DATE_FORMAT) if isinstance(value, date) else ""
