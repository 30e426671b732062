"""Value coercion helpers for formula evaluation.

Everything here is total: malformed input yields ``None`` (or an empty
string for text) instead of raising, so one bad row never aborts a
table.
"""

import math
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any

from reportbuilder.schemas.field import DateUnit

Number = int | float

_MICROSECONDS_PER_HOUR = 3_600 * 1_000_000
_MICROSECONDS_PER_DAY = 24 * _MICROSECONDS_PER_HOUR


# =============================================================================
# Numbers
# =============================================================================


def _float_safe(number: int) -> int | None:
    """Keep an int only if it can also take part in float arithmetic."""
    try:
        float(number)
    except OverflowError:
        return None
    return number


def to_number(value: Any) -> Number | None:
    """
    Coerce a cell or literal to a number.

    Numbers pass through, booleans count as 1/0 and numeric strings are
    parsed. Missing values, blank or non-numeric strings, non-finite
    values and integers too large for a float are not numbers.

    Returns:
        The number, or None when the value is not a number
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return _float_safe(value)
    if isinstance(value, (float, Decimal)):
        number = float(value)
        return number if math.isfinite(number) else None
    if isinstance(value, str):
        text = value.strip()
        # int() and float() accept digit separators, cell text should not
        if not text or "_" in text:
            return None
        try:
            return _float_safe(int(text))
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def normalize_number(value: Number) -> Number:
    """Return integral floats as int so ``5.0`` displays as ``5``."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


# =============================================================================
# Text
# =============================================================================


def to_text(value: Any) -> str:
    """Render a cell value as text; missing values become an empty string."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


# =============================================================================
# Dates
# =============================================================================


def parse_date(value: Any) -> datetime | None:
    """
    Parse a date cell into an aware datetime.

    Accepts date and datetime objects as well as ISO calendar dates
    (``YYYY-MM-DD``) and ISO date-times. Naive values are taken as UTC.

    Returns:
        Parsed datetime, or None if the value is missing or malformed
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_date(value: Any) -> str:
    """Render a date cell as ``YYYY-MM-DD``; unparsable values render empty."""
    parsed = parse_date(value)
    if parsed is None:
        return ""
    try:
        utc = parsed.astimezone(timezone.utc)
    except OverflowError:
        # The UTC instant falls outside year 1..9999
        return ""
    return utc.date().isoformat()


def round_half_away_from_zero(numerator: int, denominator: int) -> int:
    """Integer quotient rounded to nearest, ties away from zero."""
    quotient, remainder = divmod(abs(numerator), denominator)
    if 2 * remainder >= denominator:
        quotient += 1
    return -quotient if numerator < 0 else quotient


def date_diff(start: Any, end: Any, unit: str = DateUnit.DAYS.value) -> int | None:
    """
    Difference between two dates in whole days or hours.

    Args:
        start: Date the difference is measured from
        end: Date the difference is measured to
        unit: ``hours``, or ``days`` (also used for unknown units)

    Returns:
        Rounded, sign-preserving difference, or None if either date is unparsable
    """
    d1 = parse_date(start)
    d2 = parse_date(end)
    if d1 is None or d2 is None:
        return None

    delta: timedelta = d2 - d1
    microseconds = (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds

    if unit == DateUnit.HOURS.value:
        return round_half_away_from_zero(microseconds, _MICROSECONDS_PER_HOUR)
    return round_half_away_from_zero(microseconds, _MICROSECONDS_PER_DAY)
