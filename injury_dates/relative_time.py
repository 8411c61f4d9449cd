"""
Pure date/time arithmetic for injury-relative anonymisation.

Nothing here holds state.  Parsers validate field widths and numeric ranges
explicitly and raise :class:`~injury_dates.errors.ParseError` rather than
relying on locale-sensitive formatting.
"""

import re
from datetime import datetime, timedelta
from typing import Optional

from injury_dates.errors import ParseError

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 60 * SECONDS_PER_MINUTE
SECONDS_PER_DAY = 24 * SECONDS_PER_HOUR

# Baseline used when no valid baseDate is configured.
EPOCH = datetime(1970, 1, 1)

# ---------------------------------------------------------------------------
# Input formats
# ---------------------------------------------------------------------------

# Time table cells joined with a space: "4/14/2010 21:40:00" (seconds optional)
_TABLE_DATETIME_PATTERN = re.compile(
    r"(\d{1,2})/(\d{1,2})/(\d{4}) (\d{1,2}):(\d{2})(?::(\d{2}))?", re.ASCII
)

# baseDate attribute: "1/1/2000"
_SLASH_DATE_PATTERN = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})", re.ASCII)

# DICOM DA and TM values: "20100415", "0130" or "013000" (fraction stripped first)
_DICOM_DATE_PATTERN = re.compile(r"(\d{4})(\d{2})(\d{2})", re.ASCII)
_DICOM_TIME_PATTERN = re.compile(r"(\d{2})(\d{2})(\d{2})?", re.ASCII)


def _build(
    year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: int = 0,
    source: str = "",
) -> datetime:
    try:
        return datetime(year, month, day, hour, minute, second)
    except ValueError as exc:
        raise ParseError(f"Out of range date/time {source!r}: {exc}") from exc


def _optional_int(value: Optional[str]) -> int:
    return int(value) if value else 0


def parse_table_datetime(text: str) -> datetime:
    """Parse a time table date/time such as ``"4/14/2010 21:40:00"``.

    Month and day need no zero padding; the hour is 24-hour and the seconds
    field is optional.
    """
    match = _TABLE_DATETIME_PATTERN.fullmatch(text.strip())
    if not match:
        raise ParseError(f"Not a M/D/YYYY HH:MM[:SS] date/time: {text!r}")
    month, day, year, hour, minute = (int(g) for g in match.groups()[:5])
    second = _optional_int(match.group(6))
    return _build(year, month, day, hour, minute, second, source=text)


def parse_base_date(text: str) -> datetime:
    """Parse a baseline date given as ``M/D/YYYY`` or DICOM ``YYYYMMDD``.

    The result is midnight of that day.
    """
    text = text.strip()
    match = _SLASH_DATE_PATTERN.fullmatch(text)
    if match:
        month, day, year = (int(g) for g in match.groups())
        return _build(year, month, day, source=text)
    match = _DICOM_DATE_PATTERN.fullmatch(text)
    if match:
        year, month, day = (int(g) for g in match.groups())
        return _build(year, month, day, source=text)
    raise ParseError(f"Not a M/D/YYYY or YYYYMMDD date: {text!r}")


def absolute_datetime(date_digits: str, time_digits: str) -> datetime:
    """Combine a DICOM date (``YYYYMMDD``) and time (``HHMM[SS]``).

    Only the first 8 date digits are used.  The time must be exactly 4 or 6
    digits (a 4 digit time has zero seconds); a DICOM ``.ffffff`` fraction
    is ignored.

    Raises
    ------
    ParseError
        If either value is too short, non-numeric, or out of range.
    """
    date_digits = date_digits.strip()
    time_digits = time_digits.strip().split(".", 1)[0]

    date_match = _DICOM_DATE_PATTERN.match(date_digits)
    if not date_match:
        raise ParseError(f"Not a YYYYMMDD date: {date_digits!r}")
    time_match = _DICOM_TIME_PATTERN.fullmatch(time_digits)
    if not time_match:
        raise ParseError(f"Not a HHMM[SS] time: {time_digits!r}")

    year, month, day = (int(g) for g in date_match.groups())
    hour, minute = int(time_match.group(1)), int(time_match.group(2))
    second = _optional_int(time_match.group(3))
    return _build(
        year, month, day, hour, minute, second, source=f"{date_digits} {time_digits}"
    )


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------

def relative_instant(
    observed: datetime, injury: datetime, baseline: datetime
) -> datetime:
    """Replay the injury-to-observed interval starting from *baseline*."""
    return baseline + (observed - injury)


def _truncating_divmod(numerator: int, denominator: int) -> tuple[int, int]:
    """divmod() rounding the quotient toward zero; the remainder keeps the
    sign of *numerator*."""
    quotient = abs(numerator) // denominator
    if numerator < 0:
        quotient = -quotient
    return quotient, numerator - quotient * denominator


def whole_seconds(delta: timedelta) -> int:
    """Return *delta* in whole seconds, truncating any fraction toward zero."""
    micros = (delta.days * SECONDS_PER_DAY + delta.seconds) * 1_000_000 + delta.microseconds
    return _truncating_divmod(micros, 1_000_000)[0]


def elapsed_breakdown(observed: datetime, injury: datetime) -> tuple[int, int, int]:
    """Split ``observed - injury`` into whole (days, hours, minutes).

    A negative interval (observed before injury) yields non-positive
    components, e.g. -90 minutes is ``(0, -1, -30)``.
    """
    seconds = whole_seconds(observed - injury)
    days, rest = _truncating_divmod(seconds, SECONDS_PER_DAY)
    hours, rest = _truncating_divmod(rest, SECONDS_PER_HOUR)
    minutes = _truncating_divmod(rest, SECONDS_PER_MINUTE)[0]
    return days, hours, minutes


# ---------------------------------------------------------------------------
# Output formats
# ---------------------------------------------------------------------------

def format_elapsed(days: int, hours: int, minutes: int) -> str:
    return f"{days} days; {hours} hours; {minutes} minutes"


def format_dicom_date(value: datetime) -> str:
    """Format as DICOM DA, e.g. ``20100414``."""
    return f"{value.year:04d}{value.month:02d}{value.day:02d}"


def format_dicom_time(value: datetime) -> str:
    """Format as DICOM TM, e.g. ``214000``."""
    return f"{value.hour:02d}{value.minute:02d}{value.second:02d}"
