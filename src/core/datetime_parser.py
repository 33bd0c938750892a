"""Date and time fragment parser — pure business logic.

Turns the short text a user types during /add ("15", "15-03", "15.03.2025",
"930", "9:30") into calendar values. Missing date fields default to today's
month and year.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import re
from datetime import date, time

from src.core.errors import InvalidFormatError, InvalidValueError

_DATE_SEPARATORS = re.compile(r"[-,. ]")
_TIME_SEPARATORS = re.compile(r"[-,.:]")
_TIME_MARKERS = (".", ":", "-")

DATE_FORMAT_ERROR = "Invalid date format. Please enter the date as dd-mm-yyyy, dd-mm or dd."
DATE_VALUE_ERROR = "Invalid date. Please check your input and try again."
TIME_FORMAT_ERROR = "Invalid time format. Please enter the time as hh:mm, hhmm, or h:mm."
TIME_VALUE_ERROR = "Invalid time. Please check your input and try again."


def _split(text: str, separators: re.Pattern[str]) -> list[str]:
    return [part for part in separators.split(text) if part]


def _to_int(token: str, message: str) -> int:
    # int() also accepts "+5" and " 5"; only plain digits are valid here
    if not (token.isascii() and token.isdigit()):
        raise InvalidFormatError(message)
    return int(token)


def parse_date(text: str, today: date | None = None) -> date:
    """Parse ``dd``, ``dd-mm`` or ``dd-mm-yyyy`` into a date.

    Any of ``- , . space`` separates fields. Missing month and year are
    taken from ``today`` (defaults to the current date).

    Raises:
        InvalidFormatError: zero or more than three fields, or a non-numeric field.
        InvalidValueError: day/month/year out of range, or not a real date.
    """
    if today is None:
        today = date.today()

    parts = _split(text.strip(), _DATE_SEPARATORS)
    if not parts or len(parts) > 3:
        raise InvalidFormatError(DATE_FORMAT_ERROR)

    day = _to_int(parts[0], DATE_FORMAT_ERROR)
    month = _to_int(parts[1], DATE_FORMAT_ERROR) if len(parts) >= 2 else today.month
    year = _to_int(parts[2], DATE_FORMAT_ERROR) if len(parts) == 3 else today.year

    if not (1 <= day <= 31 and 1 <= month <= 12 and year >= 0):
        raise InvalidValueError(DATE_VALUE_ERROR)

    try:
        return date(year, month, day)
    except ValueError as exc:
        # 31-02, 31-04, year 0 ...
        raise InvalidValueError(DATE_VALUE_ERROR) from exc


def parse_time(text: str) -> time:
    """Parse ``hh:mm``, ``h:mm``, ``hhmm`` or ``hmm`` into a time.

    With a separator (``. : -``) the first two fields are hours and minutes.
    Without one, a 3-character input is ``h`` + ``mm`` and a 4-character
    input is ``hh`` + ``mm``.

    Raises:
        InvalidFormatError: unsupported shape or non-numeric input.
        InvalidValueError: hours not in 0-23 or minutes not in 0-59.
    """
    text = text.strip()

    if any(marker in text for marker in _TIME_MARKERS):
        parts = _split(text, _TIME_SEPARATORS)
        if len(parts) < 2:
            raise InvalidFormatError(TIME_FORMAT_ERROR)
        hours = _to_int(parts[0], TIME_FORMAT_ERROR)
        minutes = _to_int(parts[1], TIME_FORMAT_ERROR)
    elif len(text) == 3:
        hours = _to_int(text[:1], TIME_FORMAT_ERROR)
        minutes = _to_int(text[1:], TIME_FORMAT_ERROR)
    elif len(text) == 4:
        hours = _to_int(text[:2], TIME_FORMAT_ERROR)
        minutes = _to_int(text[2:], TIME_FORMAT_ERROR)
    else:
        raise InvalidFormatError(TIME_FORMAT_ERROR)

    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise InvalidValueError(TIME_VALUE_ERROR)
    return time(hours, minutes)
