"""Event number selection parser — pure business logic.

Parses replies like ``"2, 4-7, 9"`` into the list of 1-based event numbers
to delete. The result is sorted descending so that removing items from a
list one by one never shifts a number that is still waiting to be removed.
"""

from __future__ import annotations

import re

from src.core.errors import InvalidFormatError, OutOfRangeError

_SEPARATORS = re.compile(r"[, .]")

EMPTY_SELECTION_ERROR = "Please enter at least one event number."


def _parse_number(token: str) -> int | None:
    return int(token) if token.isascii() and token.isdigit() else None


def _parse_span(token: str) -> tuple[int, int]:
    """Parse ``a-b`` (or a single number ``a``) into inclusive bounds."""
    if "-" not in token:
        number = _parse_number(token)
        if number is None:
            raise InvalidFormatError(f"Invalid number: '{token}'. Please try again.")
        return number, number

    parts = token.split("-")
    if len(parts) != 2:
        raise InvalidFormatError(f"Invalid range: '{token}'. Please try again.")

    start, end = (_parse_number(p.strip()) for p in parts)
    # "7-2" is rejected rather than silently producing nothing
    if start is None or end is None or start > end:
        raise InvalidFormatError(f"Invalid range: '{token}'. Please try again.")
    return start, end


def parse_selection(text: str, limit: int | None = None) -> list[int]:
    """Return the selected event numbers, deduplicated, largest first.

    Args:
        text: The user's reply, e.g. ``"2, 4-7, 9"``.
        limit: Number of events on offer. When given, every bound is checked
            against ``1..limit`` before any range is expanded, so the result
            never holds more than ``limit`` numbers.

    Raises:
        InvalidFormatError: empty selection, a malformed range, or a token
            that is not a non-negative integer.
        OutOfRangeError: (only with ``limit``) the largest bound above
            ``limit``, otherwise the smallest bound below 1.
    """
    tokens = [tok for tok in _SEPARATORS.split(text.strip()) if tok]
    if not tokens:
        raise InvalidFormatError(EMPTY_SELECTION_ERROR)

    spans = [_parse_span(token) for token in tokens]

    if limit is not None:
        highest = max(end for _, end in spans)
        if highest > limit:
            raise OutOfRangeError(highest)
        lowest = min(start for start, _ in spans)
        if lowest < 1:
            raise OutOfRangeError(lowest)

    numbers: set[int] = set()
    for start, end in spans:
        numbers.update(range(start, end + 1))
    return sorted(numbers, reverse=True)
