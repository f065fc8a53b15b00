"""Date normalization and comparison for variable-precision event dates.

Event dates arrive as free text from the model, usually in one of three
precisions: ``YYYY``, ``YYYY-MM`` or ``YYYY-MM-DD``. Two different views of
such a string are needed:

Comparable key (ordering)
    :func:`comparable_key` strips every non-digit character and the keys are
    compared as plain strings. ``"2023"`` therefore sorts before ``"2023-01"``,
    which sorts before ``"2023-01-15"``. This is precision-sensitive rather
    than calendar-exact, and unpadded input can invert true chronology:
    ``"2023-1-5"`` (``"202315"``) sorts after ``"2023-02-01"``
    (``"20230201"``). Sorting is built on this rule, so it is kept as is.

Calendar date (range filtering)
    :func:`parse_event_date` turns the string into a :class:`datetime.date`,
    defaulting a missing month to January and a missing day to the 1st.
    Anything that is not 1-3 numeric groups yields ``None`` and range filters
    include such events unconditionally (fail-open).
"""

from __future__ import annotations

import calendar
import re
from datetime import date

_NON_DIGITS = re.compile(r"\D")
_GROUP_SEP = re.compile(r"[-./]")


def comparable_key(value: str | None) -> str:
    """Return the digit-only key used to order event dates.

    Examples
    --------
    >>> comparable_key("2023-01-15")
    '20230115'
    >>> comparable_key("约2020年")
    '2020'
    """
    return _NON_DIGITS.sub("", value or "")


def parse_event_date(value: str | None) -> date | None:
    """Parse ``YYYY``, ``YYYY-MM`` or ``YYYY-MM-DD`` into a calendar date.

    Groups may be separated by ``-``, ``.`` or ``/``. Out-of-range months or
    days, empty groups, and non-numeric text all return ``None``.

    Examples
    --------
    >>> parse_event_date("2020-05")
    datetime.date(2020, 5, 1)
    >>> parse_event_date("2020") == date(2020, 1, 1)
    True
    >>> parse_event_date("去年春天") is None
    True
    """
    text = (value or "").strip()
    if not text:
        return None

    groups = _GROUP_SEP.split(text)
    if not 1 <= len(groups) <= 3 or not all(g.isascii() and g.isdigit() for g in groups):
        return None

    year = int(groups[0])
    month = int(groups[1]) if len(groups) > 1 else 1
    day = int(groups[2]) if len(groups) > 2 else 1

    try:
        return date(year, month, day)
    except ValueError:
        return None


def format_date(value: date | None) -> str:
    """Format a date as ``YYYY-MM-DD``; ``None`` becomes an empty string."""
    if value is None:
        return ""
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def shift_months(value: date, months: int) -> date:
    """Move ``value`` by ``months`` calendar months (negative goes back).

    The day is clamped to the length of the target month, so
    ``shift_months(date(2024, 3, 31), -1)`` is ``date(2024, 2, 29)``.
    """
    index = value.year * 12 + (value.month - 1) + months
    year, month0 = divmod(index, 12)
    month = month0 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


__all__ = ["comparable_key", "format_date", "parse_event_date", "shift_months"]
