"""Timeline filter/sort pipeline.

A pure function of ``(events, DateFilterConfig, SortDirection)`` producing
the list that is actually displayed. Nothing is cached: callers re-run
:func:`apply_view` whenever the events, the filter, or the direction change.

Filter rules
------------
``all``
    No filtering.
``month`` / ``halfYear`` / ``year``
    Start bound = today minus 1 / 6 / 12 calendar months. No end bound, so
    events dated in the future stay visible.
``custom``
    Start and end bounds come from the config; either may be missing.

An event is excluded only when its parsed date is before the start bound or
after the end bound. Dates that cannot be parsed are always kept.

Sorting
-------
Stable sort on :func:`oneline.core.dates.comparable_key`. ``desc`` reverses
the order; events with equal keys keep their extraction order either way.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date

from oneline.core.contracts.filters import RELATIVE_MONTHS, DateFilterConfig, SortDirection
from oneline.core.contracts.timeline import TimelineEvent
from oneline.core.dates import comparable_key, parse_event_date, shift_months

Bounds = tuple[date | None, date | None]


def resolve_bounds(config: DateFilterConfig, today: date | None = None) -> Bounds:
    """Return the ``(start, end)`` bounds implied by ``config``.

    Parameters
    ----------
    config:
        The selected date filter.
    today:
        Reference day for the relative options; defaults to ``date.today()``.
    """
    if config.option == "custom":
        return config.start_date, config.end_date

    months = RELATIVE_MONTHS.get(config.option)
    if months is None:
        return None, None

    # Day granularity: an event dated on the start day itself is kept.
    ref = today or date.today()
    return shift_months(ref, -months), None


def in_range(event: TimelineEvent, bounds: Bounds) -> bool:
    """Return ``False`` only when the event's date is known and out of range."""
    start, end = bounds
    event_date = parse_event_date(event.date)
    if event_date is None:
        return True
    if start is not None and event_date < start:
        return False
    if end is not None and event_date > end:
        return False
    return True


def filter_events(
    events: Iterable[TimelineEvent],
    config: DateFilterConfig,
    today: date | None = None,
) -> list[TimelineEvent]:
    """Keep the events that fall inside the range selected by ``config``."""
    if config.option == "all":
        return list(events)
    bounds = resolve_bounds(config, today)
    return [e for e in events if in_range(e, bounds)]


def sort_events(
    events: Iterable[TimelineEvent],
    direction: SortDirection | str = SortDirection.ASC,
) -> list[TimelineEvent]:
    """Stable sort by comparable date key in the requested direction."""
    reverse = SortDirection(direction) is SortDirection.DESC
    # `sorted` keeps equal keys in input order even with reverse=True.
    return sorted(events, key=lambda e: comparable_key(e.date), reverse=reverse)


def apply_view(
    events: Sequence[TimelineEvent],
    config: DateFilterConfig | None = None,
    direction: SortDirection | str = SortDirection.ASC,
    today: date | None = None,
) -> list[TimelineEvent]:
    """Filter then sort ``events``; the input sequence is left untouched."""
    filtered = filter_events(events, config or DateFilterConfig(), today)
    return sort_events(filtered, direction)


__all__ = [
    "Bounds",
    "apply_view",
    "filter_events",
    "in_range",
    "resolve_bounds",
    "sort_events",
]
