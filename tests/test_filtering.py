"""Tests for the date filter / sort pipeline.

A fixed `TODAY` is passed everywhere so relative ranges are deterministic.
"""

from __future__ import annotations

from datetime import date

import pytest

from oneline.core.contracts.filters import DateFilterConfig, SortDirection
from oneline.core.contracts.timeline import TimelineEvent
from oneline.core.dates import parse_event_date, shift_months
from oneline.core.filtering import apply_view, filter_events, in_range, resolve_bounds, sort_events

TODAY = date(2025, 3, 15)


def _event(idx: int, when: str) -> TimelineEvent:
    return TimelineEvent(id=f"event-{idx}", date=when, title=f"E{idx}")


EVENTS = [
    _event(0, "2023-06"),
    _event(1, "2024-03-14"),
    _event(2, "2024-03-15"),
    _event(3, "2024-10"),
    _event(4, "2025-03-01"),
    _event(5, "2026"),
    _event(6, "不详"),
]


def _ids(events: list[TimelineEvent]) -> list[str]:
    return [e.id for e in events]


def test_all_keeps_everything_in_input_order() -> None:
    assert filter_events(EVENTS, DateFilterConfig(), TODAY) == EVENTS


@pytest.mark.parametrize(
    ("option", "expected_start"),
    [
        ("month", date(2025, 2, 15)),
        ("halfYear", date(2024, 9, 15)),
        ("year", date(2024, 3, 15)),
    ],
)
def test_relative_bounds_have_no_end(option: str, expected_start: date) -> None:
    config = DateFilterConfig(option=option)  # type: ignore[arg-type]
    assert resolve_bounds(config, TODAY) == (expected_start, None)


def test_year_filter_is_monotone_and_fail_open() -> None:
    kept = filter_events(EVENTS, DateFilterConfig(option="year"), TODAY)
    bound = shift_months(TODAY, -12)

    assert _ids(kept) == ["event-2", "event-3", "event-4", "event-5", "event-6"]
    for event in kept:
        parsed = parse_event_date(event.date)
        assert parsed is None or parsed >= bound
    for event in EVENTS:
        parsed = parse_event_date(event.date)
        if parsed is not None and parsed >= bound:
            assert event in kept


def test_month_filter_keeps_future_events() -> None:
    kept = filter_events(EVENTS, DateFilterConfig(option="month"), TODAY)
    assert _ids(kept) == ["event-4", "event-5", "event-6"]


def test_custom_range_with_both_ends() -> None:
    config = DateFilterConfig.custom(date(2024, 3, 15), date(2024, 12, 31))
    assert _ids(filter_events(EVENTS, config, TODAY)) == ["event-2", "event-3", "event-6"]


def test_custom_range_with_open_ends() -> None:
    only_start = DateFilterConfig.custom(start=date(2025, 1, 1))
    only_end = DateFilterConfig.custom(end=date(2023, 12, 31))
    neither = DateFilterConfig.custom()

    assert _ids(filter_events(EVENTS, only_start, TODAY)) == ["event-4", "event-5", "event-6"]
    assert _ids(filter_events(EVENTS, only_end, TODAY)) == ["event-0", "event-6"]
    assert filter_events(EVENTS, neither, TODAY) == EVENTS


def test_month_precision_date_uses_first_day() -> None:
    bounds = (date(2024, 10, 2), None)
    assert not in_range(_event(0, "2024-10"), bounds)
    assert in_range(_event(0, "2024-11"), bounds)


def test_relative_start_day_is_inclusive() -> None:
    start, _ = resolve_bounds(DateFilterConfig(option="halfYear"), TODAY)
    assert start == date(2024, 9, 15)
    assert in_range(_event(0, "2024-09-15"), (start, None))
    assert not in_range(_event(0, "2024-09-14"), (start, None))


def test_sort_is_stable_in_both_directions() -> None:
    events = [_event(0, "2024"), _event(1, "2023"), _event(2, "2024"), _event(3, "2025")]

    assert _ids(sort_events(events, SortDirection.ASC)) == ["event-1", "event-0", "event-2", "event-3"]
    assert _ids(sort_events(events, "desc")) == ["event-3", "event-0", "event-2", "event-1"]


def test_apply_view_filters_then_sorts_without_mutating_input() -> None:
    snapshot = list(EVENTS)
    shown = apply_view(EVENTS, DateFilterConfig(option="halfYear"), SortDirection.DESC, TODAY)

    # Undated events have the empty key and therefore come last in desc order.
    assert _ids(shown) == ["event-5", "event-4", "event-3", "event-6"]
    assert EVENTS == snapshot


def test_date_filter_accepts_camel_case_aliases() -> None:
    config = DateFilterConfig.model_validate(
        {"option": "custom", "startDate": "2024-01-01", "endDate": "2024-02-01"}
    )
    assert config.is_custom
    assert config.start_date == date(2024, 1, 1)
    assert config.end_date == date(2024, 2, 1)


def test_sort_direction_toggles() -> None:
    assert SortDirection.ASC.toggled() is SortDirection.DESC
    assert SortDirection.DESC.toggled() is SortDirection.ASC
