"""Contract tests: envelope validation, immutability and JSON round trips."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from oneline.core.contracts.detail import DetailSection, EventDetail
from oneline.core.contracts.timeline import Actor, TimelineEvent, TimelineResult


def test_kinds_and_default_version() -> None:
    event = TimelineEvent(id="event-0")
    assert event.kind == "timeline_event.v1"
    assert event.version == "1.0.0"
    assert TimelineResult().kind == "timeline_result.v1"
    assert EventDetail(event_id="event-0").kind == "event_detail.v1"


def test_kind_requires_dotted_suffix() -> None:
    with pytest.raises(ValidationError):
        TimelineEvent(id="event-0", kind="timeline_event")


def test_version_must_be_semver() -> None:
    with pytest.raises(ValidationError):
        TimelineEvent(id="event-0", version="v1")


def test_contracts_are_frozen() -> None:
    event = TimelineEvent(id="event-0", title="T")
    with pytest.raises(ValidationError):
        event.title = "changed"  # type: ignore[misc]


def test_result_lookup_by_id() -> None:
    result = TimelineResult(
        events=[TimelineEvent(id="event-0"), TimelineEvent(id="event-1", title="二")],
        summary="s",
    )
    assert not result.is_empty
    found = result.get("event-1")
    assert found is not None and found.title == "二"
    assert result.get("event-9") is None


def test_json_round_trip_keeps_actors() -> None:
    event = TimelineEvent(
        id="event-0",
        date="2020-05",
        people=[Actor(name="甲", role=None, color="#111111")],
        source="新闻",
    )
    assert TimelineEvent.model_validate_json(event.model_dump_json()) == event


def test_detail_section_defaults() -> None:
    assert DetailSection() == DetailSection(title="", content="")
