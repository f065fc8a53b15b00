"""Timeline records produced by the response parser.

- `Actor`          : a labeled participant (name, role, display color).
- `TimelineEvent`  : one dated entry with its actors and a source label.
- `TimelineResult` : the ordered events of one response plus the summary.

Dates stay strings on purpose: the model answers with ``YYYY``, ``YYYY-MM`` or
``YYYY-MM-DD`` (or something else entirely) and the precision itself matters
for ordering, see :mod:`oneline.core.dates`.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .artifact import Artifact


class Actor(BaseModel):
    """A participant in an event. `color` is always populated after extraction."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    role: str | None = Field(default=None)
    color: str = Field(min_length=1, description="CSS-style color, usually '#rrggbb'")

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("actor name must not be blank")
        return v


class TimelineEvent(Artifact):
    """A single event on the timeline."""

    kind: str = Field(default="timeline_event.v1")

    id: str = Field(description="Positional id, stable within one result set")
    date: str = Field(default="", description="YYYY, YYYY-MM or YYYY-MM-DD (not enforced)")
    title: str = Field(default="")
    description: str = Field(default="")
    people: list[Actor] = Field(default_factory=list)
    source: str | None = Field(default=None)


class TimelineResult(Artifact):
    """Parsed events (canonical ascending order) plus the overall summary."""

    kind: str = Field(default="timeline_result.v1")

    events: list[TimelineEvent] = Field(default_factory=list)
    summary: str = Field(default="")

    @property
    def is_empty(self) -> bool:
        return not self.events

    def get(self, event_id: str) -> TimelineEvent | None:
        """Return the event with ``event_id`` or ``None``."""
        for event in self.events:
            if event.id == event_id:
                return event
        return None


__all__ = ["Actor", "TimelineEvent", "TimelineResult"]
