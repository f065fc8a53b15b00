"""Sectioned detail view for a single timeline event."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .artifact import Artifact


class DetailSection(BaseModel):
    """One ``===标题===`` block of a detail answer; ``title`` is empty for a preamble."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(default="")
    content: str = Field(default="")


class EventDetail(Artifact):
    """The AI-generated analysis of one event, keyed by the event id."""

    kind: str = Field(default="event_detail.v1")

    event_id: str
    sections: list[DetailSection] = Field(default_factory=list)
    raw: str = Field(default="", description="Unmodified model output")

    def section(self, title: str) -> DetailSection | None:
        for sec in self.sections:
            if sec.title == title:
                return sec
        return None


__all__ = ["DetailSection", "EventDetail"]
