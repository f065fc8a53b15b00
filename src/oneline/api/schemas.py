"""
Request/response models of the OneLine HTTP API.

The timeline records themselves are the core contracts
(:class:`TimelineEvent`, :class:`EventDetail`); this module only adds the
envelopes around them.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from oneline.core.contracts.filters import DateFilterConfig, SortDirection
from oneline.core.contracts.timeline import TimelineEvent


class ApiOverride(BaseModel):
    """Per-request API settings; honored only when user configuration is allowed."""

    model_config = ConfigDict(populate_by_name=True)

    endpoint: str | None = None
    model: str | None = None
    api_key: str | None = Field(default=None, alias="apiKey")

    def as_overrides(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class TimelineRequest(BaseModel):
    """Body of ``POST /timeline``."""

    model_config = ConfigDict(populate_by_name=True)

    query: str = Field(min_length=1, max_length=500)
    date_filter: DateFilterConfig = Field(default_factory=DateFilterConfig, alias="dateFilter")
    sort: SortDirection = SortDirection.ASC
    api: ApiOverride | None = None


class TimelineResponse(BaseModel):
    """Filtered and ordered events plus the summary of one model answer."""

    query: str
    summary: str
    events: list[TimelineEvent]
    total: int = Field(description="Number of events before filtering")
    warning: str | None = None


class ViewRequest(BaseModel):
    """Body of ``POST /timeline/view``: re-filter events the client already has."""

    model_config = ConfigDict(populate_by_name=True)

    events: list[TimelineEvent]
    date_filter: DateFilterConfig = Field(default_factory=DateFilterConfig, alias="dateFilter")
    sort: SortDirection = SortDirection.ASC


class ViewResponse(BaseModel):
    events: list[TimelineEvent]
    total: int


class DetailRequest(BaseModel):
    """Body of ``POST /events/detail``."""

    event: TimelineEvent
    query: str = Field(min_length=1, max_length=500)
    api: ApiOverride | None = None


class PasswordCheck(BaseModel):
    password: str = ""


class PasswordResult(BaseModel):
    valid: bool


class PublicConfig(BaseModel):
    """What a client may know about the server configuration (never the key)."""

    endpoint: str
    model: str
    configured: bool
    allow_user_config: bool
    password_required: bool


__all__ = [
    "ApiOverride",
    "DetailRequest",
    "PasswordCheck",
    "PasswordResult",
    "PublicConfig",
    "TimelineRequest",
    "TimelineResponse",
    "ViewRequest",
    "ViewResponse",
]
