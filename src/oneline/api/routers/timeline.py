"""
API Routes for timelines and event details.

Endpoints
---------
- `GET /config`: Public view of the server configuration.
- `POST /auth/verify`: Check an access password.
- `POST /timeline`: Generate a timeline for a query (one model call).
- `POST /timeline/view`: Re-filter/re-sort events the client already holds.
- `POST /events/detail`: Generate the detail analysis of one event.

Design Decisions
----------------
- **Synchronous handlers**: the transport is blocking, so handlers are plain
  `def` functions and FastAPI runs them in its thread pool.
- **Stateless**: the server keeps no per-user timeline; clients send events
  back for `/timeline/view` and `/events/detail`. Display gating on the
  selected event is the client's side of the single-slot model, helped by
  `event_id` in the detail response.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from oneline.agents.detail_agent import run_event_detail
from oneline.agents.timeline_agent import run_timeline
from oneline.api.deps import SettingsDep, StoreDep, check_access
from oneline.api.schemas import (
    ApiOverride,
    DetailRequest,
    PasswordCheck,
    PasswordResult,
    PublicConfig,
    TimelineRequest,
    TimelineResponse,
    ViewRequest,
    ViewResponse,
)
from oneline.core.config import (
    ApiConfig,
    has_access_password,
    resolve_api_config,
    validate_access_password,
)
from oneline.core.contracts.detail import EventDetail
from oneline.core.filtering import apply_view
from oneline.core.settings import Settings
from oneline.core.storage import KeyValueStore

router = APIRouter(tags=["Timeline"])


def _api_config(settings: Settings, store: KeyValueStore, api: ApiOverride | None) -> ApiConfig:
    overrides = api.as_overrides() if api else None
    return resolve_api_config(settings, store, overrides).require()


@router.get("/config", response_model=PublicConfig, summary="Public configuration")
def get_public_config(settings: SettingsDep, store: StoreDep) -> PublicConfig:
    """Return endpoint/model and feature flags; the API key is never exposed."""
    resolved = resolve_api_config(settings, store)
    return PublicConfig(
        endpoint=resolved.endpoint,
        model=resolved.model,
        configured=resolved.is_configured,
        allow_user_config=settings.allow_user_config,
        password_required=has_access_password(settings),
    )


@router.post("/auth/verify", response_model=PasswordResult, summary="Check access password")
def verify_password(body: PasswordCheck, settings: SettingsDep) -> PasswordResult:
    return PasswordResult(valid=validate_access_password(settings, body.password))


@router.post(
    "/timeline",
    response_model=TimelineResponse,
    dependencies=[Depends(check_access)],
    summary="Generate a timeline",
)
def create_timeline(
    request: TimelineRequest,
    settings: SettingsDep,
    store: StoreDep,
) -> TimelineResponse:
    """
    Ask the model for a timeline of `query` and return the visible events.

    The `date_filter` both adds a date-range hint to the model query and
    filters the parsed events; `sort` orders them. `total` counts the events
    before filtering, `warning` is set when nothing could be extracted.
    """
    outcome = run_timeline(
        request.query,
        _api_config(settings, store, request.api),
        date_filter=request.date_filter,
        timeout_seconds=settings.request_timeout,
    )
    events = apply_view(outcome.result.events, request.date_filter, request.sort)
    return TimelineResponse(
        query=outcome.query,
        summary=outcome.result.summary,
        events=events,
        total=len(outcome.result.events),
        warning=outcome.warning,
    )


@router.post("/timeline/view", response_model=ViewResponse, summary="Filter and sort events")
def view_timeline(request: ViewRequest) -> ViewResponse:
    """Apply a date filter and sort direction without calling the model."""
    events = apply_view(request.events, request.date_filter, request.sort)
    return ViewResponse(events=events, total=len(request.events))


@router.post(
    "/events/detail",
    response_model=EventDetail,
    dependencies=[Depends(check_access)],
    summary="Analyse one event",
)
def create_event_detail(
    request: DetailRequest,
    settings: SettingsDep,
    store: StoreDep,
) -> EventDetail:
    """Return the sectioned analysis of `event`, keyed by its `event_id`."""
    return run_event_detail(
        request.event,
        request.query,
        _api_config(settings, store, request.api),
        timeout_seconds=settings.request_timeout,
    )


__all__ = ["router"]
