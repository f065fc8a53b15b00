"""
Timeline session: the state one user works with during a query session.

Flow Overview
-------------
1. :meth:`TimelineSession.generate` asks the timeline agent for a new result
   and, if that request is still the current one when it returns, replaces
   the session's result wholesale (selection and detail are reset).
2. :attr:`TimelineSession.visible_events` runs the filter/sort pipeline on
   every access against the current result, date filter and direction.
3. :meth:`TimelineSession.select_event` + :meth:`request_detail` fetch the
   analysis of one event; :attr:`current_detail` only returns a detail that
   was produced for the event selected *now*.

Design Principles
-----------------
- **Snapshot replacement**: the result and filter are immutable contracts;
  the session only swaps references and bumps :attr:`revision`.
- **Two independent slots**: timeline and detail requests each have their own
  :class:`RequestSlot`, so one never blocks or overwrites the other.
- **No retries**: a failed request is recorded on its slot and re-raised.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date

from oneline.agents.detail_agent import run_event_detail
from oneline.agents.timeline_agent import ChatClient, TimelineOutcome, outcome_from_raw, run_timeline
from oneline.core.config import ApiConfig
from oneline.core.contracts.detail import EventDetail
from oneline.core.contracts.filters import DateFilterConfig, SortDirection
from oneline.core.contracts.timeline import TimelineEvent, TimelineResult
from oneline.core.filtering import apply_view
from oneline.core.requests import RequestSlot
from oneline.core.settings import get_logger

logger = get_logger(__name__)


class TimelineSession:
    """Holds the current timeline, the view settings, and the selected event."""

    def __init__(
        self,
        api_config: ApiConfig,
        *,
        client: ChatClient | None = None,
        today: Callable[[], date] = date.today,
        timeout_seconds: float = 60.0,
    ) -> None:
        self.api_config = api_config
        self._client = client
        self._today = today
        self._timeout = timeout_seconds

        self.query: str = ""
        self.result: TimelineResult = TimelineResult()
        self.warning: str | None = None
        self.raw: str = ""
        self.date_filter: DateFilterConfig = DateFilterConfig()
        self.sort_direction: SortDirection = SortDirection.ASC
        self.selected_event_id: str | None = None
        self.revision: int = 0

        self.timeline_slot: RequestSlot[TimelineOutcome] = RequestSlot()
        self.detail_slot: RequestSlot[EventDetail] = RequestSlot()

    # ------------------------------- Timeline -------------------------------

    def generate(self, query: str) -> TimelineOutcome:
        """Request a new timeline for ``query`` using the current date filter.

        Raises
        ------
        TransportError
            If the chat endpoint call fails (recorded on :attr:`timeline_slot`).
        """
        ticket = self.timeline_slot.begin(query.strip())
        try:
            outcome = run_timeline(
                query,
                self.api_config,
                date_filter=self.date_filter,
                today=self._today(),
                client=self._client,
                timeout_seconds=self._timeout,
            )
        except Exception as exc:
            self.timeline_slot.fail(ticket, str(exc))
            raise

        if self.timeline_slot.complete(ticket, outcome):
            self._adopt(outcome)
        else:
            logger.debug("Dropping superseded timeline for %r", outcome.query)
        return outcome

    def load_raw(self, query: str, raw: str) -> TimelineOutcome:
        """Adopt a previously saved raw answer without calling the model."""
        outcome = outcome_from_raw(query.strip(), raw)
        self.timeline_slot.reset()
        self._adopt(outcome)
        return outcome

    def _adopt(self, outcome: TimelineOutcome) -> None:
        self.query = outcome.query
        self.result = outcome.result
        self.warning = outcome.warning
        self.raw = outcome.raw
        self.selected_event_id = None
        self.detail_slot.reset()
        self.revision += 1

    # ------------------------------- View -----------------------------------

    def set_date_filter(self, config: DateFilterConfig) -> None:
        self.date_filter = config
        self.revision += 1

    def set_sort_direction(self, direction: SortDirection | str) -> None:
        self.sort_direction = SortDirection(direction)
        self.revision += 1

    def toggle_sort_direction(self) -> SortDirection:
        self.set_sort_direction(self.sort_direction.toggled())
        return self.sort_direction

    @property
    def visible_events(self) -> list[TimelineEvent]:
        """The filtered, ordered events; recomputed on every access."""
        return apply_view(self.result.events, self.date_filter, self.sort_direction, self._today())

    # ------------------------------- Detail ---------------------------------

    def select_event(self, event_id: str) -> TimelineEvent:
        """Mark ``event_id`` as selected.

        Raises
        ------
        KeyError
            If the current result has no such event.
        """
        event = self.result.get(event_id)
        if event is None:
            raise KeyError(event_id)
        self.selected_event_id = event_id
        return event

    @property
    def selected_event(self) -> TimelineEvent | None:
        if self.selected_event_id is None:
            return None
        return self.result.get(self.selected_event_id)

    def request_detail(self, event_id: str | None = None) -> EventDetail:
        """Fetch the detail of ``event_id`` (or of the selected event).

        Raises
        ------
        ValueError
            If no event is selected.
        TransportError
            If the chat endpoint call fails (recorded on :attr:`detail_slot`).
        """
        event = self.select_event(event_id) if event_id else self.selected_event
        if event is None:
            raise ValueError("No event selected")

        ticket = self.detail_slot.begin(event.id)
        try:
            detail = run_event_detail(
                event,
                self.query,
                self.api_config,
                client=self._client,
                timeout_seconds=self._timeout,
            )
        except Exception as exc:
            self.detail_slot.fail(ticket, str(exc))
            raise

        if not self.detail_slot.complete(ticket, detail):
            logger.debug("Dropping superseded detail for %s", event.id)
        return detail

    @property
    def current_detail(self) -> EventDetail | None:
        """The detail for the selected event, or ``None`` if not (yet) available."""
        return self.detail_slot.value_for(self.selected_event_id)

    @property
    def current_detail_error(self) -> str | None:
        return self.detail_slot.error_for(self.selected_event_id)


__all__ = ["TimelineSession"]
