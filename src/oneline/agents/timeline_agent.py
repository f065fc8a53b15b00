"""
Timeline agent: ask the model for a timeline of a topic and parse the answer.

Responsibilities
----------------
- Build the timeline chat messages, including the date-range hint derived
  from the selected :class:`DateFilterConfig`.
- Call the chat endpoint once (no retries). Transport failures propagate as
  :class:`~oneline.llm.client.TransportError`.
- Parse the answer with :func:`parse_timeline_text`, which never raises.
- Turn "successful answer, zero events" into a soft warning on the outcome
  instead of an error.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from oneline.agents.prompts import build_timeline_messages
from oneline.agents.timeline_parser import parse_timeline_text
from oneline.core.config import ApiConfig
from oneline.core.contracts.filters import DateFilterConfig
from oneline.core.contracts.timeline import TimelineResult
from oneline.core.settings import get_logger
from oneline.llm.client import DEFAULT_TEMPERATURE, LLMClient

logger = get_logger(__name__)

EMPTY_RESULT_WARNING = "No timeline events could be extracted from the model response."


class ChatClient(Protocol):
    """What the agents need from a transport: one text completion per call."""

    def generate(
        self,
        messages: Sequence[Mapping[str, str]],
        *,
        temperature: float | None = None,
    ) -> str: ...


@dataclass(frozen=True, slots=True)
class TimelineOutcome:
    """Everything one timeline request produced.

    ``raw`` is kept so a run can be saved and replayed without the model;
    ``warning`` is set when the answer parsed to zero events.
    """

    query: str
    result: TimelineResult
    raw: str
    warning: str | None = None


def _get_llm_client(api_config: ApiConfig, timeout_seconds: float = 60.0) -> ChatClient:
    """Return the LLM client for a resolved configuration.

    Split into a helper so tests can monkeypatch this function and inject
    a fake client.
    """
    return LLMClient.from_config(api_config, timeout_seconds=timeout_seconds)


def outcome_from_raw(query: str, raw: str) -> TimelineOutcome:
    """Parse ``raw`` and attach the empty-result warning when needed."""
    result = parse_timeline_text(raw)
    warning = None
    if result.is_empty:
        warning = EMPTY_RESULT_WARNING
        logger.warning("Empty timeline for query %r (%d chars of response)", query, len(raw))
    return TimelineOutcome(query=query, result=result, raw=raw, warning=warning)


def run_timeline(
    query: str,
    api_config: ApiConfig,
    *,
    date_filter: DateFilterConfig | None = None,
    today: date | None = None,
    client: ChatClient | None = None,
    timeout_seconds: float = 60.0,
) -> TimelineOutcome:
    """Generate and parse a timeline for ``query``.

    Parameters
    ----------
    query:
        The topic typed by the user.
    api_config:
        Resolved endpoint/model/key; ignored when ``client`` is given.
    date_filter:
        Selected range; only affects the hint appended to the query here.
        Client-side filtering happens later in :mod:`oneline.core.filtering`.
    today:
        Reference day for relative ranges (defaults to ``date.today()``).
    client:
        Optional pre-built client (tests, sessions reusing a client).

    Raises
    ------
    ValueError
        If ``query`` is blank.
    TransportError
        If the chat endpoint call fails.
    """
    topic = query.strip()
    if not topic:
        raise ValueError("Query must not be empty")

    chat = client or _get_llm_client(api_config, timeout_seconds)
    messages = build_timeline_messages(topic, date_filter, today)

    raw = chat.generate(messages, temperature=DEFAULT_TEMPERATURE)
    outcome = outcome_from_raw(topic, raw)
    logger.info("Timeline for %r: %d event(s)", topic, len(outcome.result.events))
    return outcome


__all__ = [
    "EMPTY_RESULT_WARNING",
    "ChatClient",
    "TimelineOutcome",
    "outcome_from_raw",
    "run_timeline",
]
