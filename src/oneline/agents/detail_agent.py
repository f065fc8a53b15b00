"""Detail agent: AI-generated analysis of a single timeline event."""

from __future__ import annotations

from oneline.agents.detail_parser import parse_event_detail
from oneline.agents.prompts import build_detail_messages
from oneline.agents.timeline_agent import ChatClient
from oneline.core.config import ApiConfig
from oneline.core.contracts.detail import EventDetail
from oneline.core.contracts.timeline import TimelineEvent
from oneline.core.settings import get_logger
from oneline.llm.client import DEFAULT_TEMPERATURE, LLMClient

logger = get_logger(__name__)


def _get_llm_client(api_config: ApiConfig, timeout_seconds: float = 60.0) -> ChatClient:
    """Return the LLM client for a resolved configuration (monkeypatched in tests)."""
    return LLMClient.from_config(api_config, timeout_seconds=timeout_seconds)


def run_event_detail(
    event: TimelineEvent,
    query: str,
    api_config: ApiConfig,
    *,
    client: ChatClient | None = None,
    timeout_seconds: float = 60.0,
) -> EventDetail:
    """Ask the model to analyse ``event`` in the context of the topic ``query``.

    The returned :class:`EventDetail` is keyed by ``event.id`` so callers can
    drop it if the selection changed while the request was in flight.

    Raises
    ------
    TransportError
        If the chat endpoint call fails.
    """
    chat = client or _get_llm_client(api_config, timeout_seconds)
    raw = chat.generate(build_detail_messages(event, query), temperature=DEFAULT_TEMPERATURE)
    detail = parse_event_detail(event.id, raw)
    logger.info("Detail for %s (%r): %d section(s)", event.id, event.title, len(detail.sections))
    return detail


__all__ = ["run_event_detail"]
