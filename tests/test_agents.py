"""Tests for the timeline and detail agents.

The network is never touched: a `FakeLLMClient` records the messages it
receives, and the `_get_llm_client` seam of each agent module is
monkeypatched to return it.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any

import pytest

from oneline.agents import detail_agent, timeline_agent
from oneline.agents.detail_agent import run_event_detail
from oneline.agents.timeline_agent import EMPTY_RESULT_WARNING, outcome_from_raw, run_timeline
from oneline.core.config import ApiConfig
from oneline.core.contracts.filters import DateFilterConfig
from oneline.core.contracts.timeline import TimelineEvent
from oneline.llm.client import TransportError

API = ApiConfig(endpoint="https://example.com/chat", model="m", api_key="k")

TIMELINE_ANSWER = (
    "===总结===\n一场风波\n===事件列表===\n"
    "--事件1--\n日期：2023-11-17\n标题：解雇\n描述：董事会宣布\n相关人物：甲(董事,#111111)\n来源：公告\n"
    "--事件2--\n日期：2023-11-22\n标题：回归\n描述：达成协议\n相关人物：乙\n来源：新闻\n"
)


class FakeLLMClient:
    """Return a canned answer and remember every call."""

    def __init__(self, answer: str = "", error: Exception | None = None) -> None:
        self.answer = answer
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def generate(
        self,
        messages: Sequence[Mapping[str, str]],
        *,
        temperature: float | None = None,
    ) -> str:
        self.calls.append({"messages": list(messages), "temperature": temperature})
        if self.error is not None:
            raise self.error
        return self.answer


def test_run_timeline_parses_answer(monkeypatch: Any) -> None:
    fake = FakeLLMClient(TIMELINE_ANSWER)
    monkeypatch.setattr(timeline_agent, "_get_llm_client", lambda config, timeout=60.0: fake)

    outcome = run_timeline(
        " OpenAI 董事会风波 ",
        API,
        date_filter=DateFilterConfig(option="year"),
        today=date(2024, 1, 1),
    )

    assert outcome.query == "OpenAI 董事会风波"
    assert outcome.warning is None
    assert outcome.raw == TIMELINE_ANSWER
    assert outcome.result.summary == "一场风波"
    assert [e.title for e in outcome.result.events] == ["解雇", "回归"]

    (call,) = fake.calls
    assert call["temperature"] == 0.7
    user = call["messages"][1]["content"]
    assert user == (
        "请为以下事件创建时间轴：OpenAI 董事会风波，请主要搜索 2023-01-01 至 2024-01-01 这段时间的内容"
    )


def test_run_timeline_rejects_blank_query() -> None:
    with pytest.raises(ValueError):
        run_timeline("   ", API, client=FakeLLMClient())


def test_empty_parse_sets_warning() -> None:
    outcome = run_timeline("话题", API, client=FakeLLMClient("我不知道。"))
    assert outcome.result.is_empty
    assert outcome.warning == EMPTY_RESULT_WARNING


def test_transport_errors_propagate() -> None:
    client = FakeLLMClient(error=TransportError("boom", status_code=500))
    with pytest.raises(TransportError):
        run_timeline("话题", API, client=client)


def test_outcome_from_raw_does_not_call_model() -> None:
    outcome = outcome_from_raw("q", TIMELINE_ANSWER)
    assert len(outcome.result.events) == 2
    assert outcome.warning is None


def test_default_client_is_built_from_config() -> None:
    client = timeline_agent._get_llm_client(API, 5.0)
    assert client.endpoint == API.endpoint  # type: ignore[attr-defined]
    assert client.timeout_seconds == 5.0  # type: ignore[attr-defined]


def test_run_event_detail_returns_sections_keyed_by_event(monkeypatch: Any) -> None:
    fake = FakeLLMClient("===背景===\n起因\n===影响===\n深远")
    monkeypatch.setattr(detail_agent, "_get_llm_client", lambda config, timeout=60.0: fake)
    event = TimelineEvent(id="event-1", date="2023-11-22", title="回归")

    detail = run_event_detail(event, "OpenAI 董事会风波", API)

    assert detail.event_id == "event-1"
    assert [s.title for s in detail.sections] == ["背景", "影响"]
    user = fake.calls[0]["messages"][1]["content"]
    assert "事件：回归（2023-11-22）" in user
    assert "OpenAI 董事会风波" in user
