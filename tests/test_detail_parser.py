from __future__ import annotations

from oneline.agents.detail_parser import parse_event_detail, split_sections

ANSWER = """===背景===
2019年以来，双方关系持续紧张。

===详细内容===
- 第一阶段
- 第二阶段

===影响===
**深远**。
"""


def test_sections_are_split_in_order() -> None:
    sections = split_sections(ANSWER)
    assert [s.title for s in sections] == ["背景", "详细内容", "影响"]
    assert sections[1].content == "- 第一阶段\n- 第二阶段"
    assert sections[2].content == "**深远**。"


def test_preamble_becomes_untitled_section() -> None:
    sections = split_sections("以下是分析：\n=== 背景 ===\n内容")
    assert sections[0].title == ""
    assert sections[0].content == "以下是分析："
    assert sections[1].title == "背景"


def test_answer_without_headers_is_one_section() -> None:
    sections = split_sections("只是一段话。")
    assert len(sections) == 1
    assert sections[0].title == ""
    assert sections[0].content == "只是一段话。"


def test_empty_answer_has_no_sections() -> None:
    assert split_sections("") == []
    assert split_sections(None) == []


def test_parse_event_detail_keeps_id_and_raw() -> None:
    detail = parse_event_detail("event-3", ANSWER)
    assert detail.event_id == "event-3"
    assert detail.raw == ANSWER
    assert detail.kind == "event_detail.v1"
    section = detail.section("影响")
    assert section is not None
    assert section.content == "**深远**。"
    assert detail.section("不存在") is None
