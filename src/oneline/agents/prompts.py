"""Prompt texts and chat-message builders.

The timeline prompt is the *producer* side of the textual contract read by
:mod:`oneline.agents.timeline_parser`: the section markers, the ``--事件N--``
markers and the five field labels must stay exactly as written here. The
detail prompt feeds :mod:`oneline.agents.detail_parser`.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date

from oneline.core.contracts.filters import DateFilterConfig
from oneline.core.contracts.timeline import TimelineEvent
from oneline.core.dates import format_date
from oneline.core.filtering import resolve_bounds

TIMELINE_SYSTEM_PROMPT = """你是一个专业的历史事件分析助手。我需要你将热点事件以时间轴的方式呈现。
请按照以下格式返回数据（使用文本分段格式，不要使用JSON）：

===总结===
对整个事件的简短总结

===事件列表===

--事件1--
日期：事件发生日期，格式为YYYY-MM-DD，如果只知道月份则为YYYY-MM，如果只知道年份则为YYYY
标题：事件标题
描述：事件详细描述
相关人物：人物1(角色1,#颜色代码1);人物2(角色2,#颜色代码2)
来源：事件信息来源，如新闻媒体、官方公告、研究报告等

--事件2--
日期：...
标题：...
描述：...
相关人物：...
来源：...

... 更多事件 ...

请确保：
1. 按时间先后顺序组织事件（从最早到最近）
2. 为每个相关人物分配不同的颜色代码，让用户能够轻松识别不同人物的动向
3. 同一立场的人物使用相似的颜色
4. 尽可能客观描述各方观点和行为
5. 为每个事件标注可能的信息来源
6. 严格按照上述格式返回，不要添加其他格式
"""

DETAIL_SYSTEM_PROMPT = """你是一个专业的历史事件分析助手，专长于提供详细的事件分析和背景信息。
请按照以下格式回答用户询问的特定事件：

===背景===
事件的背景和前因

===详细内容===
事件的主要内容，按时间顺序或重要性组织

===参与方===
事件的主要参与者、相关人物及其立场和作用

===影响===
事件的短期和长期影响

===相关事实===
与事件相关的重要事实或数据

请注意：
1. 使用清晰的段落结构，避免过长的段落
2. 保持客观中立的叙述，多角度展示事件
3. 支持使用Markdown语法增强可读性：
   - **粗体** 用于强调重要内容
   - *斜体* 用于引用或细微强调
   - 使用换行符增加可读性
4. 回答应全面但精炼，突出重点，避免冗余
"""

#: Section titles the detail prompt asks for, in display order.
DETAIL_SECTIONS: tuple[str, ...] = ("背景", "详细内容", "参与方", "影响", "相关事实")


def date_range_hint(config: DateFilterConfig | None, today: date | None = None) -> str:
    """Return the narrative hint appended to the user query, or ``""``.

    Relative options search from the start bound up to today. A custom range
    only produces a hint when both ends are set.
    """
    if config is None or config.option == "all":
        return ""

    ref = today or date.today()
    if config.option == "custom":
        if not (config.start_date and config.end_date):
            return ""
        start, end = config.start_date, config.end_date
    else:
        start, _ = resolve_bounds(config, ref)
        end = ref

    return f"，请主要搜索 {format_date(start)} 至 {format_date(end)} 这段时间的内容"


def build_timeline_messages(
    query: str,
    date_filter: DateFilterConfig | None = None,
    today: date | None = None,
) -> list[Mapping[str, str]]:
    """Build the system/user messages for a timeline request."""
    user_content = f"请为以下事件创建时间轴：{query.strip()}{date_range_hint(date_filter, today)}"
    return [
        {"role": "system", "content": TIMELINE_SYSTEM_PROMPT},
        {"role": "user", "content": user_content},
    ]


def build_detail_query(event: TimelineEvent, query: str) -> str:
    """Return the per-event question placed inside the detail request."""
    return (
        f"事件：{event.title}（{event.date}）\n\n"
        "请提供该事件的详细分析，包括事件背景、主要过程、关键人物、影响与意义。"
        f"请尽可能提供多方观点，并分析该事件在{query.strip()}整体发展中的位置与作用。"
    )


def build_detail_messages(event: TimelineEvent, query: str) -> list[Mapping[str, str]]:
    """Build the system/user messages for an event-detail request."""
    user_content = f"请详细分析以下事件的背景、过程、影响及各方观点：{build_detail_query(event, query)}"
    return [
        {"role": "system", "content": DETAIL_SYSTEM_PROMPT},
        {"role": "user", "content": user_content},
    ]


__all__ = [
    "DETAIL_SECTIONS",
    "DETAIL_SYSTEM_PROMPT",
    "TIMELINE_SYSTEM_PROMPT",
    "build_detail_messages",
    "build_detail_query",
    "build_timeline_messages",
    "date_range_hint",
]
