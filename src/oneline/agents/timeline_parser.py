"""
Response parser: turn the model's sectioned prose into a :class:`TimelineResult`.

Expected shape
--------------
The timeline system prompt (see :mod:`oneline.agents.prompts`) asks for::

    ===总结===
    One-paragraph overview

    ===事件列表===

    --事件1--
    日期：2020-05
    标题：...
    描述：...
    相关人物：甲(角色,#111111);乙(角色,#222222)
    来源：...

    --事件2--
    ...

Extraction rules
----------------
- The summary runs from ``===总结===`` to ``===事件列表===`` (or the end).
- The event list runs from ``===事件列表===`` to the end of the text and is
  split on the numbered ``--事件N--`` markers.
- Inside a chunk, each field is read from its label up to the first *later*
  label in the fixed order 日期 → 标题 → 描述 → 相关人物 → 来源, or to the end
  of the chunk. A field body that itself contains a later label gets cut
  short there; that loss is accepted rather than guessed around.
- Missing fields become ``""``; a missing source becomes :data:`FALLBACK_SOURCE`.
- Ids are positional (``event-0``, ``event-1``, ...) in extraction order, and
  the result is finally sorted ascending by comparable date key.

:func:`parse_timeline_text` never raises. Model output is untrusted free text
and callers always get a well-formed, possibly empty, result.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from oneline.agents.actors import extract_actors
from oneline.core.contracts.filters import SortDirection
from oneline.core.contracts.timeline import Actor, TimelineEvent, TimelineResult
from oneline.core.filtering import sort_events
from oneline.core.settings import get_logger

logger = get_logger(__name__)

SUMMARY_MARKER = "===总结==="
EVENTS_MARKER = "===事件列表==="
FALLBACK_SOURCE = "未指明来源"

#: Field name → label, in the priority order used for lookahead.
FIELD_LABELS: tuple[tuple[str, str], ...] = (
    ("date", "日期"),
    ("title", "标题"),
    ("description", "描述"),
    ("people", "相关人物"),
    ("source", "来源"),
)

_SUMMARY_RE = re.compile(r"===\s*总结\s*===\s*(.*?)(?=\s*===\s*事件列表\s*===|\Z)", re.DOTALL)
_EVENTS_RE = re.compile(r"===\s*事件列表\s*===\s*(.*)\Z", re.DOTALL)
_EVENT_MARKER_RE = re.compile(r"\s*--\s*事件\s*\d+\s*--\s*")
_TRAILING_NOISE = re.compile(r"^[\s\-*•#>]*$")


def _label_pattern(label: str) -> str:
    # Tolerates markdown emphasis ("**标题**：") and either colon width.
    return rf"\**{label}\**\s*[：:]"


def _build_field_patterns() -> dict[str, re.Pattern[str]]:
    patterns: dict[str, re.Pattern[str]] = {}
    for idx, (field, label) in enumerate(FIELD_LABELS):
        later = [_label_pattern(lbl) for _, lbl in FIELD_LABELS[idx + 1 :]]
        stop = rf"\s*(?:{'|'.join(later)})|\s*\Z" if later else r"\s*\Z"
        patterns[field] = re.compile(rf"{_label_pattern(label)}\s*(.*?)(?={stop})", re.DOTALL)
    return patterns


_FIELD_PATTERNS = _build_field_patterns()


def _tidy(value: str) -> str:
    """Trim whitespace and drop trailing lines that hold only list/markdown markers."""
    lines = value.strip().splitlines()
    while lines and _TRAILING_NOISE.match(lines[-1]):
        lines.pop()
    return "\n".join(lines).strip()


def extract_fields(chunk: str) -> dict[str, str]:
    """Return every labeled field of ``chunk``; missing fields map to ``""``."""
    fields: dict[str, str] = {}
    for field, pattern in _FIELD_PATTERNS.items():
        match = pattern.search(chunk)
        fields[field] = _tidy(match.group(1)) if match else ""
    return fields


def extract_summary(text: str) -> str:
    """Return the text of the ``===总结===`` section, or ``""``."""
    match = _SUMMARY_RE.search(text)
    return match.group(1).strip() if match else ""


def split_event_chunks(text: str) -> list[str]:
    """Return the non-empty per-event chunks of the ``===事件列表===`` section."""
    match = _EVENTS_RE.search(text)
    if not match:
        return []
    block = match.group(1).strip()
    return [chunk for chunk in _EVENT_MARKER_RE.split(block) if chunk.strip()]


def _has_any_label(chunk: str) -> bool:
    return any(re.search(_label_pattern(label), chunk) for _, label in FIELD_LABELS)


def build_event(chunk: str, index: int) -> TimelineEvent:
    """Build the event at extraction position ``index`` from one chunk."""
    fields = extract_fields(chunk)
    return TimelineEvent(
        id=f"event-{index}",
        date=fields["date"],
        title=fields["title"],
        description=fields["description"],
        people=extract_actors(fields["people"]),
        source=fields["source"] or FALLBACK_SOURCE,
    )


def parse_timeline_text(text: str | None) -> TimelineResult:
    """Parse a raw model answer into a summary and canonically ordered events.

    Parameters
    ----------
    text:
        The ``choices[0].message.content`` string returned by the model.

    Returns
    -------
    TimelineResult
        Always a well-formed result. Text without the section markers yields
        ``TimelineResult(summary="", events=[])``.
    """
    raw = (text or "").replace("\r\n", "\n").replace("\r", "\n")
    try:
        summary = extract_summary(raw)
        chunks = [c for c in split_event_chunks(raw) if _has_any_label(c)]
        events = [build_event(chunk, idx) for idx, chunk in enumerate(chunks)]
    except Exception:  # pragma: no cover - parser contract is "never raise"
        logger.exception("Failed to parse timeline response; returning an empty result")
        return TimelineResult()

    logger.debug("Parsed %d event chunk(s), summary=%d chars", len(events), len(summary))
    return TimelineResult(events=sort_events(events, SortDirection.ASC), summary=summary)


def _render_actor(actor: Actor) -> str:
    return f"{actor.name}({actor.role or ''},{actor.color})"


def render_timeline_text(
    result: TimelineResult | None = None,
    *,
    events: Sequence[TimelineEvent] | None = None,
    summary: str | None = None,
) -> str:
    """Serialize events back into the marker format read by :func:`parse_timeline_text`.

    Either pass a whole ``result`` or explicit ``events``/``summary``.
    Re-parsing the output yields an equivalent event set.
    """
    items = list(events if events is not None else (result.events if result else []))
    text_summary = summary if summary is not None else (result.summary if result else "")

    parts = [SUMMARY_MARKER, text_summary.strip(), "", EVENTS_MARKER, ""]
    for number, event in enumerate(items, start=1):
        parts.extend(
            [
                f"--事件{number}--",
                f"日期：{event.date}",
                f"标题：{event.title}",
                f"描述：{event.description}",
                f"相关人物：{';'.join(_render_actor(a) for a in event.people)}",
                f"来源：{event.source or FALLBACK_SOURCE}",
                "",
            ]
        )
    return "\n".join(parts)


__all__ = [
    "EVENTS_MARKER",
    "FALLBACK_SOURCE",
    "FIELD_LABELS",
    "SUMMARY_MARKER",
    "build_event",
    "extract_fields",
    "extract_summary",
    "parse_timeline_text",
    "render_timeline_text",
    "split_event_chunks",
]
