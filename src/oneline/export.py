"""Markdown export of the currently displayed timeline.

Files are named ``一线-<query>-<YYYY-MM-DD>.md``: whitespace runs in the query
become ``-`` and path separators are replaced so the name stays a single
path component.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import date
from pathlib import Path

from oneline.core.contracts.timeline import TimelineEvent

EXPORT_PREFIX = "一线"

_WHITESPACE = re.compile(r"\s+")
_PATH_SEPARATORS = re.compile(r"[\\/]")


def export_filename(query: str, today: date | None = None, suffix: str = ".md") -> str:
    """Return the export file name for ``query`` on ``today``.

    Examples
    --------
    >>> export_filename("中美 贸易战", date(2025, 3, 1))
    '一线-中美-贸易战-2025-03-01.md'
    """
    slug = _PATH_SEPARATORS.sub("-", _WHITESPACE.sub("-", query.strip()))
    stamp = (today or date.today()).isoformat()
    return f"{EXPORT_PREFIX}-{slug}-{stamp}{suffix}"


def _render_people(event: TimelineEvent) -> str:
    parts = []
    for actor in event.people:
        parts.append(f"{actor.name}（{actor.role}）" if actor.role else actor.name)
    return "、".join(parts)


def render_markdown(query: str, summary: str, events: Sequence[TimelineEvent]) -> str:
    """Render the summary and ``events`` (in the given order) as Markdown."""
    lines = [f"# {EXPORT_PREFIX}：{query.strip()}", ""]
    if summary.strip():
        lines.extend([f"> {line}" if line else ">" for line in summary.strip().splitlines()])
        lines.append("")

    for event in events:
        heading = " · ".join(part for part in (event.date, event.title) if part) or event.id
        lines.extend([f"## {heading}", ""])
        if event.description:
            lines.extend([event.description, ""])
        if event.people:
            lines.append(f"- **相关人物**：{_render_people(event)}")
        if event.source:
            lines.append(f"- **来源**：{event.source}")
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def write_export(
    target: Path,
    query: str,
    summary: str,
    events: Sequence[TimelineEvent],
    today: date | None = None,
) -> Path:
    """Write the Markdown export and return the file path.

    ``target`` may be a directory, in which case :func:`export_filename`
    provides the file name.
    """
    path = target / export_filename(query, today) if target.is_dir() else target
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_markdown(query, summary, events), encoding="utf-8")
    return path


__all__ = ["EXPORT_PREFIX", "export_filename", "render_markdown", "write_export"]
