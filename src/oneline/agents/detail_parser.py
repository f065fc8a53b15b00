"""Split an event-detail answer into its ``===标题===`` sections.

The detail prompt asks for 背景 / 详细内容 / 参与方 / 影响 / 相关事实 blocks. The
splitter does not insist on those names: any ``===...===`` line starts a new
section, text before the first header becomes an untitled section, and an
answer with no headers at all is kept as a single untitled section. Inline
markdown is left untouched for the renderer.
"""

from __future__ import annotations

import re

from oneline.core.contracts.detail import DetailSection, EventDetail

_HEADER_RE = re.compile(r"^[ \t]*===\s*(.*?)\s*===[ \t]*$", re.MULTILINE)


def split_sections(text: str | None) -> list[DetailSection]:
    """Return the sections of ``text`` in order; empty input gives ``[]``."""
    raw = (text or "").replace("\r\n", "\n").strip()
    if not raw:
        return []

    sections: list[DetailSection] = []
    headers = list(_HEADER_RE.finditer(raw))

    preamble = raw[: headers[0].start()].strip() if headers else raw
    if preamble:
        sections.append(DetailSection(title="", content=preamble))

    for idx, header in enumerate(headers):
        end = headers[idx + 1].start() if idx + 1 < len(headers) else len(raw)
        content = raw[header.end() : end].strip()
        sections.append(DetailSection(title=header.group(1), content=content))

    return sections


def parse_event_detail(event_id: str, text: str | None) -> EventDetail:
    """Wrap :func:`split_sections` into an :class:`EventDetail` for ``event_id``."""
    return EventDetail(event_id=event_id, sections=split_sections(text), raw=text or "")


__all__ = ["parse_event_detail", "split_sections"]
