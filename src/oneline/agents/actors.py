"""Person annotation extractor.

The model lists the people involved in an event on one line::

    相关人物：张三(发言人,#1f77b4);李四(反对派,#d62728);王五

Each ``;``-separated entry is expected as ``name(role,color)``. Entries that
do not follow the pattern still yield an :class:`Actor` as long as a name can
be recovered: the text before the first parenthesis becomes the name, the
role falls back to :data:`FALLBACK_ROLE` and a random color is assigned.

Full-width punctuation (``；``, ``（``, ``）``, ``，``) is accepted as well,
since Chinese answers mix both forms freely.
"""

from __future__ import annotations

import random
import re

from oneline.core.contracts.timeline import Actor

#: Role assigned when an entry carries no parseable ``(role,color)`` part.
FALLBACK_ROLE = "相关人物"

_ENTRY_SEP = re.compile(r"[;；]")
_ANNOTATED = re.compile(r"(.*?)[(（](.*?)[,，](.*?)[)）]")
_OPEN_PAREN = re.compile(r"[(（]")
_QUOTES = "\"'“”‘’「」『』"


def random_color() -> str:
    """Return a random ``#rrggbb`` color string (lower-case hex)."""
    return f"#{random.randint(0, 0xFFFFFF):06x}"


def _clean(value: str) -> str:
    return value.strip().strip(_QUOTES).strip()


def parse_actor(entry: str) -> Actor | None:
    """Parse one ``name(role,color)`` entry; return ``None`` if no name survives."""
    match = _ANNOTATED.search(entry)
    if match:
        name = _clean(match.group(1))
        if not name:
            return None
        role = _clean(match.group(2)) or None
        color = _clean(match.group(3)) or random_color()
        return Actor(name=name, role=role, color=color)

    name = _clean(_OPEN_PAREN.split(entry, maxsplit=1)[0])
    if not name:
        return None
    return Actor(name=name, role=FALLBACK_ROLE, color=random_color())


def extract_actors(text: str | None) -> list[Actor]:
    """Split a ``;``-separated people line into ordered :class:`Actor` records.

    Examples
    --------
    >>> [a.name for a in extract_actors("甲(角色,#111111); ;乙")]
    ['甲', '乙']
    """
    actors: list[Actor] = []
    for raw in _ENTRY_SEP.split(text or ""):
        entry = raw.strip()
        if not entry:
            continue
        actor = parse_actor(entry)
        if actor is not None:
            actors.append(actor)
    return actors


__all__ = ["FALLBACK_ROLE", "extract_actors", "parse_actor", "random_color"]
