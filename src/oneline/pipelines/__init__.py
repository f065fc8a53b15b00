"""Pipeline entry points for OneLine.

Currently exposed:

- :class:`TimelineSession`: stateful query session (timeline, view, detail).
"""

from __future__ import annotations

from .timeline_session import TimelineSession

__all__ = ["TimelineSession"]
