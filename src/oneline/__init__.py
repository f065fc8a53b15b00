"""OneLine: turn a topic into an LLM-generated, filterable event timeline."""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.3.0"
