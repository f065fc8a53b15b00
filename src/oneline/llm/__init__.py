from __future__ import annotations

from .client import DEFAULT_TEMPERATURE, LLMClient, TransportError

__all__ = [
    "DEFAULT_TEMPERATURE",
    "LLMClient",
    "TransportError",
]
