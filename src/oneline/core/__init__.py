"""Core package initializer for OneLine.

The core holds everything that does not talk to the network:
    from oneline.core.settings import settings, load_settings, Settings, get_logger
    from oneline.core.filtering import apply_view
"""

from __future__ import annotations

__all__ = ["__doc__"]
