"""
Elementary configuration: all environment variables in one place.

Read from environment at import time. Application start is the only place
these are meant to change; drivers receive them through RenderOptions.
"""

from __future__ import annotations

import os
from typing import Any

from elementary.kernel.types import RenderOptions


def _flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("1", "true", "yes", "on")


class Settings:
    """Kernel settings from environment variables."""

    # Logging
    DEBUG: bool = _flag("ELEMENTARY_DEBUG")
    TELEMETRY: bool = _flag("ELEMENTARY_TELEMETRY")

    # Map widget
    MAPBOX_ACCESS_TOKEN: str = os.environ.get("ELEMENTARY_MAPBOX_ACCESS_TOKEN", "")
    MAP_HEIGHT: str = os.environ.get("ELEMENTARY_MAP_HEIGHT", "300px")

    def render_options(self, ambient: dict[str, Any] | None = None) -> RenderOptions:
        """Build driver options from these settings plus an ambient mapping."""
        return RenderOptions(
            ambient=dict(ambient or {}),
            debug=self.DEBUG,
            telemetry=self.TELEMETRY,
            map_access_token=self.MAPBOX_ACCESS_TOKEN,
            map_height=self.MAP_HEIGHT,
        )


# Singleton instance
settings = Settings()
