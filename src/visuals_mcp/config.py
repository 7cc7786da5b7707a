"""Environment-driven server settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_UI_DIR = Path(__file__).parent / "ui"
DEFAULT_IMAGE_TIMEOUT = 30.0
DEFAULT_MAX_IMAGE_BYTES = 20 * 1024 * 1024

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


@dataclass
class ServerConfig:
    """Settings for the visuals MCP server.

    Attributes:
        ui_dir: Directory holding the built renderer HTML bundles.
        inline_remote_images: Fetch http(s) image sources and inline them as
            data URIs instead of passing the URL to the renderer.
        image_timeout: Timeout in seconds for remote image fetches.
        max_image_bytes: Largest image that will be inlined.
        log_level: Root logging level name.
    """

    ui_dir: Path = field(default_factory=lambda: DEFAULT_UI_DIR)
    inline_remote_images: bool = False
    image_timeout: float = DEFAULT_IMAGE_TIMEOUT
    max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> ServerConfig:
        """Read settings from ``VISUALS_MCP_*`` environment variables."""
        ui_dir = os.environ.get("VISUALS_MCP_UI_DIR")
        return cls(
            ui_dir=Path(ui_dir).expanduser() if ui_dir else DEFAULT_UI_DIR,
            inline_remote_images=_env_flag("VISUALS_MCP_INLINE_REMOTE_IMAGES"),
            image_timeout=float(
                os.environ.get("VISUALS_MCP_IMAGE_TIMEOUT", DEFAULT_IMAGE_TIMEOUT)
            ),
            max_image_bytes=int(
                os.environ.get("VISUALS_MCP_MAX_IMAGE_BYTES", DEFAULT_MAX_IMAGE_BYTES)
            ),
            log_level=os.environ.get("VISUALS_MCP_LOG_LEVEL", "INFO").upper(),
        )
