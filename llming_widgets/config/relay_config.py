import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8000
DEFAULT_STREAM_PATH = "/mcp"
DEFAULT_MESSAGE_PATH = "/mcp/messages"
BUILD_COMMAND = "cd web && pnpm run build"


def default_assets_dir() -> Path:
    """Return the directory the web build writes widget bundles to."""
    return Path.cwd() / "web" / "dist"


def _parse_port(value: Optional[str]) -> int:
    if value is None or value == "":
        return DEFAULT_PORT
    try:
        port = int(value)
    except ValueError:
        logger.warning(f"[CONFIG] Ignoring non-numeric PORT={value!r}, using {DEFAULT_PORT}")
        return DEFAULT_PORT
    return port


def _parse_interval(value: Optional[str]) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        interval = float(value)
    except ValueError:
        logger.warning(f"[CONFIG] Ignoring non-numeric SSE_KEEPALIVE_SECONDS={value!r}, keepalive disabled")
        return None
    return interval if interval > 0 else None


def _parse_flag(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() not in ("0", "false", "no", "off")


@dataclass
class RelayConfig:
    """Runtime configuration of the widget relay server."""
    port: int = DEFAULT_PORT
    """Port the HTTP server listens on."""
    host: str = "0.0.0.0"
    """Interface the HTTP server binds to."""
    base_url: Optional[str] = None
    """Base URL for generated asset links. Defaults to ``http://localhost:<port>``."""
    assets_dir: Path = field(default_factory=default_assets_dir)
    """Directory holding the prebuilt ``<component>.js`` / ``<component>.css`` bundles."""
    inline_assets: bool = True
    """Inline bundles into the widget markup instead of linking them under ``base_url``."""
    stream_path: str = DEFAULT_STREAM_PATH
    message_path: str = DEFAULT_MESSAGE_PATH
    server_name: str = "mcp-app-server"
    server_version: str = "1.0.0"
    keepalive_interval: Optional[float] = None
    """Seconds between SSE keepalive comments. ``None`` disables them."""

    def __post_init__(self):
        self.assets_dir = Path(self.assets_dir)
        if not self.base_url:
            self.base_url = f"http://localhost:{self.port}"
        self.base_url = self.base_url.rstrip("/")

    @property
    def assets_url(self) -> str:
        """Public URL prefix the artifact directory is served under."""
        return f"{self.base_url}/assets"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RelayConfig":
        """Build a config from environment variables.

        :param environ: Mapping to read from, ``os.environ`` if omitted
        :return: The resulting configuration
        """
        env = os.environ if environ is None else environ
        assets_dir = env.get("WIDGET_ASSETS_DIR")
        return cls(
            port=_parse_port(env.get("PORT")),
            host=env.get("HOST") or "0.0.0.0",
            base_url=env.get("BASE_URL") or None,
            assets_dir=Path(assets_dir) if assets_dir else default_assets_dir(),
            inline_assets=_parse_flag(env.get("WIDGET_INLINE_ASSETS"), True),
            keepalive_interval=_parse_interval(env.get("SSE_KEEPALIVE_SECONDS")),
        )
