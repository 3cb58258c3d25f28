from .relay_config import (
    RelayConfig,
    BUILD_COMMAND,
    DEFAULT_PORT,
    DEFAULT_STREAM_PATH,
    DEFAULT_MESSAGE_PATH,
)

__all__ = [
    "RelayConfig",
    "BUILD_COMMAND",
    "DEFAULT_PORT",
    "DEFAULT_STREAM_PATH",
    "DEFAULT_MESSAGE_PATH",
]
