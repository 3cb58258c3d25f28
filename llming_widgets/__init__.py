"""llming-widgets — UI widgets served as MCP tools over a session-addressed SSE relay."""

from llming_widgets.config import RelayConfig
from llming_widgets.errors import (
    RelayError,
    DuplicateNameError,
    DuplicateUriError,
    UnknownOperationError,
    UnknownResourceError,
    UnknownSessionError,
    MissingSessionIdError,
    InvalidInputError,
    InvalidMessageError,
    AssetNotFoundError,
)
from llming_widgets.tools import OperationDefinition, OperationRegistry, OperationResult
from llming_widgets.resources import ResourceDefinition, ResourcePayload, ResourceRegistry
from llming_widgets.session import SessionHandler, SessionHandlerFactory
from llming_widgets.api import StreamRelay, StreamSessionTable, RelaySession

__all__ = [
    "RelayConfig",
    "RelayError",
    "DuplicateNameError",
    "DuplicateUriError",
    "UnknownOperationError",
    "UnknownResourceError",
    "UnknownSessionError",
    "MissingSessionIdError",
    "InvalidInputError",
    "InvalidMessageError",
    "AssetNotFoundError",
    "OperationDefinition",
    "OperationRegistry",
    "OperationResult",
    "ResourceDefinition",
    "ResourcePayload",
    "ResourceRegistry",
    "SessionHandler",
    "SessionHandlerFactory",
    "StreamRelay",
    "StreamSessionTable",
    "RelaySession",
    "create_app",
]


def __getattr__(name: str):
    if name == "create_app":
        from llming_widgets.standalone import create_app
        return create_app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
