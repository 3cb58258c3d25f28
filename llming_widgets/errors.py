"""Error types raised by the widget relay.

Every error carries the HTTP status the router answers with, so request
handlers can convert them without a lookup table.
"""
from typing import Any, Dict, List, Optional


class RelayError(Exception):
    """Base class for all relay errors."""
    status_code: int = 500


# ── Startup / registration ───────────────────────────────────────

class DuplicateNameError(RelayError):
    """Raised when an operation name is registered twice."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Operation '{name}' is already registered")


class DuplicateUriError(RelayError):
    """Raised when a resource uri is registered twice."""
    def __init__(self, uri: str):
        self.uri = uri
        super().__init__(f"Resource '{uri}' is already registered")


# ── Client input ─────────────────────────────────────────────────

class UnknownOperationError(RelayError):
    status_code = 404

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown operation: {name}")


class UnknownResourceError(RelayError):
    status_code = 404

    def __init__(self, uri: str):
        self.uri = uri
        super().__init__(f"Unknown resource: {uri}")


class UnknownSessionError(RelayError):
    status_code = 404

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__("Unknown session")


class MissingSessionIdError(RelayError):
    status_code = 400

    def __init__(self):
        super().__init__("Missing sessionId query parameter")


class InvalidMessageError(RelayError):
    """Raised when a posted body is not a JSON-RPC message."""
    status_code = 400

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__("Could not parse message")


class InvalidInputError(RelayError):
    """Raised when operation input does not match its input shape.

    ``violations`` holds one entry per offending field with the keys
    ``field``, ``message`` and ``type``.
    """
    status_code = 400

    def __init__(self, name: str, violations: List[Dict[str, Any]]):
        self.name = name
        self.violations = violations
        details = "; ".join(
            f"{v['field'] or '<input>'}: {v['message']}" for v in violations
        )
        super().__init__(f"Invalid input for operation '{name}': {details}")

    @property
    def fields(self) -> List[str]:
        return [v["field"] for v in self.violations]


# ── Build artifacts ──────────────────────────────────────────────

class AssetNotFoundError(RelayError):
    """Raised when a widget bundle is missing from the build output."""
    def __init__(self, message: str, path: str, remediation: Optional[str] = None):
        self.path = path
        self.remediation = remediation
        super().__init__(message)


# ── Transport ────────────────────────────────────────────────────

class StreamClosedError(RelayError):
    """Raised when delivering to a stream that has already been closed."""
    status_code = 404

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Stream for session {session_id} is closed")
