"""Session-addressed streaming relay.

Provides StreamRelay, the session table and the SSE stream plumbing.
The HTTP endpoints themselves live in llming_widgets.server.build_relay_router().
"""

from .session_table import RelaySession, SessionState, StreamSessionTable
from .sse_stream import SessionEventStreamResponse, SessionStream, format_sse_event
from .stream_relay import StreamRelay

__all__ = [
    "RelaySession",
    "SessionState",
    "StreamSessionTable",
    "SessionEventStreamResponse",
    "SessionStream",
    "StreamRelay",
    "format_sse_event",
]
