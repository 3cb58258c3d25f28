"""Server-sent event stream carrying one session's MCP traffic.

Incoming messages (HTTP POST) are pushed into ``read_stream``; the MCP
server writes replies to ``write_stream``, which ``events()`` renders as
``message`` events. The first event is ``endpoint``, telling the client
where to post.
"""
from __future__ import annotations

import logging
from typing import AsyncIterator, Awaitable, Callable, Optional

import anyio
from mcp import types
from mcp.shared.message import SessionMessage
from sse_starlette.sse import ServerSentEvent
from starlette.responses import StreamingResponse
from starlette.types import Receive, Scope, Send

from llming_widgets.errors import StreamClosedError

logger = logging.getLogger(__name__)


def format_sse_event(event: str, data: str) -> str:
    """Render one SSE frame. Only CR, LF and CRLF split ``data`` into lines."""
    return ServerSentEvent(data, event=event, sep="\n").encode().decode("utf-8")


KEEPALIVE_FRAME = ServerSentEvent(comment="keepalive", sep="\n").encode().decode("utf-8")


class SessionStream:
    """Memory-stream plumbing between the HTTP endpoints and an MCP server."""

    def __init__(self, session_id: str, endpoint: str, keepalive_interval: Optional[float] = None):
        self.session_id = session_id
        self.endpoint = endpoint
        self.keepalive_interval = keepalive_interval
        self._incoming_writer, self.read_stream = anyio.create_memory_object_stream(0)
        self.write_stream, self._outgoing_reader = anyio.create_memory_object_stream(0)

    async def send(self, message: types.JSONRPCMessage) -> None:
        """Forward a client message to the MCP server."""
        try:
            await self._incoming_writer.send(SessionMessage(message))
        except (anyio.ClosedResourceError, anyio.BrokenResourceError) as e:
            raise StreamClosedError(self.session_id) from e

    async def _next_outgoing(self) -> Optional[SessionMessage]:
        """Wait for the next reply. Returns None on keepalive timeout."""
        if self.keepalive_interval:
            with anyio.move_on_after(self.keepalive_interval):
                return await self._outgoing_reader.receive()
            return None
        return await self._outgoing_reader.receive()

    async def events(self) -> AsyncIterator[str]:
        """Yield the SSE frames for this session until the stream closes."""
        yield format_sse_event("endpoint", self.endpoint)
        while True:
            try:
                session_message = await self._next_outgoing()
            except (anyio.EndOfStream, anyio.ClosedResourceError):
                return
            if session_message is None:
                yield KEEPALIVE_FRAME
                continue
            payload = session_message.message.model_dump_json(by_alias=True, exclude_none=True)
            yield format_sse_event("message", payload)

    async def aclose(self) -> None:
        # Send ends first so pending receivers wake with EndOfStream
        await self._incoming_writer.aclose()
        await self.write_stream.aclose()
        await self.read_stream.aclose()
        await self._outgoing_reader.aclose()


class SessionEventStreamResponse(StreamingResponse):
    """Streaming SSE response that runs ``on_close`` once the connection ends.

    ``on_close`` runs shielded from cancellation, so teardown completes even
    when the client disconnect cancels the response.
    """

    def __init__(self, content: AsyncIterator[str], on_close: Callable[[], Awaitable[object]], headers=None):
        super().__init__(content, media_type="text/event-stream", headers=headers)
        self._on_close = on_close

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            with anyio.CancelScope(shield=True):
                await self._on_close()
