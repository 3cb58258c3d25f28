"""Session-addressed relay between SSE streams and per-session MCP handlers.

StreamRelay owns the life cycle of every session:

1. ``open_session()`` builds a handler, registers the session and starts
   its protocol loop (OPENING → OPEN)
2. ``post_message()`` routes an addressed message to the session's handler;
   replies travel back over the session's event stream
3. ``close_session()`` tears a session down exactly once (→ CLOSED),
   whichever of client disconnect, handler exit or shutdown comes first
"""
import asyncio
import logging
from typing import Optional, Set
from uuid import uuid4

from mcp import types
from pydantic import ValidationError

from llming_widgets.errors import (
    InvalidMessageError,
    MissingSessionIdError,
    StreamClosedError,
    UnknownSessionError,
)
from llming_widgets.session import SessionHandlerFactory
from .session_table import RelaySession, StreamSessionTable
from .sse_stream import SessionStream

logger = logging.getLogger(__name__)


class StreamRelay:
    """Creates, addresses and tears down relay sessions."""

    def __init__(
        self,
        factory: SessionHandlerFactory,
        table: Optional[StreamSessionTable] = None,
        *,
        message_path: str = "/mcp/messages",
        keepalive_interval: Optional[float] = None,
    ):
        self.factory = factory
        self.table = table if table is not None else StreamSessionTable()
        self.message_path = message_path
        self.keepalive_interval = keepalive_interval
        self._teardown_tasks: Set[asyncio.Task] = set()

    def endpoint_for(self, session_id: str) -> str:
        return f"{self.message_path}?sessionId={session_id}"

    async def open_session(self) -> RelaySession:
        """Create a session for a newly opened stream.

        Raises:
            Exception: Whatever building or starting the handler raised. A
                session that was already registered is torn down first.
        """
        session_id = str(uuid4())
        handler = self.factory.create()
        stream = SessionStream(
            session_id,
            self.endpoint_for(session_id),
            keepalive_interval=self.keepalive_interval,
        )
        session = RelaySession(session_id=session_id, handler=handler, stream=stream)
        self.table.put(session_id, session)
        try:
            task = session.start()
        except Exception:
            await self.close_session(session, reason="start failed")
            raise
        task.add_done_callback(lambda t: self._on_handler_exit(session, t))
        logger.info(f"[RELAY] Opened session {session_id} (active sessions: {self.table.active_count})")
        return session

    def _on_handler_exit(self, session: RelaySession, task: asyncio.Task) -> None:
        if not task.cancelled() and task.exception() is not None:
            logger.error(
                f"[RELAY] Handler of session {session.session_id} failed: "
                f"{type(task.exception()).__name__}: {task.exception()}"
            )
        if session.is_open:
            teardown = asyncio.ensure_future(self.close_session(session, reason="handler exited"))
            # The loop only holds tasks weakly
            self._teardown_tasks.add(teardown)
            teardown.add_done_callback(self._teardown_tasks.discard)

    async def post_message(self, session_id: Optional[str], body: bytes) -> None:
        """Route a posted JSON-RPC message to its session.

        Raises:
            MissingSessionIdError: If no session id was given
            UnknownSessionError: If the session does not exist or closed meanwhile
            InvalidMessageError: If the body is not a JSON-RPC message
        """
        if not session_id:
            raise MissingSessionIdError()
        session = self.table.get(session_id)
        if session is None:
            raise UnknownSessionError(session_id)
        try:
            message = types.JSONRPCMessage.model_validate_json(body)
        except ValidationError as e:
            logger.warning(f"[RELAY] Unparseable message for session {session_id}: {e}")
            raise InvalidMessageError(str(e)) from e
        try:
            await session.deliver(message)
        except StreamClosedError as e:
            raise UnknownSessionError(session_id) from e

    async def close_session(self, session: RelaySession, reason: str = "closed") -> bool:
        """Tear a session down. Only the first call has an effect.

        Returns:
            True if this call closed the session
        """
        if not session.begin_close():
            return False
        self.table.remove(session.session_id)
        try:
            await session.release()
        except Exception as e:
            logger.debug(f"[RELAY] Ignoring error while releasing {session.session_id}: {e}")
        logger.info(
            f"[RELAY] Closed session {session.session_id} after {session.age:.1f}s ({reason}, "
            f"active sessions: {self.table.active_count})"
        )
        return True

    async def close_all(self) -> int:
        """Close every open session. Returns the number closed."""
        closed = 0
        for session in self.table.pop_all():
            if await self.close_session(session, reason="shutdown"):
                closed += 1
        return closed
