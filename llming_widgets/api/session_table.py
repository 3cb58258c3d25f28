"""Live relay sessions and the table that addresses them by id."""
import asyncio
import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from mcp import types

from llming_widgets.errors import StreamClosedError
from llming_widgets.session import SessionHandler
from .sse_stream import SessionStream

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    OPENING = "opening"
    OPEN = "open"
    CLOSED = "closed"


@dataclass
class RelaySession:
    """One long-lived client stream plus its private handler."""
    session_id: str
    handler: SessionHandler
    stream: SessionStream
    state: SessionState = SessionState.OPENING
    created_at: float = field(default_factory=time.monotonic)
    _delivery_lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)
    _server_task: Optional[asyncio.Task] = field(default=None, repr=False)

    def start(self) -> asyncio.Task:
        """Start the handler's protocol loop on this session's stream."""
        self._server_task = asyncio.create_task(
            self.handler.run(self.stream.read_stream, self.stream.write_stream),
            name=f"mcp-session-{self.session_id}",
        )
        self.state = SessionState.OPEN
        return self._server_task

    @property
    def age(self) -> float:
        """Seconds since the session was created."""
        return time.monotonic() - self.created_at

    @property
    def is_open(self) -> bool:
        return self.state is SessionState.OPEN

    async def deliver(self, message: types.JSONRPCMessage) -> None:
        """Hand an addressed message to the handler, in arrival order."""
        async with self._delivery_lock:
            if not self.is_open:
                raise StreamClosedError(self.session_id)
            await self.stream.send(message)

    def begin_close(self) -> bool:
        """Move to CLOSED. Returns False if the session was already closed."""
        if self.state is SessionState.CLOSED:
            return False
        self.state = SessionState.CLOSED
        return True

    async def release(self) -> None:
        """Close the stream and stop the protocol loop."""
        await self.stream.aclose()
        task = self._server_task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()


class StreamSessionTable:
    """Maps session_id → RelaySession. Thread-safe via a lock."""

    def __init__(self):
        self._lock = threading.Lock()
        self._sessions: Dict[str, RelaySession] = {}

    def put(self, session_id: str, session: RelaySession) -> None:
        """Insert a session, replacing any entry with the same id."""
        with self._lock:
            self._sessions[session_id] = session
        logger.debug(f"[SESSIONS] Registered session {session_id}")

    def get(self, session_id: str) -> Optional[RelaySession]:
        with self._lock:
            return self._sessions.get(session_id)

    def remove(self, session_id: str) -> Optional[RelaySession]:
        """Remove a session. Removing an unknown id is a no-op."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session:
            logger.debug(f"[SESSIONS] Removed session {session_id}")
        return session

    def pop_all(self) -> List[RelaySession]:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        return sessions

    def session_ids(self) -> List[str]:
        with self._lock:
            return list(self._sessions.keys())

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    @property
    def active_count(self) -> int:
        with self._lock:
            return len(self._sessions)
