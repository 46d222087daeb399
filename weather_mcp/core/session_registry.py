import logging
from typing import Dict, Iterator, Optional, Protocol

from starlette.requests import Request
from starlette.responses import Response

from weather_mcp.core.errors import DuplicateSessionError

logger = logging.getLogger(__name__)


class SessionHandle(Protocol):
    session_id: str

    async def handle_post_message(self, request: Request) -> Response:
        ...


class SessionRegistry:
    """Routing table from session id to the transport serving that session.

    Entries are added when an event stream opens and removed when it closes.
    """

    def __init__(self):
        self._sessions: Dict[str, SessionHandle] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._sessions))

    def add(self, transport: SessionHandle) -> None:
        session_id = transport.session_id
        if session_id in self._sessions:
            raise DuplicateSessionError(session_id)
        self._sessions[session_id] = transport
        logger.info("Session %s opened (%d open)", session_id, len(self._sessions))

    def get(self, session_id: str) -> Optional[SessionHandle]:
        return self._sessions.get(session_id)

    def remove(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is not None:
            logger.info("Session %s closed (%d open)", session_id, len(self._sessions))
