"""
HTTP + server-sent-events binding with per-session routing.

``GET /sse`` opens an event stream and allocates a session. The first event
on the stream (``endpoint``) tells the client where to POST its messages:
``/messages?sessionId=<id>``. Each POST is routed to the transport of the
matching open stream; protocol replies go back over that stream, never in
the POST response.
"""

import enum
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional, Protocol, Tuple
from urllib.parse import quote
from uuid import uuid4

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream
from mcp import types
from mcp.shared.message import ServerMessageMetadata, SessionMessage
from pydantic import ValidationError
from sse_starlette import EventSourceResponse
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route
from starlette.types import Receive, Scope, Send

from weather_mcp.core.session_registry import SessionRegistry

logger = logging.getLogger(__name__)

SESSION_ID_PARAM = "sessionId"


class UnknownSessionPolicy(enum.Enum):
    """What to do with a POST whose sessionId matches no open stream."""

    # Answer 202 with no body and discard the message.
    DROP = "drop"
    # Answer 404 so the client learns its session is gone.
    REJECT = "reject"


class SessionCore(Protocol):
    async def run_session(self,
                          read_stream: MemoryObjectReceiveStream[SessionMessage | Exception],
                          write_stream: MemoryObjectSendStream[SessionMessage]) -> None:
        ...


class SessionTransport:
    """Transport handle for one open event stream.

    Tracks the mcp SDK's ``mcp.server.sse.SseServerTransport`` (``connect_sse`` and
    ``handle_post_message``), keyed by our own ``sessionId`` parameter.
    """

    def __init__(self, endpoint: str = "/messages", session_id: Optional[str] = None):
        self.endpoint = endpoint
        self.session_id: str = session_id or uuid4().hex
        self._read_stream_writer, self.read_stream = \
            anyio.create_memory_object_stream[SessionMessage | Exception](0)
        self.write_stream, self._write_stream_reader = \
            anyio.create_memory_object_stream[SessionMessage](0)

    def message_uri(self, root_path: str = "") -> str:
        path = root_path.rstrip("/") + self.endpoint
        return f"{quote(path)}?{SESSION_ID_PARAM}={self.session_id}"

    @asynccontextmanager
    async def connect(self, scope: Scope, receive: Receive, send: Send
                      ) -> AsyncIterator[Tuple[MemoryObjectReceiveStream, MemoryObjectSendStream]]:
        """Stream outgoing messages as SSE events while the caller serves the session."""
        sse_stream_writer, sse_stream_reader = \
            anyio.create_memory_object_stream[dict[str, Any]](0)
        endpoint_uri = self.message_uri(scope.get("root_path", ""))

        async def sse_writer():
            async with sse_stream_writer, self._write_stream_reader:
                await sse_stream_writer.send({"event": "endpoint", "data": endpoint_uri})
                async for session_message in self._write_stream_reader:
                    await sse_stream_writer.send({
                        "event": "message",
                        "data": session_message.message.model_dump_json(
                            by_alias=True, exclude_none=True),
                    })

        async def response_wrapper():
            await EventSourceResponse(
                content=sse_stream_reader, data_sender_callable=sse_writer
            )(scope, receive, send)
            # Client went away: end the session's read side so the server returns.
            await self._read_stream_writer.aclose()
            await self._write_stream_reader.aclose()

        async with anyio.create_task_group() as tg:
            tg.start_soon(response_wrapper)
            yield self.read_stream, self.write_stream

    async def handle_post_message(self, request: Request) -> Response:
        body = await request.body()
        try:
            message = types.JSONRPCMessage.model_validate_json(body)
        except ValidationError as e:
            logger.warning("Session %s: could not parse message: %s", self.session_id, e)
            return JSONResponse({"error": "Could not parse message"}, status_code=400)

        metadata = ServerMessageMetadata(request_context=request)
        try:
            await self._read_stream_writer.send(SessionMessage(message, metadata=metadata))
        except (anyio.ClosedResourceError, anyio.BrokenResourceError):
            logger.debug("Session %s closed before message delivery", self.session_id)
        return Response("Accepted", status_code=202)


class SessionRouter:
    """Opens event-stream sessions and routes posted messages to them."""

    def __init__(self,
                 core: SessionCore,
                 registry: Optional[SessionRegistry] = None,
                 endpoint: str = "/messages",
                 unknown_session_policy: UnknownSessionPolicy = UnknownSessionPolicy.DROP):
        self.core = core
        self.registry = registry if registry is not None else SessionRegistry()
        self.endpoint = endpoint
        self.unknown_session_policy = unknown_session_policy

    async def open_stream(self, scope: Scope, receive: Receive, send: Send) -> None:
        transport = SessionTransport(self.endpoint)
        self.registry.add(transport)
        try:
            async with transport.connect(scope, receive, send) as (read_stream, write_stream):
                await self.core.run_session(read_stream, write_stream)
        finally:
            self.registry.remove(transport.session_id)

    async def post_message(self, request: Request) -> Response:
        session_id = request.query_params.get(SESSION_ID_PARAM)
        if not session_id:
            logger.error("Message received without sessionId")
            return JSONResponse({"error": "sessionId is required"}, status_code=400)

        transport = self.registry.get(session_id)
        if transport is None:
            return self.unknown_session(session_id)

        return await transport.handle_post_message(request)

    def unknown_session(self, session_id: str) -> Response:
        if self.unknown_session_policy is UnknownSessionPolicy.REJECT:
            logger.warning("Message received for unknown session %s", session_id)
            return JSONResponse({"error": "Session not found"}, status_code=404)
        logger.debug("Dropping message for unknown session %s", session_id)
        return Response(status_code=202)


class _StreamEndpoint:
    """Raw ASGI endpoint; the SSE response is sent from inside the session."""

    def __init__(self, router: SessionRouter):
        self.router = router

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.router.open_stream(scope, receive, send)


def create_sse_app(core: SessionCore,
                   registry: Optional[SessionRegistry] = None,
                   sse_path: str = "/sse",
                   message_path: str = "/messages",
                   unknown_session_policy: UnknownSessionPolicy = UnknownSessionPolicy.DROP,
                   debug: bool = False) -> Starlette:
    router = SessionRouter(core,
                           registry=registry,
                           endpoint=message_path,
                           unknown_session_policy=unknown_session_policy)
    app = Starlette(
        debug=debug,
        routes=[
            Route(sse_path, endpoint=_StreamEndpoint(router), methods=["GET"]),
            Route(message_path, endpoint=router.post_message, methods=["POST"]),
        ],
    )
    app.state.router = router
    return app
