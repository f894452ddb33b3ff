"""
Per-connection SSE transports and the router that finds them again.

A client opens ``GET /sse``; the server answers with an ``endpoint`` event
naming ``/messages?sessionId=<id>`` and then streams JSON-RPC responses as
``message`` events. The client POSTs its requests to that endpoint, and the
router hands them to the matching ``SseSession``.
"""

import logging
from typing import AsyncIterator, Dict, Optional
from uuid import uuid4

import anyio
from mcp.shared.message import SessionMessage
from mcp.types import JSONRPCMessage

from figma_mcp.errors import RoutingError, SessionNotFoundError

logger = logging.getLogger(__name__)


class SseSession:
    """Duplex channel between one SSE client and one MCP ``Server``.

    ``read_stream``/``write_stream`` are what ``Server.run`` consumes;
    ``deliver`` feeds the read side from POSTed messages and ``events``
    drains the write side into SSE events.
    """

    def __init__(self, message_path: str = "/messages", session_id: Optional[str] = None) -> None:
        self.session_id = session_id or uuid4().hex
        self.endpoint = f"{message_path}?sessionId={self.session_id}"

        self._read_stream_writer, self.read_stream = anyio.create_memory_object_stream(0)
        self.write_stream, self._write_stream_reader = anyio.create_memory_object_stream(0)
        self.closed = False

    async def deliver(self, message: JSONRPCMessage) -> None:
        """Push an inbound client message to the server side.

        Messages arriving after the connection closed are dropped.
        """
        if self.closed:
            logger.info("Discarding message for closed session %s", self.session_id)
            return
        try:
            await self._read_stream_writer.send(SessionMessage(message))
        except (anyio.ClosedResourceError, anyio.BrokenResourceError):
            logger.info("Discarding message for closed session %s", self.session_id)

    async def events(self) -> AsyncIterator[Dict[str, str]]:
        yield {"event": "endpoint", "data": self.endpoint}
        async with self._write_stream_reader:
            async for session_message in self._write_stream_reader:
                logger.debug("Sending message on session %s", self.session_id)
                yield {
                    "event": "message",
                    "data": session_message.message.model_dump_json(
                        by_alias=True, exclude_none=True
                    ),
                }

    async def aclose(self) -> None:
        self.closed = True
        await self._read_stream_writer.aclose()
        await self._write_stream_reader.aclose()


class SessionRouter:
    """sessionId → live transport, for as long as the connection is open."""

    def __init__(self) -> None:
        self._sessions: Dict[str, SseSession] = {}

    def register(self, session_id: str, transport: SseSession) -> None:
        if session_id in self._sessions:
            raise RoutingError(f"Session already registered: {session_id}")
        self._sessions[session_id] = transport
        logger.info("Registered session %s (%d active)", session_id, len(self._sessions))

    def lookup(self, session_id: str) -> SseSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    def unregister(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is not None:
            logger.info(
                "Unregistered session %s (%d active)", session_id, len(self._sessions)
            )

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
