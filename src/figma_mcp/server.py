#!/usr/bin/env python3
"""
MCP server exposing read-only Figma REST API tools.

Two transports:

* ``sse`` (default): multi-tenant. Every ``GET /sse?token=...`` connection
  gets its own FigmaClient and MCP server; follow-up messages are POSTed to
  ``/messages?sessionId=...``.
* ``stdio``: single-tenant. One process, one session, and the credential
  comes from ``FIGMA_ACCESS_TOKEN``.

Usage:
    figma-mcp-server [--transport=sse|stdio] [--host=HOST] [--port=PORT]
"""

import argparse
import dataclasses
import functools
import logging
import sys
from typing import Any, Callable, Dict, List, Optional, Sequence

import anyio
import pydantic
import uvicorn
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import JSONRPCMessage, TextContent, Tool
from sse_starlette.sse import EventSourceResponse
from starlette.applications import Starlette
from starlette.background import BackgroundTask
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route
from starlette.types import Receive, Scope, Send

from figma_mcp import __version__
from figma_mcp.config import Settings
from figma_mcp.dispatcher import Dispatcher
from figma_mcp.errors import ConfigError, SessionNotFoundError, ToolCallError
from figma_mcp.figma_client import FigmaClient
from figma_mcp.sessions import SessionRouter, SseSession
from figma_mcp.tools import list_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "figma-mcp-server"
MESSAGE_PATH = "/messages"

ClientFactory = Callable[[str], FigmaClient]


# ---------------------------------------------------------------------------
# MCP server (one per connection)
# ---------------------------------------------------------------------------

def create_server(client: FigmaClient) -> Server:
    """Build an MCP server whose tools call Figma through *client*."""
    dispatcher = Dispatcher(client)
    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def handle_list_tools() -> List[Tool]:
        return list_tools()

    @server.call_tool()
    async def handle_call_tool(name: str, arguments: Dict[str, Any]) -> List[TextContent]:
        result = await dispatcher.dispatch(name, arguments)
        if result.isError:
            raise ToolCallError(result.content[0].text)
        return result.content

    return server


# ---------------------------------------------------------------------------
# HTTP endpoints
# ---------------------------------------------------------------------------

class SseEndpoint:
    """ASGI endpoint for ``GET /sse``: one MCP session per open stream."""

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        token = request.query_params.get("token")
        if not token:
            response = PlainTextResponse("Missing token query parameter", status_code=400)
            await response(scope, receive, send)
            return

        state = request.app.state
        router: SessionRouter = state.sessions
        client: FigmaClient = state.client_factory(token)
        server = create_server(client)
        session = SseSession(scope.get("root_path", "") + MESSAGE_PATH)

        logger.info("Received connection with token, session %s", session.session_id)
        router.register(session.session_id, session)
        try:
            async with anyio.create_task_group() as tg:
                tg.start_soon(
                    server.run,
                    session.read_stream,
                    session.write_stream,
                    server.create_initialization_options(),
                )
                # returns once the client disconnects
                await EventSourceResponse(session.events())(scope, receive, send)
                tg.cancel_scope.cancel()
        finally:
            router.unregister(session.session_id)
            await session.aclose()
            await client.aclose()
            logger.info("Session %s closed", session.session_id)


async def handle_post_message(request: Request) -> Response:
    session_id = request.query_params.get("sessionId")
    if not session_id:
        return PlainTextResponse("Missing sessionId", status_code=400)

    router: SessionRouter = request.app.state.sessions
    try:
        session = router.lookup(session_id)
    except SessionNotFoundError:
        logger.warning("Message for unknown session %s", session_id)
        return PlainTextResponse("Session not found", status_code=404)

    body = await request.body()
    try:
        message = JSONRPCMessage.model_validate_json(body)
    except pydantic.ValidationError as exc:
        logger.warning("Could not parse message for session %s: %s", session_id, exc)
        return PlainTextResponse("Could not parse message", status_code=400)

    return PlainTextResponse(
        "Accepted", status_code=202, background=BackgroundTask(session.deliver, message)
    )


async def handle_health(request: Request) -> Response:
    return JSONResponse({"status": "ok", "sessions": len(request.app.state.sessions)})


def create_app(
    settings: Optional[Settings] = None,
    router: Optional[SessionRouter] = None,
    client_factory: Optional[ClientFactory] = None,
) -> Starlette:
    settings = settings or Settings()
    if client_factory is None:
        client_factory = functools.partial(
            FigmaClient, base_url=settings.api_base, timeout=settings.timeout
        )

    app = Starlette(
        routes=[
            Route("/sse", endpoint=SseEndpoint(), methods=["GET"]),
            Route(MESSAGE_PATH, endpoint=handle_post_message, methods=["POST"]),
            Route("/health", endpoint=handle_health, methods=["GET"]),
        ],
        middleware=[
            Middleware(
                CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"]
            ),
        ],
    )
    app.state.settings = settings
    app.state.sessions = router if router is not None else SessionRouter()
    app.state.client_factory = client_factory
    return app


# ---------------------------------------------------------------------------
# Single-tenant stdio transport
# ---------------------------------------------------------------------------

async def run_stdio(settings: Settings) -> None:
    token = settings.require_token()
    async with FigmaClient(token, settings.api_base, settings.timeout) as client:
        server = create_server(client)
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Figma REST API MCP server")
    parser.add_argument(
        "--transport",
        choices=("sse", "stdio"),
        default="sse",
        help="sse: multi-tenant HTTP server (default); stdio: single client using FIGMA_ACCESS_TOKEN",
    )
    parser.add_argument("--host", help="Address to listen on (default: $HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, help="Port to listen on (default: $PORT or 3000)")
    parser.add_argument("--log-level", help="Logging level (default: $LOG_LEVEL or INFO)")
    return parser


def configure_logging(level: str) -> None:
    # stderr only: stdout carries the stdio transport
    logging.basicConfig(
        level=level.upper(),
        format="[%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    try:
        settings = Settings.from_env()
    except ConfigError as exc:
        configure_logging(args.log_level or "INFO")
        logger.error("Invalid configuration: %s", exc)
        return 1

    overrides = {
        field: value
        for field, value in (("host", args.host), ("port", args.port), ("log_level", args.log_level))
        if value is not None
    }
    settings = dataclasses.replace(settings, **overrides)
    configure_logging(settings.log_level)

    if args.transport == "stdio":
        try:
            settings.require_token()
        except ConfigError as exc:
            logger.error("%s", exc)
            return 1
        logger.info("Starting stdio transport")
        anyio.run(run_stdio, settings)
        return 0

    logger.info("Server is running on port %s", settings.port)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        # request lines carry the ?token= credential
        access_log=False,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
