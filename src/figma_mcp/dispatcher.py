"""Turns a ``tools/call`` invocation into a Figma request and an MCP result."""

import json
import logging
from typing import Any, Dict, List, Optional

import pydantic
from mcp.types import CallToolResult, TextContent

from figma_mcp.errors import UnknownToolError, ValidationError
from figma_mcp.figma_client import FigmaClient
from figma_mcp.tools import ToolArguments, ToolSpec, get_tool_spec

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# MCP response helpers
# ---------------------------------------------------------------------------

def ok(result: Any) -> CallToolResult:
    """Wrap a successful Figma response as pretty-printed JSON text."""
    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(result, indent=2))],
        isError=False,
    )


def err(msg: str) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=msg)], isError=True)


def describe_validation_error(exc: pydantic.ValidationError) -> str:
    problems: List[str] = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "arguments"
        problems.append(f"{field}: {error['msg']}")
    return "; ".join(problems)


def parse_arguments(spec: ToolSpec, arguments: Optional[Dict[str, Any]]) -> ToolArguments:
    """Validate raw arguments into the tool's typed request, or raise ValidationError."""
    try:
        return spec.arguments.model_validate(arguments or {})
    except pydantic.ValidationError as exc:
        raise ValidationError(spec.name, describe_validation_error(exc)) from exc


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------

class Dispatcher:
    """Per-connection bridge between tool invocations and one FigmaClient.

    ``dispatch`` never raises: unknown tools, bad arguments and upstream
    failures all come back as ``isError`` results so the MCP session stays
    usable.
    """

    def __init__(self, client: FigmaClient) -> None:
        self.client = client

    async def dispatch(
        self, name: str, arguments: Optional[Dict[str, Any]] = None
    ) -> CallToolResult:
        spec = get_tool_spec(name)
        if spec is None:
            logger.warning("Unknown tool requested: %s", name)
            return err(str(UnknownToolError(name)))

        try:
            args = parse_arguments(spec, arguments)
        except ValidationError as exc:
            logger.info("Rejected %s call: %s", name, exc.problems)
            return err(str(exc))

        logger.info("Calling tool: %s", name)
        try:
            result = await spec.handler(self.client, args)
        except Exception as e:
            logger.error("Error calling %s: %s", name, e)
            return err(f"Error calling {name}: {e}")

        return ok(result)
