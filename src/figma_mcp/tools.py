"""
Tool registry: the tools advertised to MCP clients, the typed arguments each
one accepts, and the Figma call each one makes.

Adding a tool means adding a ``ToolSpec`` to ``TOOL_SPECS``; nothing else
branches on tool names.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Literal, Optional, Type, Union

from mcp.types import Tool
from pydantic import BaseModel, ConfigDict

from figma_mcp.figma_client import IMAGE_FORMATS, FigmaClient


# ---------------------------------------------------------------------------
# Argument models
# ---------------------------------------------------------------------------

class ToolArguments(BaseModel):
    # strict: no "3" -> 3 coercion; extra keys are dropped, not rejected
    model_config = ConfigDict(strict=True, extra="ignore", frozen=True)


class GetFileArgs(ToolArguments):
    file_key: str
    depth: Optional[int] = None


class GetNodeArgs(ToolArguments):
    file_key: str
    node_id: str
    depth: Optional[int] = None


class GetImageArgs(ToolArguments):
    file_key: str
    node_id: str
    format: Optional[Literal["png", "jpg", "svg", "pdf"]] = None
    scale: Optional[Union[int, float]] = None


class GetImageFillsArgs(ToolArguments):
    file_key: str


class GetCommentsArgs(ToolArguments):
    file_key: str


# ---------------------------------------------------------------------------
# Handlers: one Figma call per tool
# ---------------------------------------------------------------------------

async def _get_file(client: FigmaClient, args: GetFileArgs) -> Any:
    return await client.get_file(args.file_key, args.depth)


async def _get_node(client: FigmaClient, args: GetNodeArgs) -> Any:
    return await client.get_file_nodes(args.file_key, [args.node_id], args.depth)


async def _get_image(client: FigmaClient, args: GetImageArgs) -> Any:
    return await client.get_image(args.file_key, [args.node_id], args.format, args.scale)


async def _get_image_fills(client: FigmaClient, args: GetImageFillsArgs) -> Any:
    return await client.get_image_fills(args.file_key)


async def _get_comments(client: FigmaClient, args: GetCommentsArgs) -> Any:
    return await client.get_comments(args.file_key)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

Handler = Callable[[FigmaClient, Any], Awaitable[Any]]


@dataclass(frozen=True)
class ToolSpec:
    tool: Tool
    arguments: Type[ToolArguments]
    handler: Handler

    @property
    def name(self) -> str:
        return self.tool.name


_FILE_KEY = {"type": "string", "description": "The key of the Figma file"}

_SPECS: List[ToolSpec] = [
    ToolSpec(
        tool=Tool(
            name="get_file",
            description="Retrieve the entire Figma file JSON. Use with caution for large files.",
            inputSchema={
                "type": "object",
                "properties": {
                    "file_key": _FILE_KEY,
                    "depth": {"type": "integer", "description": "Traverse depth (optional)"},
                },
                "required": ["file_key"],
            },
        ),
        arguments=GetFileArgs,
        handler=_get_file,
    ),
    ToolSpec(
        tool=Tool(
            name="get_node",
            description="Retrieve a specific node from a Figma file.",
            inputSchema={
                "type": "object",
                "properties": {
                    "file_key": _FILE_KEY,
                    "node_id": {"type": "string", "description": "The ID of the node to retrieve"},
                    "depth": {"type": "integer", "description": "Traverse depth (optional)"},
                },
                "required": ["file_key", "node_id"],
            },
        ),
        arguments=GetNodeArgs,
        handler=_get_node,
    ),
    ToolSpec(
        tool=Tool(
            name="get_image",
            description="Render a node as an image.",
            inputSchema={
                "type": "object",
                "properties": {
                    "file_key": _FILE_KEY,
                    "node_id": {"type": "string", "description": "The ID of the node to render"},
                    "format": {
                        "type": "string",
                        "enum": list(IMAGE_FORMATS),
                        "description": "Image format",
                    },
                    "scale": {"type": "number", "description": "Image scale"},
                },
                "required": ["file_key", "node_id"],
            },
        ),
        arguments=GetImageArgs,
        handler=_get_image,
    ),
    ToolSpec(
        tool=Tool(
            name="get_image_fills",
            description="Get image URLs for image fills in a file.",
            inputSchema={
                "type": "object",
                "properties": {"file_key": _FILE_KEY},
                "required": ["file_key"],
            },
        ),
        arguments=GetImageFillsArgs,
        handler=_get_image_fills,
    ),
    ToolSpec(
        tool=Tool(
            name="get_comments",
            description="Retrieve comments from a Figma file.",
            inputSchema={
                "type": "object",
                "properties": {"file_key": _FILE_KEY},
                "required": ["file_key"],
            },
        ),
        arguments=GetCommentsArgs,
        handler=_get_comments,
    ),
]

# insertion order is the advertised order
TOOL_SPECS: Dict[str, ToolSpec] = {spec.name: spec for spec in _SPECS}

ALL_TOOLS: List[Tool] = [spec.tool for spec in _SPECS]


def list_tools() -> List[Tool]:
    return list(ALL_TOOLS)


def get_tool_spec(name: str) -> Optional[ToolSpec]:
    return TOOL_SPECS.get(name)
