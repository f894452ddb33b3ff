"""Exception hierarchy for the Figma MCP server."""

from typing import Optional


class FigmaMCPError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(FigmaMCPError):
    """Missing or malformed configuration; the process should not start."""


# ---------------------------------------------------------------------------
# Tool-level errors, recovered by the dispatcher and returned as data
# ---------------------------------------------------------------------------

class ValidationError(FigmaMCPError):
    """Tool arguments did not match the tool's declared schema."""

    def __init__(self, tool_name: str, problems: str) -> None:
        self.tool_name = tool_name
        self.problems = problems
        super().__init__(f"Invalid arguments for {tool_name}: {problems}")


class UnknownToolError(FigmaMCPError):
    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Unknown tool: {tool_name}")


class NetworkError(FigmaMCPError):
    """The Figma API answered with a non-2xx status or could not be reached.

    *status* is ``None`` when no HTTP response was received at all.
    """

    def __init__(self, status: Optional[int], message: str) -> None:
        self.status = status
        self.message = message
        if status is None:
            super().__init__(f"Figma API request failed: {message}")
        else:
            super().__init__(f"Figma API error ({status}): {message}")


class ToolCallError(FigmaMCPError):
    """Raised from the MCP ``call_tool`` handler; the SDK reports it with ``isError``."""


# ---------------------------------------------------------------------------
# Connection-level errors, surfaced as HTTP 400/404 by the listener
# ---------------------------------------------------------------------------

class RoutingError(FigmaMCPError):
    """A message could not be routed to a session."""


class SessionNotFoundError(RoutingError):
    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")
