"""Runtime settings, read from the environment (and an optional ``.env``)."""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from dotenv import load_dotenv

from figma_mcp.errors import ConfigError


DEFAULT_API_BASE = "https://api.figma.com/v1"
DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"


@dataclass(frozen=True)
class Settings:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    api_base: str = DEFAULT_API_BASE
    # Only used by the single-tenant stdio transport; SSE connections bring their own.
    access_token: Optional[str] = field(default=None, repr=False)
    timeout: Optional[float] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from *environ* (defaults to ``os.environ`` after loading ``.env``)."""
        if environ is None:
            load_dotenv()
            environ = os.environ

        port_raw = environ.get("PORT", str(DEFAULT_PORT))
        try:
            port = int(port_raw)
        except ValueError:
            raise ConfigError(f"PORT must be an integer, got {port_raw!r}") from None
        if not 0 < port < 65536:
            raise ConfigError(f"PORT out of range: {port}")

        timeout: Optional[float] = None
        timeout_raw = environ.get("FIGMA_TIMEOUT")
        if timeout_raw:
            try:
                timeout = float(timeout_raw)
            except ValueError:
                raise ConfigError(
                    f"FIGMA_TIMEOUT must be a number of seconds, got {timeout_raw!r}"
                ) from None

        return cls(
            host=environ.get("HOST", DEFAULT_HOST),
            port=port,
            api_base=environ.get("FIGMA_API_BASE", DEFAULT_API_BASE).rstrip("/"),
            access_token=environ.get("FIGMA_ACCESS_TOKEN") or None,
            timeout=timeout,
            log_level=environ.get("LOG_LEVEL", "INFO").upper(),
        )

    def require_token(self) -> str:
        if not self.access_token:
            raise ConfigError(
                "FIGMA_ACCESS_TOKEN is required when running over stdio"
            )
        return self.access_token
