"""Thin async client for the read-only parts of the Figma REST API."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from figma_mcp.config import DEFAULT_API_BASE
from figma_mcp.errors import NetworkError

logger = logging.getLogger(__name__)

IMAGE_FORMATS = ("png", "jpg", "svg", "pdf")


class FigmaClient:
    """One client per credential.

    Every call is a single GET; no retries, caching or response validation.
    Anything other than a 2xx JSON body raises NetworkError.
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_API_BASE,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        kwargs: Dict[str, Any] = {
            "base_url": base_url,
            "headers": {"X-Figma-Token": token},
            "transport": transport,
        }
        if timeout is not None:
            kwargs["timeout"] = timeout
        self._http = httpx.AsyncClient(**kwargs)

    async def __aenter__(self) -> "FigmaClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # -----------------------------------------------------------------------
    # Request plumbing
    # -----------------------------------------------------------------------

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        logger.debug("GET %s params=%s", path, params)
        try:
            response = await self._http.get(path, params=params)
        except httpx.RequestError as exc:
            logger.error("Request to Figma failed for %s: %s", path, exc)
            raise NetworkError(None, str(exc) or exc.__class__.__name__) from exc

        if not response.is_success:
            message = _error_message(response)
            logger.error(
                "Figma API returned %s for %s: %s", response.status_code, path, message
            )
            raise NetworkError(response.status_code, message)

        try:
            return response.json()
        except ValueError as exc:
            logger.error("Figma API returned a non-JSON body for %s", path)
            raise NetworkError(response.status_code, f"Invalid JSON in response: {exc}") from exc

    # -----------------------------------------------------------------------
    # Files
    # -----------------------------------------------------------------------

    async def get_file(self, file_key: str, depth: Optional[int] = None) -> Any:
        """Full document tree; *depth* bounds traversal when given."""
        params: Dict[str, Any] = {}
        if depth:
            params["depth"] = depth
        return await self._get(f"/files/{file_key}", params)

    async def get_file_nodes(
        self, file_key: str, ids: List[str], depth: Optional[int] = None
    ) -> Any:
        params: Dict[str, Any] = {"ids": ",".join(ids)}
        if depth:
            params["depth"] = depth
        return await self._get(f"/files/{file_key}/nodes", params)

    async def get_image(
        self,
        file_key: str,
        ids: List[str],
        format: Optional[str] = "png",
        scale: Optional[float] = 1,
    ) -> Any:
        """Render nodes; the response maps node id to a temporary image URL."""
        params = {
            "ids": ",".join(ids),
            "format": format or "png",
            "scale": 1 if scale is None else scale,
        }
        return await self._get(f"/images/{file_key}", params)

    async def get_image_fills(self, file_key: str) -> Any:
        return await self._get(f"/files/{file_key}/images")

    async def get_comments(self, file_key: str) -> Any:
        return await self._get(f"/files/{file_key}/comments")

    # -----------------------------------------------------------------------
    # Teams & projects
    # -----------------------------------------------------------------------

    async def get_team_projects(self, team_id: str) -> Any:
        return await self._get(f"/teams/{team_id}/projects")

    async def get_project_files(self, project_id: str) -> Any:
        return await self._get(f"/projects/{project_id}/files")


def _error_message(response: httpx.Response) -> str:
    """Pull a readable message out of a Figma error body."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("err", "message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value

    return response.text or response.reason_phrase
