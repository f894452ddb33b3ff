"""
Unit tests for the Figma REST client, against httpx.MockTransport.
"""
import httpx
import pytest

from figma_mcp.errors import NetworkError
from figma_mcp.figma_client import FigmaClient


class RecordingTransport:
    """Builds a MockTransport that records requests and replies with a canned response."""

    def __init__(self, status_code=200, json=None, text=None):
        self.requests = []
        self.status_code = status_code
        self.json = json if json is not None else {"ok": True}
        self.text = text

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.json)

    def client(self, token="secret-token") -> FigmaClient:
        return FigmaClient(token, transport=httpx.MockTransport(self.handler))

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


class TestRequestConstruction:
    """URL, query string and auth header for each operation."""

    @pytest.mark.asyncio
    async def test_token_header_on_every_call(self):
        recorder = RecordingTransport()
        async with recorder.client("abc") as client:
            await client.get_file("KEY")
            await client.get_comments("KEY")

        assert len(recorder.requests) == 2
        for request in recorder.requests:
            assert request.headers["X-Figma-Token"] == "abc"
            assert request.method == "GET"

    @pytest.mark.asyncio
    async def test_get_file_without_depth(self):
        recorder = RecordingTransport(json={"name": "doc"})
        async with recorder.client() as client:
            result = await client.get_file("KEY")

        assert result == {"name": "doc"}
        assert recorder.last.url.path == "/v1/files/KEY"
        assert "depth" not in recorder.last.url.params

    @pytest.mark.asyncio
    async def test_get_file_with_depth(self):
        recorder = RecordingTransport()
        async with recorder.client() as client:
            await client.get_file("KEY", depth=2)

        assert recorder.last.url.params["depth"] == "2"

    @pytest.mark.asyncio
    async def test_get_file_nodes_joins_ids(self):
        recorder = RecordingTransport()
        async with recorder.client() as client:
            await client.get_file_nodes("KEY", ["1:2", "3:4"], depth=1)

        assert recorder.last.url.path == "/v1/files/KEY/nodes"
        assert recorder.last.url.params["ids"] == "1:2,3:4"
        assert recorder.last.url.params["depth"] == "1"

    @pytest.mark.asyncio
    async def test_get_image_defaults(self):
        recorder = RecordingTransport(json={"images": {"1:2": "https://img"}})
        async with recorder.client() as client:
            result = await client.get_image("KEY", ["1:2"])

        assert result == {"images": {"1:2": "https://img"}}
        assert recorder.last.url.path == "/v1/images/KEY"
        assert recorder.last.url.params["format"] == "png"
        assert recorder.last.url.params["scale"] == "1"

    @pytest.mark.asyncio
    async def test_get_image_none_falls_back_to_defaults(self):
        recorder = RecordingTransport()
        async with recorder.client() as client:
            await client.get_image("KEY", ["1:2"], None, None)

        assert recorder.last.url.params["format"] == "png"
        assert recorder.last.url.params["scale"] == "1"

    @pytest.mark.asyncio
    async def test_get_image_explicit_format_and_scale(self):
        recorder = RecordingTransport()
        async with recorder.client() as client:
            await client.get_image("KEY", ["1:2"], "svg", 2)

        assert recorder.last.url.params["format"] == "svg"
        assert recorder.last.url.params["scale"] == "2"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method, arg, path",
        [
            ("get_image_fills", "KEY", "/v1/files/KEY/images"),
            ("get_comments", "KEY", "/v1/files/KEY/comments"),
            ("get_team_projects", "T1", "/v1/teams/T1/projects"),
            ("get_project_files", "P1", "/v1/projects/P1/files"),
        ],
    )
    async def test_simple_paths(self, method, arg, path):
        recorder = RecordingTransport()
        async with recorder.client() as client:
            await getattr(client, method)(arg)

        assert recorder.last.url.path == path
        assert recorder.last.url.host == "api.figma.com"


class TestErrors:
    """Non-2xx and transport failures become NetworkError."""

    @pytest.mark.asyncio
    async def test_figma_err_field(self):
        recorder = RecordingTransport(status_code=403, json={"status": 403, "err": "Invalid token"})
        async with recorder.client() as client:
            with pytest.raises(NetworkError) as info:
                await client.get_file("KEY")

        assert info.value.status == 403
        assert info.value.message == "Invalid token"
        assert "Invalid token" in str(info.value)

    @pytest.mark.asyncio
    async def test_message_field(self):
        recorder = RecordingTransport(
            status_code=404, json={"status": 404, "error": True, "message": "Not found"}
        )
        async with recorder.client() as client:
            with pytest.raises(NetworkError) as info:
                await client.get_comments("KEY")

        assert info.value.status == 404
        assert info.value.message == "Not found"

    @pytest.mark.asyncio
    async def test_plain_text_body(self):
        recorder = RecordingTransport(status_code=500, text="upstream exploded")
        async with recorder.client() as client:
            with pytest.raises(NetworkError) as info:
                await client.get_image_fills("KEY")

        assert info.value.status == 500
        assert info.value.message == "upstream exploded"

    @pytest.mark.asyncio
    async def test_redirect_is_not_followed(self):
        recorder = RecordingTransport(status_code=302, text="")
        async with recorder.client() as client:
            with pytest.raises(NetworkError) as info:
                await client.get_file("KEY")

        assert info.value.status == 302
        assert info.value.message == "Found"

    @pytest.mark.asyncio
    async def test_success_with_non_json_body(self):
        recorder = RecordingTransport(status_code=200, text="<html>")
        async with recorder.client() as client:
            with pytest.raises(NetworkError) as info:
                await client.get_comments("KEY")

        assert info.value.status == 200
        assert "Invalid JSON" in info.value.message

    @pytest.mark.asyncio
    async def test_connection_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with FigmaClient("t", transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(NetworkError) as info:
                await client.get_file("KEY")

        assert info.value.status is None
        assert "connection refused" in str(info.value)

    @pytest.mark.asyncio
    async def test_no_retry_on_failure(self):
        recorder = RecordingTransport(status_code=503, text="busy")
        async with recorder.client() as client:
            with pytest.raises(NetworkError):
                await client.get_file("KEY")

        assert len(recorder.requests) == 1
