"""Shared fixtures."""

from unittest.mock import AsyncMock

import pytest

from figma_mcp.figma_client import FigmaClient


@pytest.fixture
def figma_client():
    """A FigmaClient whose API calls are AsyncMocks."""
    client = AsyncMock(spec=FigmaClient)
    client.get_file.return_value = {"name": "doc"}
    client.get_file_nodes.return_value = {"nodes": {"1:2": {"document": {"id": "1:2"}}}}
    client.get_image.return_value = {"err": None, "images": {"1:2": "https://example.com/1-2.png"}}
    client.get_image_fills.return_value = {"meta": {"images": {"ref1": "https://example.com/ref1.png"}}}
    client.get_comments.return_value = {"comments": [{"id": "c1", "message": "hi"}]}
    return client
