import httpx
import pytest

from app.services.pipeline.errors import StageErrorKind
from app.services.pipeline.extraction import ExtractionClient, placeholder_text

SERVICE_URL = "http://extract.local/api/extract"


def client_for(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_placeholder_text():
    assert placeholder_text("handbook.pdf") == (
        "Training content from handbook.pdf. Please configure backend server for full PDF extraction."
    )
    assert "uploaded document" in placeholder_text(None)


@pytest.mark.asyncio
async def test_extract_posts_multipart_file():
    seen = {}

    def handler(request):
        seen["content_type"] = request.headers["content-type"]
        seen["body"] = request.content
        return httpx.Response(200, json={"text": "Chapter 1. Lifting safely.", "pageCount": 12})

    async with client_for(handler) as http:
        result = await ExtractionClient(SERVICE_URL, http_client=http).extract(b"%PDF-1.7", "handbook.pdf")

    assert result.is_ok
    assert result.value.text == "Chapter 1. Lifting safely."
    assert result.value.page_count == 12
    assert seen["content_type"].startswith("multipart/form-data")
    assert b'name="file"; filename="handbook.pdf"' in seen["body"]


@pytest.mark.asyncio
async def test_pages_alias():
    async with client_for(lambda request: httpx.Response(200, json={"text": "t", "pages": "3"})) as http:
        result = await ExtractionClient(SERVICE_URL, http_client=http).extract(b"%PDF")
    assert result.value.page_count == 3


@pytest.mark.asyncio
async def test_not_configured():
    result = await ExtractionClient("").extract(b"%PDF")
    assert result.error.kind is StageErrorKind.EXTRACTION
    assert "not configured" in result.error.message


@pytest.mark.asyncio
async def test_empty_document():
    result = await ExtractionClient(SERVICE_URL).extract(b"")
    assert result.error.message == "empty document"


@pytest.mark.asyncio
@pytest.mark.parametrize("response,message", [
    (httpx.Response(503, text="down"), "request failed"),
    (httpx.Response(200, text="<html>"), "invalid JSON"),
    (httpx.Response(200, json=["text"]), "non-object"),
    (httpx.Response(200, json={"text": "   "}), "no text"),
])
async def test_recoverable_failures(response, message):
    async with client_for(lambda request: response) as http:
        result = await ExtractionClient(SERVICE_URL, http_client=http).extract(b"%PDF")
    assert not result.is_ok
    assert not result.error.is_fatal
    assert message in result.error.message
