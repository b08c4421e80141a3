"""
Extract stage

Document text comes from an external extraction service:

    POST {EXTRACTION_SERVICE_URL}  multipart file=<document>
      -> {"text": "...", "pageCount": 12}

When the service is not configured, unreachable, or returns no text, the
stage fails recoverably and the orchestrator uses placeholder_text().
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from app.core import get_logger

from .errors import StageErrorKind, StageResult

logger = get_logger(__name__, component="extraction")


@dataclass(frozen=True)
class ExtractedDocument:
    text: str
    page_count: int = 0


def placeholder_text(document_name: Optional[str]) -> str:
    name = document_name or "uploaded document"
    return (
        f"Training content from {name}. "
        "Please configure backend server for full PDF extraction."
    )


class ExtractionClient:
    def __init__(
        self,
        service_url: Optional[str],
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.service_url = (service_url or "").strip()
        self.http_client = http_client
        self.timeout = timeout

    def is_available(self) -> bool:
        return bool(self.service_url)

    async def _post(self, files) -> httpx.Response:
        if self.http_client is not None:
            return await self.http_client.post(self.service_url, files=files, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.service_url, files=files)

    async def extract(
        self,
        document: bytes,
        filename: Optional[str] = None,
        content_type: str = "application/pdf",
    ) -> StageResult[ExtractedDocument]:
        if not self.is_available():
            return StageResult.fail(StageErrorKind.EXTRACTION, "extraction service not configured")
        if not document:
            return StageResult.fail(StageErrorKind.EXTRACTION, "empty document")

        files = {"file": (filename or "document.pdf", document, content_type)}
        try:
            response = await self._post(files)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            return StageResult.fail(StageErrorKind.EXTRACTION, f"extraction request failed: {e}")
        except ValueError as e:
            return StageResult.fail(StageErrorKind.EXTRACTION, f"extraction returned invalid JSON: {e}")

        if not isinstance(data, dict):
            return StageResult.fail(StageErrorKind.EXTRACTION, "extraction returned a non-object body")

        text = data.get("text")
        if not isinstance(text, str) or not text.strip():
            return StageResult.fail(StageErrorKind.EXTRACTION, "extraction returned no text")

        pages = data.get("pageCount", data.get("pages", 0))
        try:
            page_count = int(pages or 0)
        except (TypeError, ValueError):
            page_count = 0

        logger.info(
            "Document extracted",
            extra={"document_name": filename, "page_count": page_count, "chars": len(text)},
        )
        return StageResult.ok(ExtractedDocument(text=text, page_count=page_count))
