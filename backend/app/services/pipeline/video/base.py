"""
Video provider interface.

Every video vendor is a submit-then-poll job API. A provider implements:

    submit(job_input) -> provider job id
    get_status(job_id) -> raw status payload
    adapt(raw) -> StatusSnapshot   (vendor vocabulary -> JobState)

and the synthesizer drives it through the shared poller.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from app.config.providers import VideoProviderSpec
from app.services.infrastructure.orchestration.poller import StatusSnapshot


class VideoProviderError(Exception):
    """Submission was rejected or could not be sent"""


@dataclass(frozen=True)
class VideoJobInput:
    image_url: Optional[str] = None
    audio_url: Optional[str] = None
    script: Optional[str] = None


class VideoProvider(ABC):
    def __init__(
        self,
        spec: VideoProviderSpec,
        api_key: Optional[str],
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.spec = spec
        self.api_key = api_key
        self.timeout = timeout
        self._http_client = http_client

    @property
    def name(self) -> str:
        return self.spec.name

    def is_available(self) -> bool:
        return bool(self.api_key)

    def missing_inputs(self, job_input: VideoJobInput) -> list:
        missing = []
        if self.spec.needs_image and not job_input.image_url:
            missing.append("image")
        if self.spec.needs_audio and not job_input.audio_url:
            missing.append("audio")
        if self.spec.needs_script and not (job_input.script or "").strip():
            missing.append("script")
        return missing

    @abstractmethod
    def _headers(self) -> Dict[str, str]:
        ...

    async def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        """Send one JSON request and return the decoded body.

        Raises:
            VideoProviderError: on transport errors, HTTP errors, or a body that
                is not a JSON object
        """
        headers = {**self._headers(), **kwargs.pop("headers", {})}
        try:
            if self._http_client is not None:
                response = await self._http_client.request(
                    method, url, headers=headers, timeout=self.timeout, **kwargs
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(method, url, headers=headers, **kwargs)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise VideoProviderError(
                f"{self.name} returned HTTP {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise VideoProviderError(f"{self.name} request failed: {e}") from e

        if not isinstance(data, dict):
            raise VideoProviderError(f"{self.name} returned {type(data).__name__}, expected an object")
        return data

    @abstractmethod
    async def submit(self, job_input: VideoJobInput) -> str:
        """Start a job and return its provider id."""

    @abstractmethod
    async def get_status(self, job_id: str) -> Dict[str, Any]:
        """Fetch the raw status payload for a job."""

    @abstractmethod
    def adapt(self, raw: Dict[str, Any]) -> StatusSnapshot:
        """Map a raw status payload onto the normalized states."""
