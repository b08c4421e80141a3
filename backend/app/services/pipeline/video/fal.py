"""
fal.ai queue API.

    POST {queue}/{model}              -> {request_id, status_url, response_url}
    GET  status_url                   -> {status: IN_QUEUE | IN_PROGRESS | COMPLETED | ERROR}
    GET  response_url (once COMPLETED) -> {video: {url: ...}}

The result lives behind a second endpoint, so get_status fetches it as soon
as the queue reports COMPLETED and folds it into the payload under "result".
"""

import os
from typing import Any, Dict, Optional

import httpx

from app.config.pipeline import VIDEO_PROMPT_CHARS
from app.config.providers import FAL_QUEUE_BASE_URL, VideoProviderSpec
from app.models.course import JobState
from app.services.infrastructure.orchestration.poller import StatusSnapshot

from .base import VideoJobInput, VideoProvider, VideoProviderError
from .replicate import final_output_url

FAL_STATES = {
    "IN_QUEUE": JobState.PENDING,
    "IN_PROGRESS": JobState.PENDING,
    "COMPLETED": JobState.SUCCEEDED,
    "ERROR": JobState.FAILED,
    "FAILED": JobState.FAILED,
}


def adapt_fal_status(raw: Dict[str, Any]) -> StatusSnapshot:
    state = FAL_STATES.get(str(raw.get("status", "")).upper(), JobState.PENDING)
    error = raw.get("error")
    output_url = None
    if state is JobState.SUCCEEDED:
        result = raw.get("result") or {}
        if isinstance(result, dict) and result.get("error"):
            return StatusSnapshot(state=JobState.FAILED, error=str(result["error"]))
        output_url = final_output_url(result)
    return StatusSnapshot(state=state, output_url=output_url, error=str(error) if error else None)


class FalVideoProvider(VideoProvider):
    def __init__(
        self,
        spec: VideoProviderSpec,
        api_key: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
        base_url: str = FAL_QUEUE_BASE_URL,
    ):
        super().__init__(spec, api_key or os.getenv("FAL_KEY"), http_client, timeout)
        self.base_url = base_url.rstrip("/")
        # request_id -> (status_url, response_url)
        self._endpoints: Dict[str, tuple] = {}

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Key {self.api_key}", "Content-Type": "application/json"}

    def build_input(self, job_input: VideoJobInput) -> Dict[str, Any]:
        if self.spec.needs_audio:
            return {
                "source_image_url": job_input.image_url,
                "driven_audio_url": job_input.audio_url,
                "still_mode": True,
            }
        body: Dict[str, Any] = {"image_url": job_input.image_url, "duration": "5"}
        prompt = (job_input.script or "").strip()
        body["prompt"] = prompt[:VIDEO_PROMPT_CHARS] if prompt else "A professional presenter speaking to camera"
        return body

    async def submit(self, job_input: VideoJobInput) -> str:
        data = await self._request("POST", f"{self.base_url}/{self.spec.model}", json=self.build_input(job_input))
        request_id = data.get("request_id")
        if not request_id:
            raise VideoProviderError(f"{self.name}: no request id in response")

        model_root = f"{self.base_url}/{self.spec.model}/requests/{request_id}"
        self._endpoints[request_id] = (
            data.get("status_url") or f"{model_root}/status",
            data.get("response_url") or model_root,
        )
        return request_id

    async def get_status(self, job_id: str) -> Dict[str, Any]:
        status_url, response_url = self._endpoints.get(job_id) or (
            f"{self.base_url}/{self.spec.model}/requests/{job_id}/status",
            f"{self.base_url}/{self.spec.model}/requests/{job_id}",
        )
        raw = await self._request("GET", status_url)
        if str(raw.get("status", "")).upper() == "COMPLETED":
            raw = {**raw, "result": await self._request("GET", response_url)}
            self._endpoints.pop(job_id, None)
        return raw

    def adapt(self, raw: Dict[str, Any]) -> StatusSnapshot:
        return adapt_fal_status(raw)
