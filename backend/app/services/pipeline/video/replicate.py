"""
Replicate predictions API.

    POST /v1/predictions                       {"version": ..., "input": {...}}
    POST /v1/models/{owner}/{name}/predictions {"input": {...}}
    GET  /v1/predictions/{id}

Status vocabulary: starting | processing | succeeded | failed | canceled
"""

import os
from typing import Any, Dict, Optional

import httpx

from app.config.pipeline import VIDEO_PROMPT_CHARS
from app.config.providers import REPLICATE_BASE_URL, VideoProviderSpec
from app.models.course import JobState
from app.services.infrastructure.orchestration.poller import StatusSnapshot

from .base import VideoJobInput, VideoProvider, VideoProviderError

REPLICATE_STATES = {
    "starting": JobState.PENDING,
    "processing": JobState.PENDING,
    "succeeded": JobState.SUCCEEDED,
    "failed": JobState.FAILED,
    "canceled": JobState.CANCELED,
}


def final_output_url(output: Any) -> Optional[str]:
    """Replicate outputs are a URL, a list of URLs, or a dict holding one.

    Lists are read from the end: models that stream intermediate frames put
    the finished render last.
    """
    if isinstance(output, str):
        return output or None
    if isinstance(output, list):
        for item in reversed(output):
            url = final_output_url(item)
            if url:
                return url
        return None
    if isinstance(output, dict):
        for key in ("video", "url", "output"):
            url = final_output_url(output.get(key))
            if url:
                return url
    return None


def adapt_replicate_status(raw: Dict[str, Any]) -> StatusSnapshot:
    state = REPLICATE_STATES.get(str(raw.get("status", "")).lower(), JobState.PENDING)
    error = raw.get("error")
    return StatusSnapshot(
        state=state,
        output_url=final_output_url(raw.get("output")) if state is JobState.SUCCEEDED else None,
        error=str(error) if error else None,
    )


class ReplicateVideoProvider(VideoProvider):
    """One Replicate model; the provider name selects the input mapping."""

    def __init__(
        self,
        spec: VideoProviderSpec,
        api_key: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
        base_url: str = REPLICATE_BASE_URL,
    ):
        super().__init__(spec, api_key or os.getenv("REPLICATE_API_TOKEN"), http_client, timeout)
        self.base_url = base_url.rstrip("/")

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}

    def build_input(self, job_input: VideoJobInput) -> Dict[str, Any]:
        if self.spec.needs_audio:
            return {
                "source_image": job_input.image_url,
                "driven_audio": job_input.audio_url,
                "preprocess": "full",
                "still_mode": True,
            }
        if self.spec.needs_image:
            return {"input_image": job_input.image_url, "video_length": "25_frames_with_svd_xt"}
        return {"prompt": (job_input.script or "")[:VIDEO_PROMPT_CHARS]}

    async def submit(self, job_input: VideoJobInput) -> str:
        model = self.spec.model
        body: Dict[str, Any] = {"input": self.build_input(job_input)}
        if ":" in model:
            body["version"] = model.split(":", 1)[1]
            url = f"{self.base_url}/predictions"
        else:
            url = f"{self.base_url}/models/{model}/predictions"

        data = await self._request("POST", url, json=body)
        prediction_id = data.get("id")
        if not prediction_id:
            raise VideoProviderError(f"{self.name}: no prediction id in response")
        return prediction_id

    async def get_status(self, job_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"{self.base_url}/predictions/{job_id}")

    def adapt(self, raw: Dict[str, Any]) -> StatusSnapshot:
        return adapt_replicate_status(raw)
