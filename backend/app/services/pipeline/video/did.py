"""
D-ID talks API.

    POST /talks  {source_url, script: {type: audio, audio_url} | {type: text, input}}
    GET  /talks/{id} -> {status: created | started | done | error | rejected, result_url}
"""

import os
from typing import Any, Dict, Optional

import httpx

from app.config.pipeline import AVATAR_SCRIPT_CHARS
from app.config.providers import DID_BASE_URL, VideoProviderSpec
from app.models.course import JobState
from app.services.infrastructure.orchestration.poller import StatusSnapshot

from .base import VideoJobInput, VideoProvider, VideoProviderError

DID_STATES = {
    "created": JobState.PENDING,
    "started": JobState.PENDING,
    "done": JobState.SUCCEEDED,
    "error": JobState.FAILED,
    "rejected": JobState.FAILED,
}


def adapt_did_status(raw: Dict[str, Any]) -> StatusSnapshot:
    state = DID_STATES.get(str(raw.get("status", "")).lower(), JobState.PENDING)
    error = raw.get("error")
    if isinstance(error, dict):
        error = error.get("description") or error.get("kind")
    return StatusSnapshot(
        state=state,
        output_url=raw.get("result_url") if state is JobState.SUCCEEDED else None,
        error=str(error) if error else None,
    )


class DIDVideoProvider(VideoProvider):
    def __init__(
        self,
        spec: VideoProviderSpec,
        api_key: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
        base_url: str = DID_BASE_URL,
    ):
        super().__init__(spec, api_key or os.getenv("DID_API_KEY"), http_client, timeout)
        self.base_url = base_url.rstrip("/")

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Basic {self.api_key}", "Content-Type": "application/json"}

    def build_input(self, job_input: VideoJobInput) -> Dict[str, Any]:
        if self.spec.needs_audio:
            script = {"type": "audio", "audio_url": job_input.audio_url}
        else:
            script = {"type": "text", "input": (job_input.script or "").strip()[:AVATAR_SCRIPT_CHARS]}
        return {"source_url": job_input.image_url, "script": script, "config": {"stitch": True}}

    async def submit(self, job_input: VideoJobInput) -> str:
        data = await self._request("POST", f"{self.base_url}/talks", json=self.build_input(job_input))
        talk_id = data.get("id")
        if not talk_id:
            raise VideoProviderError(f"{self.name}: no talk id in response")
        return talk_id

    async def get_status(self, job_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"{self.base_url}/talks/{job_id}")

    def adapt(self, raw: Dict[str, Any]) -> StatusSnapshot:
        return adapt_did_status(raw)
