"""
Narration providers.

    - ElevenLabsProvider: POST /v1/text-to-speech/{voice_id}, returns mpeg bytes
    - EdgeNarrationProvider: free Microsoft Edge TTS via edge-tts

Both raise NarrationError on failure. `skip_audio` on the error means the
provider asked us to carry on without audio (bad key, quota exhausted) and
retrying would not help.
"""

import os
from abc import ABC, abstractmethod
from typing import Optional

import edge_tts
import httpx

from app.config.pipeline import NARRATION_MAX_CHARS
from app.config.providers import EDGE_DEFAULT_VOICE, ELEVENLABS_BASE_URL, ELEVENLABS_MODEL_ID


class NarrationError(Exception):
    def __init__(self, message: str, skip_audio: bool = False):
        super().__init__(message)
        self.skip_audio = skip_audio


class NarrationProvider(ABC):
    """Text in, mpeg audio bytes out."""

    name: str = "narration"
    max_chars: int = NARRATION_MAX_CHARS

    @abstractmethod
    async def synthesize(self, text: str, voice_id: Optional[str]) -> bytes:
        """Return audio bytes; raise NarrationError on failure."""

    @abstractmethod
    def is_available(self) -> bool:
        ...


class ElevenLabsProvider(NarrationProvider):
    """ElevenLabs text-to-speech"""

    name = "elevenlabs"
    DEFAULT_VOICE_ID = "21m00Tcm4TlvDq8ikWAM"
    # Auth / billing failures: continuing without audio is the only option
    SKIP_AUDIO_STATUSES = {401, 402, 403, 429}

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_id: str = ELEVENLABS_MODEL_ID,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key or os.getenv("ELEVENLABS_API_KEY")
        self.model_id = model_id
        self.timeout = timeout
        self._http_client = http_client

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def synthesize(self, text: str, voice_id: Optional[str]) -> bytes:
        if not self.is_available():
            raise NarrationError("ElevenLabs API key not configured", skip_audio=True)

        url = f"{ELEVENLABS_BASE_URL}/text-to-speech/{voice_id or self.DEFAULT_VOICE_ID}"
        headers = {
            "Accept": "audio/mpeg",
            "Content-Type": "application/json",
            "xi-api-key": self.api_key,
        }
        payload = {
            "text": text[:self.max_chars],
            "model_id": self.model_id,
            "voice_settings": {"stability": 0.5, "similarity_boost": 0.75},
        }

        try:
            if self._http_client is not None:
                response = await self._http_client.post(url, json=payload, headers=headers, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise NarrationError(f"ElevenLabs request failed: {e}") from e

        if response.status_code >= 400:
            skip = response.status_code in self.SKIP_AUDIO_STATUSES
            try:
                skip = skip or bool(response.json().get("skipAudio"))
            except ValueError:
                pass
            raise NarrationError(
                f"ElevenLabs returned HTTP {response.status_code}",
                skip_audio=skip,
            )

        return response.content


class EdgeNarrationProvider(NarrationProvider):
    """Microsoft Edge TTS. Needs no key; voice ids look like en-US-AriaNeural."""

    name = "edge"

    def __init__(self, default_voice: str = EDGE_DEFAULT_VOICE, rate: str = "+0%"):
        self.default_voice = default_voice
        self.rate = rate

    def is_available(self) -> bool:
        return True

    def _resolve_voice(self, voice_id: Optional[str]) -> str:
        # ElevenLabs voice ids are opaque tokens; only pass through Edge names
        if voice_id and voice_id.endswith("Neural"):
            return voice_id
        return self.default_voice

    async def synthesize(self, text: str, voice_id: Optional[str]) -> bytes:
        communicate = edge_tts.Communicate(text[:self.max_chars], self._resolve_voice(voice_id), rate=self.rate)
        audio = bytearray()
        try:
            async for chunk in communicate.stream():
                if chunk["type"] == "audio":
                    audio.extend(chunk["data"])
        except Exception as e:
            raise NarrationError(f"Edge TTS failed: {e}") from e
        return bytes(audio)
