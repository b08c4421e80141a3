"""
Narration Synthesizer

One call per segment, run sequentially by the orchestrator:

    clean text -> provider -> bytes -> storage (or inline data URI)

Every failure is returned as a StageResult error and the episode simply
carries on without audio. Storage trouble is not a failure: the bytes are
embedded as a data URI so the episode is still playable.
"""

from dataclasses import dataclass
from typing import Optional

from app.config.pipeline import NARRATION_MAX_CHARS, NARRATION_MIN_CHARS
from app.core import get_logger
from app.services.infrastructure.storage import (
    AUDIO_BUCKET,
    ObjectStorage,
    StorageError,
    audio_key,
    to_data_uri,
)

from ..errors import StageErrorKind, StageResult
from ..timing import estimate_duration_from_bytes
from .providers import NarrationError, NarrationProvider

logger = get_logger(__name__, component="narration")

AUDIO_CONTENT_TYPE = "audio/mpeg"


@dataclass(frozen=True)
class NarrationAsset:
    url: str
    duration: int
    byte_count: int
    # True when `url` is a data URI rather than a stored object
    inline: bool = False


def clean_narration_text(text: str, max_chars: int = NARRATION_MAX_CHARS) -> str:
    """Collapse whitespace, trim, and hard-cap at the provider limit."""
    return " ".join((text or "").split())[:max_chars].strip()


class NarrationSynthesizer:
    def __init__(
        self,
        provider: Optional[NarrationProvider],
        storage: ObjectStorage,
        min_chars: int = NARRATION_MIN_CHARS,
    ):
        self.provider = provider
        self.storage = storage
        self.min_chars = min_chars

    async def synthesize(
        self,
        text: str,
        voice_id: Optional[str],
        course_id: str,
        episode_number: int,
    ) -> StageResult[NarrationAsset]:
        if self.provider is None or not self.provider.is_available():
            return StageResult.fail(StageErrorKind.NARRATION, "no narration provider configured")

        provider_name = self.provider.name
        cleaned = clean_narration_text(text, self.provider.max_chars)
        if len(cleaned) < self.min_chars:
            return StageResult.fail(
                StageErrorKind.NARRATION,
                f"text too short to narrate ({len(cleaned)} chars)",
                provider_name,
            )

        try:
            audio = await self.provider.synthesize(cleaned, voice_id)
        except NarrationError as e:
            if e.skip_audio:
                logger.info("Narration provider asked to skip audio", extra={"provider": provider_name, "error": str(e)})
            return StageResult.fail(StageErrorKind.NARRATION, str(e), provider_name)
        except Exception as e:
            return StageResult.fail(StageErrorKind.NARRATION, f"unexpected error: {e}", provider_name)

        if not audio:
            return StageResult.fail(StageErrorKind.NARRATION, "provider returned zero bytes", provider_name)

        duration = estimate_duration_from_bytes(len(audio))
        key = audio_key(course_id, episode_number)
        try:
            url = await self.storage.put(AUDIO_BUCKET, key, audio, AUDIO_CONTENT_TYPE)
            return StageResult.ok(NarrationAsset(url=url, duration=duration, byte_count=len(audio)))
        except StorageError as e:
            logger.warning(
                "Audio upload failed; embedding narration inline",
                extra={"key": key, "error": str(e), "bytes": len(audio)},
            )
            return StageResult.ok(
                NarrationAsset(
                    url=to_data_uri(audio, AUDIO_CONTENT_TYPE),
                    duration=duration,
                    byte_count=len(audio),
                    inline=True,
                )
            )
