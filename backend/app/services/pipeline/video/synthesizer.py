"""
Video Synthesizer

Picks a strategy per episode and walks its provider ladder until one rung
produces a real output:

    lip_sync       durable audio + image -> talking head
    text_to_video  image and/or script   -> short generated clip

Each rung is submit -> shared poller -> optional re-host. A rung that is
unconfigured, lacks inputs, is rejected, fails, or times out is logged and
the next rung is tried. The two ladders never mix.
"""

import asyncio
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import httpx

from app.config.providers import VideoStrategy
from app.core import get_logger
from app.models.course import AsyncJob, JobState
from app.services.infrastructure.orchestration.poller import (
    DEFAULT_INTERVAL_SECONDS,
    DEFAULT_MAX_ATTEMPTS,
    Sleep,
    poll_job,
)
from app.services.infrastructure.storage import (
    VIDEOS_BUCKET,
    ObjectStorage,
    StorageError,
    is_inline_reference,
    video_key,
)

from ..errors import StageError, StageErrorKind, StageResult
from .base import VideoJobInput, VideoProvider, VideoProviderError

logger = get_logger(__name__, component="video_synthesizer")

VIDEO_CONTENT_TYPE = "video/mp4"


@dataclass
class VideoOutcome:
    url: str
    provider: str
    strategy: VideoStrategy
    # rung failures seen before the winning provider
    errors: List[StageError] = field(default_factory=list)
    rehosted: bool = False


def choose_strategy(image_url: Optional[str], audio_url: Optional[str]) -> VideoStrategy:
    if image_url and audio_url and not is_inline_reference(audio_url):
        return VideoStrategy.LIP_SYNC
    return VideoStrategy.TEXT_TO_VIDEO


class VideoSynthesizer:
    def __init__(
        self,
        lip_sync: Sequence[VideoProvider],
        text_to_video: Sequence[VideoProvider],
        storage: Optional[ObjectStorage] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        poll_interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        poll_max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        download_timeout: float = 60.0,
        sleep: Sleep = asyncio.sleep,
    ):
        self.ladders = {
            VideoStrategy.LIP_SYNC: list(lip_sync),
            VideoStrategy.TEXT_TO_VIDEO: list(text_to_video),
        }
        self.storage = storage
        self.http_client = http_client
        self.poll_interval_seconds = poll_interval_seconds
        self.poll_max_attempts = poll_max_attempts
        self.download_timeout = download_timeout
        self.sleep = sleep

    choose_strategy = staticmethod(choose_strategy)

    async def run_rung(self, provider: VideoProvider, job_input: VideoJobInput) -> StageResult[str]:
        """One provider attempt. Returns the provider's output URL."""
        if not provider.is_available():
            return StageResult.fail(StageErrorKind.VIDEO_PROVIDER, "not configured", provider.name)

        missing = provider.missing_inputs(job_input)
        if missing:
            return StageResult.fail(
                StageErrorKind.VIDEO_PROVIDER, f"missing inputs: {', '.join(missing)}", provider.name
            )

        try:
            job_id = await provider.submit(job_input)
        except VideoProviderError as e:
            return StageResult.fail(StageErrorKind.VIDEO_PROVIDER, str(e), provider.name)
        except Exception as e:
            logger.warning(
                "Unexpected error submitting video job",
                extra={"provider": provider.name, "error": str(e)},
                exc_info=True,
            )
            return StageResult.fail(StageErrorKind.VIDEO_PROVIDER, str(e) or type(e).__name__, provider.name)

        job = await poll_job(
            AsyncJob(provider_id=provider.name, job_id=job_id),
            provider.get_status,
            provider.adapt,
            interval_seconds=self.poll_interval_seconds,
            max_attempts=self.poll_max_attempts,
            sleep=self.sleep,
        )

        if job.status is JobState.SUCCEEDED and job.output_url:
            return StageResult.ok(job.output_url)
        if job.status is JobState.TIMEOUT:
            return StageResult.fail(StageErrorKind.POLL_TIMEOUT, job.error or "timed out", provider.name)
        return StageResult.fail(
            StageErrorKind.VIDEO_PROVIDER,
            job.error or f"job ended {job.status.value}",
            provider.name,
        )

    async def rehost(self, url: str, course_id: str, episode_number: int) -> Optional[str]:
        """Copy a provider output into durable storage; None when that fails."""
        if self.storage is None:
            return None
        try:
            if self.http_client is not None:
                response = await self.http_client.get(url, timeout=self.download_timeout)
            else:
                async with httpx.AsyncClient(timeout=self.download_timeout, follow_redirects=True) as client:
                    response = await client.get(url)
            response.raise_for_status()
            return await self.storage.put(
                VIDEOS_BUCKET,
                video_key(course_id, episode_number),
                response.content,
                VIDEO_CONTENT_TYPE,
            )
        except (httpx.HTTPError, StorageError) as e:
            logger.warning(
                "Video re-host failed, keeping provider URL",
                extra={"episode_number": episode_number, "error": str(e)},
            )
            return None

    async def synthesize(
        self,
        course_id: str,
        episode_number: int,
        image_url: Optional[str] = None,
        audio_url: Optional[str] = None,
        script: Optional[str] = None,
    ) -> StageResult[VideoOutcome]:
        """Walk the selected ladder; fail only when every rung failed."""
        strategy = choose_strategy(image_url, audio_url)
        # inline audio never reaches a provider
        job_input = VideoJobInput(
            image_url=image_url,
            audio_url=None if is_inline_reference(audio_url) else audio_url,
            script=script,
        )
        errors: List[StageError] = []

        for provider in self.ladders[strategy]:
            result = await self.run_rung(provider, job_input)
            if not result.is_ok:
                errors.append(result.error)
                logger.info(
                    "Video provider rung failed",
                    extra={
                        "episode_number": episode_number,
                        "strategy": strategy.value,
                        "provider": provider.name,
                        "kind": result.error.kind.value,
                        "error": result.error.message,
                    },
                )
                continue

            stored_url = await self.rehost(result.value, course_id, episode_number)
            logger.info(
                "Episode video generated",
                extra={
                    "episode_number": episode_number,
                    "strategy": strategy.value,
                    "provider": provider.name,
                    "rehosted": stored_url is not None,
                },
            )
            return StageResult.ok(
                VideoOutcome(
                    url=stored_url or result.value,
                    provider=provider.name,
                    strategy=strategy,
                    errors=errors,
                    rehosted=stored_url is not None,
                )
            )

        return StageResult.fail(
            StageErrorKind.VIDEO_PROVIDER,
            f"all {strategy.value} providers failed ({len(errors)} tried)",
        )
