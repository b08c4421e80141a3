"""
Async Job Poller

One submit-then-poll loop shared by every video provider. A provider only
supplies:

    fetch_status(job_id) -> raw status payload (provider specific dict)
    adapter(raw)         -> StatusSnapshot with a normalized JobState

The poller sleeps a fixed interval between polls and stops at the first
terminal state or after `max_attempts` polls, whichever comes first. A
timeout is reported as JobState.TIMEOUT and never raises.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional

from app.core import get_logger
from app.models.course import AsyncJob, JobState

logger = get_logger(__name__, component="poller")

DEFAULT_INTERVAL_SECONDS = 2.0
DEFAULT_MAX_ATTEMPTS = 120


@dataclass(frozen=True)
class StatusSnapshot:
    """A provider status payload mapped onto the normalized vocabulary"""
    state: JobState
    output_url: Optional[str] = None
    error: Optional[str] = None


StatusFetcher = Callable[[str], Awaitable[Dict[str, Any]]]
StatusAdapter = Callable[[Dict[str, Any]], StatusSnapshot]
Sleep = Callable[[float], Awaitable[Any]]


async def poll_job(
    job: AsyncJob,
    fetch_status: StatusFetcher,
    adapter: StatusAdapter,
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    sleep: Sleep = asyncio.sleep,
) -> AsyncJob:
    """Drive `job` to a terminal state and return it.

    A fetch that raises marks the job failed; there is no retry inside a
    single provider attempt.
    """
    started = datetime.now()

    while job.attempts < max_attempts:
        await sleep(interval_seconds)
        job.attempts += 1

        try:
            raw = await fetch_status(job.job_id)
            snapshot = adapter(raw)
        except Exception as e:
            job.status = JobState.FAILED
            job.error = f"status check failed: {e}"
            break

        if snapshot.state is JobState.SUCCEEDED and not snapshot.output_url:
            job.status = JobState.FAILED
            job.error = "provider reported success without an output"
            break

        if snapshot.state.is_terminal:
            job.status = snapshot.state
            job.output_url = snapshot.output_url
            job.error = snapshot.error
            break
    else:
        job.status = JobState.TIMEOUT
        job.error = f"no terminal state after {max_attempts} polls"

    logger.info(
        "Provider job finished",
        extra={
            "provider": job.provider_id,
            "provider_job_id": job.job_id,
            "state": job.status.value,
            "attempts": job.attempts,
            "elapsed_seconds": round((datetime.now() - started).total_seconds(), 2),
            "error": job.error,
        },
    )
    return job


async def poll(
    job_id: str,
    fetch_status: StatusFetcher,
    adapter: StatusAdapter,
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    sleep: Sleep = asyncio.sleep,
    provider_id: str = "unknown",
) -> Optional[str]:
    """Poll until done and return the output reference, or None on any
    non-success outcome (failed, canceled, timeout)."""
    job = await poll_job(
        AsyncJob(provider_id=provider_id, job_id=job_id),
        fetch_status,
        adapter,
        interval_seconds=interval_seconds,
        max_attempts=max_attempts,
        sleep=sleep,
    )
    return job.output_url if job.status is JobState.SUCCEEDED else None
