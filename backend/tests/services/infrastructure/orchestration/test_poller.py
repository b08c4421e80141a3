"""
Tests for the shared submit-then-poll loop
"""

import pytest

from app.models.course import AsyncJob, JobState
from app.services.infrastructure.orchestration.poller import StatusSnapshot, poll, poll_job


def adapter(raw):
    return StatusSnapshot(
        state=JobState(raw["state"]),
        output_url=raw.get("url"),
        error=raw.get("error"),
    )


class RecordingSleep:
    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


def scripted_fetch(*payloads):
    remaining = list(payloads)
    seen = []

    async def fetch(job_id):
        seen.append(job_id)
        return remaining.pop(0) if len(remaining) > 1 else remaining[0]

    fetch.seen = seen
    return fetch


@pytest.mark.asyncio
async def test_pending_then_success():
    sleep = RecordingSleep()
    fetch = scripted_fetch(
        {"state": "pending"},
        {"state": "pending"},
        {"state": "succeeded", "url": "https://cdn.example/video.mp4"},
    )
    job = await poll_job(AsyncJob("svd", "pred-1"), fetch, adapter, interval_seconds=2.0, sleep=sleep)

    assert job.status is JobState.SUCCEEDED
    assert job.output_url == "https://cdn.example/video.mp4"
    assert job.attempts == 3
    assert sleep.calls == [2.0, 2.0, 2.0]
    assert fetch.seen == ["pred-1"] * 3


@pytest.mark.asyncio
async def test_failure_carries_provider_error():
    fetch = scripted_fetch({"state": "failed", "error": "NSFW content detected"})
    job = await poll_job(AsyncJob("svd", "pred-1"), fetch, adapter, sleep=RecordingSleep())
    assert job.status is JobState.FAILED
    assert job.error == "NSFW content detected"
    assert job.attempts == 1


@pytest.mark.asyncio
async def test_canceled_is_terminal():
    fetch = scripted_fetch({"state": "canceled"})
    job = await poll_job(AsyncJob("kling", "req-1"), fetch, adapter, sleep=RecordingSleep())
    assert job.status is JobState.CANCELED


@pytest.mark.asyncio
async def test_fetch_exception_fails_the_job():
    async def fetch(job_id):
        raise ConnectionError("reset by peer")

    job = await poll_job(AsyncJob("did_audio", "tlk-1"), fetch, adapter, sleep=RecordingSleep())
    assert job.status is JobState.FAILED
    assert "reset by peer" in job.error
    assert job.attempts == 1


@pytest.mark.asyncio
async def test_success_without_output_is_failure():
    fetch = scripted_fetch({"state": "succeeded"})
    job = await poll_job(AsyncJob("svd", "pred-1"), fetch, adapter, sleep=RecordingSleep())
    assert job.status is JobState.FAILED
    assert job.output_url is None


@pytest.mark.asyncio
async def test_never_terminal_times_out_after_max_attempts():
    sleep = RecordingSleep()
    fetch = scripted_fetch({"state": "pending"})
    job = await poll_job(
        AsyncJob("svd", "pred-1"), fetch, adapter,
        interval_seconds=0.5, max_attempts=4, sleep=sleep,
    )
    assert job.status is JobState.TIMEOUT
    assert job.attempts == 4
    assert len(fetch.seen) == 4
    assert sleep.calls == [0.5] * 4


@pytest.mark.asyncio
async def test_poll_returns_url_or_none():
    ok = await poll(
        "pred-1",
        scripted_fetch({"state": "succeeded", "url": "https://cdn.example/a.mp4"}),
        adapter,
        sleep=RecordingSleep(),
    )
    assert ok == "https://cdn.example/a.mp4"

    timed_out = await poll(
        "pred-2",
        scripted_fetch({"state": "pending"}),
        adapter,
        max_attempts=2,
        sleep=RecordingSleep(),
    )
    assert timed_out is None
