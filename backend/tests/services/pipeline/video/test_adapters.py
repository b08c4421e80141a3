"""
Tests for vendor status vocabularies and request shapes
"""

import json

import httpx
import pytest

from app.config.providers import LIP_SYNC_LADDER, TEXT_TO_VIDEO_LADDER, VideoProviderSpec
from app.models.course import JobState
from app.services.pipeline.video import (
    DIDVideoProvider,
    FalVideoProvider,
    ReplicateVideoProvider,
    VideoJobInput,
    VideoProviderError,
    adapt_did_status,
    adapt_fal_status,
    adapt_replicate_status,
    build_video_ladders,
    final_output_url,
)

SPECS = {spec.name: spec for spec in LIP_SYNC_LADDER + TEXT_TO_VIDEO_LADDER}


class TestFinalOutputUrl:
    def test_shapes(self):
        assert final_output_url("https://x/a.mp4") == "https://x/a.mp4"
        assert final_output_url(["https://x/frame.png", "https://x/a.mp4"]) == "https://x/a.mp4"
        assert final_output_url({"video": {"url": "https://x/b.mp4"}}) == "https://x/b.mp4"
        assert final_output_url({"video": None}) is None
        assert final_output_url("") is None
        assert final_output_url(None) is None

    def test_list_takes_the_last_usable_url(self):
        assert final_output_url(["https://x/draft.mp4", "https://x/final.mp4", ""]) == "https://x/final.mp4"


class TestReplicateStatus:
    @pytest.mark.parametrize("status,state", [
        ("starting", JobState.PENDING),
        ("processing", JobState.PENDING),
        ("succeeded", JobState.SUCCEEDED),
        ("failed", JobState.FAILED),
        ("canceled", JobState.CANCELED),
        ("something-new", JobState.PENDING),
    ])
    def test_states(self, status, state):
        assert adapt_replicate_status({"status": status, "output": "https://x/a.mp4"}).state is state

    def test_output_only_on_success(self):
        assert adapt_replicate_status({"status": "processing", "output": "https://x/a.mp4"}).output_url is None
        snapshot = adapt_replicate_status({"status": "failed", "error": "CUDA out of memory"})
        assert snapshot.error == "CUDA out of memory"


class TestFalStatus:
    def test_completed_with_result(self):
        snapshot = adapt_fal_status({"status": "COMPLETED", "result": {"video": {"url": "https://fal/v.mp4"}}})
        assert snapshot.state is JobState.SUCCEEDED
        assert snapshot.output_url == "https://fal/v.mp4"

    def test_completed_with_error_result_is_failure(self):
        snapshot = adapt_fal_status({"status": "COMPLETED", "result": {"error": "face not detected"}})
        assert snapshot.state is JobState.FAILED
        assert snapshot.error == "face not detected"

    def test_queue_states(self):
        assert adapt_fal_status({"status": "IN_QUEUE"}).state is JobState.PENDING
        assert adapt_fal_status({"status": "in_progress"}).state is JobState.PENDING
        assert adapt_fal_status({"status": "ERROR", "error": "boom"}).state is JobState.FAILED


class TestDidStatus:
    def test_done(self):
        snapshot = adapt_did_status({"status": "done", "result_url": "https://d-id/talk.mp4"})
        assert snapshot.state is JobState.SUCCEEDED
        assert snapshot.output_url == "https://d-id/talk.mp4"

    def test_error_object(self):
        snapshot = adapt_did_status({"status": "error", "error": {"kind": "FaceError", "description": "no face"}})
        assert snapshot.state is JobState.FAILED
        assert snapshot.error == "no face"

    def test_rejected(self):
        assert adapt_did_status({"status": "rejected"}).state is JobState.FAILED


class TestRequestShapes:
    @pytest.mark.asyncio
    async def test_replicate_model_and_version_endpoints(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(201, json={"id": "pred-1", "status": "starting"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            by_model = ReplicateVideoProvider(SPECS["svd"], api_key="r8", http_client=client)
            await by_model.submit(VideoJobInput(image_url="https://img/p.jpg"))

            versioned_spec = VideoProviderSpec(
                name="sadtalker", vendor="replicate", model="cjwbw/sadtalker:abc123",
                needs_image=True, needs_audio=True,
            )
            by_version = ReplicateVideoProvider(versioned_spec, api_key="r8", http_client=client)
            await by_version.submit(VideoJobInput(image_url="https://img/p.jpg", audio_url="https://a/1.mp3"))

        assert requests[0].url.path == "/v1/models/stability-ai/stable-video-diffusion/predictions"
        assert json.loads(requests[0].content)["input"]["input_image"] == "https://img/p.jpg"
        assert requests[0].headers["authorization"] == "Bearer r8"

        body = json.loads(requests[1].content)
        assert requests[1].url.path == "/v1/predictions"
        assert body["version"] == "abc123"
        assert body["input"]["driven_audio"] == "https://a/1.mp3"

    @pytest.mark.asyncio
    async def test_replicate_text_prompt_is_capped(self):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(201, json={"id": "pred-2"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            provider = ReplicateVideoProvider(SPECS["text_to_video"], api_key="r8", http_client=client)
            await provider.submit(VideoJobInput(script="word " * 400))

        assert len(bodies[0]["input"]["prompt"]) == 500

    @pytest.mark.asyncio
    async def test_rejected_submission_raises(self):
        async with httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(422, json={"detail": "bad input"}))
        ) as client:
            provider = ReplicateVideoProvider(SPECS["svd"], api_key="r8", http_client=client)
            with pytest.raises(VideoProviderError, match="HTTP 422"):
                await provider.submit(VideoJobInput(image_url="https://img/p.jpg"))

    @pytest.mark.asyncio
    async def test_fal_fetches_result_once_completed(self):
        def handler(request):
            if request.method == "POST":
                return httpx.Response(200, json={
                    "request_id": "req-1",
                    "status_url": "https://queue.fal.run/m/requests/req-1/status",
                    "response_url": "https://queue.fal.run/m/requests/req-1",
                })
            if request.url.path.endswith("/status"):
                return httpx.Response(200, json={"status": "COMPLETED"})
            return httpx.Response(200, json={"video": {"url": "https://fal/out.mp4"}})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            provider = FalVideoProvider(SPECS["kling"], api_key="fal-key", http_client=client)
            request_id = await provider.submit(VideoJobInput(image_url="https://img/p.jpg"))
            raw = await provider.get_status(request_id)

        assert provider.adapt(raw).output_url == "https://fal/out.mp4"

    def test_fal_kling_default_prompt(self):
        provider = FalVideoProvider(SPECS["kling"], api_key="fal-key")
        body = provider.build_input(VideoJobInput(image_url="https://img/p.jpg"))
        assert body["prompt"]
        assert body["image_url"] == "https://img/p.jpg"

    def test_did_inputs(self):
        audio = DIDVideoProvider(SPECS["did_audio"], api_key="did").build_input(
            VideoJobInput(image_url="https://img/p.jpg", audio_url="https://a/1.mp3")
        )
        assert audio["script"] == {"type": "audio", "audio_url": "https://a/1.mp3"}

        text = DIDVideoProvider(SPECS["did_avatar"], api_key="did").build_input(
            VideoJobInput(image_url="https://img/p.jpg", script="x" * 1000)
        )
        assert text["script"]["type"] == "text"
        assert len(text["script"]["input"]) == 300


def test_ladders_keep_rung_order_and_are_unconfigured_by_default():
    lip_sync, text_to_video = build_video_ladders()
    assert [p.name for p in lip_sync] == ["sadtalker", "sync_lipsync", "did_audio"]
    assert [p.name for p in text_to_video] == ["svd", "text_to_video", "kling", "did_avatar"]
    assert not any(p.is_available() for p in lip_sync + text_to_video)
