"""
End-to-end tests for CourseGenerationPipeline

Every collaborator is real except the network: no provider is configured,
storage and the repository live under tmp_path.
"""

import pytest

from app.config.providers import VideoStrategy
from app.core import PersistenceError
from app.models.course import CourseStatus, GenerationRequest, ReferenceImage, ScriptSegment
from app.services.infrastructure.storage import FileBasedCourseRepository, LocalObjectStorage
from app.services.pipeline.audio import NarrationAsset, NarrationSynthesizer
from app.services.pipeline.errors import StageErrorKind, StageResult
from app.services.pipeline.orchestrator import CourseGenerationPipeline, episode_description
from app.services.pipeline.photos import course_avatar_url
from app.services.pipeline.script_generation import ScriptGenerator
from app.services.pipeline.video import VideoOutcome, VideoSynthesizer, build_video_ladders

SAFETY_TEXT = "\n\n".join([
    "Workplace safety starts with awareness of the hazards around you every day.",
    "Always wear the protective equipment that your task and area require.",
    "Report spills, damaged equipment and near misses to your supervisor at once.",
    "Lift with your legs, keep loads close, and ask for help with heavy items.",
    "Know where the fire exits, extinguishers and first aid kits are located.",
    "Never bypass machine guards or lockout procedures, even for a quick fix.",
])


async def no_sleep(_seconds):
    return None


class RecordingNarration:
    """Stands in for NarrationSynthesizer with a fixed outcome per episode."""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.calls = []

    async def synthesize(self, text, voice_id, course_id, episode_number):
        self.calls.append((episode_number, voice_id))
        if episode_number in self.fail_on:
            return StageResult.fail(StageErrorKind.NARRATION, "quota exceeded", "fake")
        return StageResult.ok(NarrationAsset(url=f"https://cdn.example/{episode_number}.mp3", duration=42, byte_count=84000))


class RecordingVideo:
    def __init__(self, succeed_on=()):
        self.succeed_on = set(succeed_on)
        self.calls = []

    async def synthesize(self, course_id, episode_number, image_url=None, audio_url=None, script=None):
        self.calls.append((episode_number, image_url, audio_url))
        if episode_number in self.succeed_on:
            return StageResult.ok(VideoOutcome(
                url=f"https://cdn.example/{episode_number}.mp4",
                provider="sadtalker",
                strategy=VideoStrategy.LIP_SYNC,
            ))
        return StageResult.fail(StageErrorKind.VIDEO_PROVIDER, "all lip_sync providers failed (3 tried)")


class FailingRepository(FileBasedCourseRepository):
    async def _write_episode(self, batch, row):
        raise PersistenceError(f"Failed to save episode {row['episode_order']}")


def offline_pipeline(tmp_path, narration=None, video=None, repository=None):
    storage = LocalObjectStorage(tmp_path / "media", public_base_url="http://media")
    lip_sync, text_to_video = build_video_ladders()
    return CourseGenerationPipeline(
        script_generator=ScriptGenerator(providers=()),
        narration=narration or NarrationSynthesizer(None, storage),
        video=video or VideoSynthesizer(lip_sync, text_to_video, storage=storage, sleep=no_sleep),
        storage=storage,
        repository=repository or FileBasedCourseRepository(tmp_path / "courses"),
    )


class TestOfflineRun:
    @pytest.mark.asyncio
    async def test_safety_101_without_any_provider(self, tmp_path):
        events = []
        pipeline = offline_pipeline(tmp_path)
        request = GenerationRequest(title="Safety 101", source_text=SAFETY_TEXT)

        course = await pipeline.run(request, lambda stage, percent, message: events.append((stage, percent)))

        assert course.status is CourseStatus.READY
        assert len(course.episodes) == 5
        assert len(course.quiz_questions) == 3
        assert course.description == "This training covers essential concepts and best practices for your professional development."
        assert course.thumbnail_url == course_avatar_url("Safety 101")

        for episode in course.episodes:
            assert episode.audio_url is None
            assert episode.video_url is None
            assert episode.skip_video is True
            assert episode.duration >= 10
        assert course.is_degraded

        assert [len(episode.quiz_questions) for episode in course.episodes] == [1, 1, 1, 0, 0]

        percents = [percent for _, percent in events]
        assert percents == sorted(percents)
        assert events[-1] == ("complete", 100)

        stored = pipeline.repository.load_document(course.id)
        assert stored["course"]["status"] == "ready"
        assert len(stored["episodes"]) == 5
        assert len(stored["quiz_questions"]) == 3

    @pytest.mark.asyncio
    async def test_scenes_form_one_continuous_timeline(self, tmp_path):
        course = await offline_pipeline(tmp_path).run(GenerationRequest(title="Safety 101", source_text=SAFETY_TEXT))

        scenes = [scene for episode in course.episodes for scene in episode.scenes]
        assert scenes[0].start_time == 0
        for previous, current in zip(scenes, scenes[1:]):
            assert current.start_time == previous.end_time

    @pytest.mark.asyncio
    async def test_rerun_with_same_course_id_is_stable(self, tmp_path):
        pipeline = offline_pipeline(tmp_path)
        request = GenerationRequest(title="Safety 101", source_text=SAFETY_TEXT, course_id="course-fixed")

        first = await pipeline.run(request)
        second = await pipeline.run(request)

        assert [e.id for e in first.episodes] == [e.id for e in second.episodes]
        assert len(list((tmp_path / "courses").glob("*.json"))) == 1

    @pytest.mark.asyncio
    async def test_missing_text_and_document_uses_placeholder(self, tmp_path):
        course = await offline_pipeline(tmp_path).run(GenerationRequest(title="Empty"))
        # the placeholder paragraph is long enough for one offline segment
        assert len(course.episodes) == 1
        assert "Training content from uploaded document" in course.episodes[0].script

    @pytest.mark.asyncio
    async def test_unconfigured_extraction_falls_back_to_placeholder(self, tmp_path):
        request = GenerationRequest(title="Handbook", document_bytes=b"%PDF-1.7", document_name="handbook.pdf")
        course = await offline_pipeline(tmp_path).run(request)
        assert "handbook.pdf" in course.episodes[0].script


class TestMediaFallbacks:
    @pytest.mark.asyncio
    async def test_video_then_audio_then_nothing(self, tmp_path):
        narration = RecordingNarration(fail_on={3})
        video = RecordingVideo(succeed_on={1})
        pipeline = offline_pipeline(tmp_path, narration=narration, video=video)
        request = GenerationRequest(
            title="Safety 101",
            source_text=SAFETY_TEXT,
            voice_id="voice-7",
            reference_images=(ReferenceImage("a.jpg", b"a"), ReferenceImage("b.jpg", b"b")),
        )

        course = await pipeline.run(request)
        first, second, third = course.episodes[:3]

        assert first.video_url == "https://cdn.example/1.mp4"
        assert first.video_provider == "sadtalker"
        assert second.video_url == "https://cdn.example/2.mp3"
        assert second.duration == 42
        assert third.audio_url is None
        assert third.skip_video is True
        assert third.duration >= 10

        assert all(voice == "voice-7" for _, voice in narration.calls)
        images = [image for _, image, _ in video.calls]
        assert images[0].endswith("0-a.jpg")
        assert images[1].endswith("1-b.jpg")
        assert images[2] == images[0]
        assert course.thumbnail_url == images[0]

    @pytest.mark.asyncio
    async def test_request_description_wins(self, tmp_path):
        pipeline = offline_pipeline(tmp_path, narration=RecordingNarration(), video=RecordingVideo())
        course = await pipeline.run(GenerationRequest(title="T", description="  Custom  ", source_text=SAFETY_TEXT))
        assert course.description == "Custom"
        assert not course.is_degraded


class TestPersistence:
    @pytest.mark.asyncio
    async def test_persistence_failure_fails_the_run(self, tmp_path):
        pipeline = offline_pipeline(tmp_path, repository=FailingRepository(tmp_path / "courses"))
        events = []
        with pytest.raises(PersistenceError):
            await pipeline.run(
                GenerationRequest(title="Safety 101", source_text=SAFETY_TEXT),
                lambda stage, percent, message: events.append(stage),
            )
        assert "complete" not in events
        assert events[-1] == "persist"


def test_episode_description():
    assert episode_description(ScriptSegment("t", "script", ["One", " ", "Two"])) == "One. Two"
    assert episode_description(ScriptSegment("t", "x" * 300)) == "x" * 150
