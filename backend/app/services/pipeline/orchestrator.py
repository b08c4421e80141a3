"""
Course Generation Pipeline

Fixed stage sequence for one request:

    extract -> photos -> script -> audio -> video -> persist -> complete

Every stage before persist has a degraded output, so its failure is logged
and the run moves on. Only persistence can fail the run; it raises
PersistenceError and nothing else escapes.

All collaborators are passed in, so tests can swap any of them for fakes.
"""

from typing import List, Optional, TypeVar

import httpx

from app.config.pipeline import (
    EPISODE_DESCRIPTION_CHARS,
    STAGE_AUDIO,
    STAGE_COMPLETE,
    STAGE_EXTRACT,
    STAGE_PERSIST,
    STAGE_PHOTOS,
    STAGE_SCRIPT,
    STAGE_VIDEO,
    PipelineSettings,
)
from app.core import LogTimer, get_logger, new_id, stable_id
from app.models.course import (
    Course,
    CourseStatus,
    Episode,
    GeneratedScript,
    GenerationRequest,
    ScriptSegment,
)
from app.services.infrastructure.storage import (
    CourseRepository,
    ObjectStorage,
    create_storage_and_repository,
    distribute_quizzes,
)
from app.services.llm import build_content_providers

from .audio import NarrationAsset, NarrationSynthesizer, create_narration_provider
from .errors import PersistenceError, StageResult
from .extraction import ExtractionClient, placeholder_text
from .photos import course_avatar_url, upload_reference_images
from .progress import ProgressCallback, ProgressReporter
from .scenes import segment_scenes
from .script_generation import ScriptGenerator
from .timing import estimate_duration
from .video import VideoSynthesizer, build_video_ladders

logger = get_logger(__name__, component="orchestrator")

T = TypeVar("T")


def episode_description(segment: ScriptSegment) -> str:
    points = [point.strip() for point in segment.key_points if point and point.strip()]
    if points:
        return ". ".join(points)
    return segment.script[:EPISODE_DESCRIPTION_CHARS]


class CourseGenerationPipeline:
    def __init__(
        self,
        script_generator: ScriptGenerator,
        narration: NarrationSynthesizer,
        video: VideoSynthesizer,
        storage: ObjectStorage,
        repository: CourseRepository,
        extraction: Optional[ExtractionClient] = None,
        settings: Optional[PipelineSettings] = None,
    ):
        self.script_generator = script_generator
        self.narration = narration
        self.video = video
        self.storage = storage
        self.repository = repository
        self.settings = settings or PipelineSettings()
        self.extraction = extraction or ExtractionClient(self.settings.extraction_service_url)

    @staticmethod
    def _recover(result: StageResult[T], fallback: T, stage: str) -> T:
        """Value of a stage result, or `fallback` after logging the error."""
        if result.is_ok:
            return result.value
        if result.error.is_fatal:
            raise PersistenceError(str(result.error))
        logger.warning(
            "Stage degraded",
            extra={
                "stage": stage,
                "kind": result.error.kind.value,
                "provider": result.error.provider,
                "error": result.error.message,
            },
        )
        return fallback

    async def _extract(self, request: GenerationRequest, progress: ProgressReporter) -> str:
        progress.report(STAGE_EXTRACT, "Reading source material...")
        if request.source_text and request.source_text.strip():
            progress.report(STAGE_EXTRACT, "Using provided text", 1.0)
            return request.source_text

        fallback = placeholder_text(request.document_name)
        if not request.document_bytes:
            logger.warning("No source text or document supplied; using placeholder text")
            progress.report(STAGE_EXTRACT, "No document supplied, using placeholder text", 1.0)
            return fallback

        result = await self.extraction.extract(
            request.document_bytes,
            request.document_name,
            request.document_content_type,
        )
        document = self._recover(result, None, STAGE_EXTRACT)
        if document is None:
            progress.report(STAGE_EXTRACT, "Extraction unavailable, using placeholder text", 1.0)
            return fallback

        progress.report(STAGE_EXTRACT, f"Extracted {document.page_count} pages", 1.0)
        return document.text

    async def _narrate(
        self,
        course: Course,
        script: GeneratedScript,
        voice_id: Optional[str],
        progress: ProgressReporter,
    ) -> List[Optional[NarrationAsset]]:
        total = len(script.segments)
        progress.report(STAGE_AUDIO, f"Synthesizing narration for {total} episodes...")
        assets: List[Optional[NarrationAsset]] = []
        for index, segment in enumerate(script.segments):
            result = await self.narration.synthesize(segment.script, voice_id, course.id, index + 1)
            assets.append(self._recover(result, None, STAGE_AUDIO))
            progress.step(STAGE_AUDIO, index + 1, total, f"Narration {index + 1}/{total} done")
        return assets

    def _assemble_episodes(
        self,
        course: Course,
        script: GeneratedScript,
        assets: List[Optional[NarrationAsset]],
        image_urls: List[str],
    ) -> None:
        """Build episodes and their scenes on one continuous timeline."""
        cursor = 0
        quiz_sets = distribute_quizzes(script.quiz_questions, len(script.segments))
        for index, (segment, asset) in enumerate(zip(script.segments, assets)):
            number = index + 1
            episode_id = stable_id(course.id, "episode", number)
            scenes = segment_scenes(segment.script, image_urls, episode_id, cursor)
            if scenes:
                cursor = scenes[-1].end_time

            course.episodes.append(
                Episode(
                    id=episode_id,
                    order=index,
                    title=segment.title or f"Episode {number}",
                    description=episode_description(segment),
                    script=segment.script,
                    duration=asset.duration if asset else estimate_duration(segment.script),
                    audio_url=asset.url if asset else None,
                    scenes=scenes,
                    quiz_questions=quiz_sets[index],
                )
            )

    async def _render_videos(self, course: Course, image_urls: List[str], progress: ProgressReporter) -> None:
        total = len(course.episodes)
        progress.report(STAGE_VIDEO, f"Generating video for {total} episodes...")
        for index, episode in enumerate(course.episodes):
            image_url = image_urls[index % len(image_urls)] if image_urls else None
            result = await self.video.synthesize(
                course.id,
                index + 1,
                image_url=image_url,
                audio_url=episode.audio_url,
                script=episode.script,
            )
            outcome = self._recover(result, None, STAGE_VIDEO)
            if outcome is not None:
                episode.video_url = outcome.url
                episode.video_provider = outcome.provider
            elif episode.audio_url:
                episode.video_url = episode.audio_url
            else:
                episode.skip_video = True
            progress.step(STAGE_VIDEO, index + 1, total, f"Video {index + 1}/{total} done")

    async def _persist(self, course: Course, progress: ProgressReporter) -> None:
        progress.report(STAGE_PERSIST, "Saving course...")
        course.status = CourseStatus.READY
        try:
            await self.repository.save_course(course)
        except PersistenceError:
            course.status = CourseStatus.FAILED
            logger.error("Course could not be saved", extra={"course_id": course.id}, exc_info=True)
            raise
        except Exception as e:
            course.status = CourseStatus.FAILED
            logger.error("Course could not be saved", extra={"course_id": course.id}, exc_info=True)
            raise PersistenceError(f"Failed to save course {course.id}: {e}") from e

    async def run(
        self,
        request: GenerationRequest,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Course:
        """Generate, persist and return a course.

        Raises:
            PersistenceError: the finished course could not be saved
        """
        progress = ProgressReporter(on_progress)
        course = Course(
            id=request.course_id or new_id(),
            title=request.title,
            organization_id=request.organization_id,
        )

        with LogTimer(logger, f"course generation '{request.title}'"):
            text = await self._extract(request, progress)

            progress.report(STAGE_PHOTOS, "Uploading photos...")
            image_urls = await upload_reference_images(
                self.storage, course.id, request.reference_images, request.title
            )
            progress.report(STAGE_PHOTOS, f"{len(image_urls)} image references ready", 1.0)

            progress.report(STAGE_SCRIPT, "Writing course script...")
            script = await self.script_generator.generate(text, request.title)
            progress.report(
                STAGE_SCRIPT,
                f"Script ready: {len(script.segments)} episodes, {len(script.quiz_questions)} quiz questions",
                1.0,
            )

            course.description = (
                request.description.strip()
                or script.summary.strip()
                or f"Training course: {request.title}"
            )
            course.thumbnail_url = image_urls[0] if request.reference_images else course_avatar_url(request.title)
            course.quiz_questions = list(script.quiz_questions)

            assets = await self._narrate(course, script, request.voice_id, progress)
            self._assemble_episodes(course, script, assets, image_urls)
            await self._render_videos(course, image_urls, progress)
            await self._persist(course, progress)

        progress.report(STAGE_COMPLETE, "Course ready", 1.0)
        logger.info(
            "Course generated",
            extra={
                "course_id": course.id,
                "episodes": len(course.episodes),
                "quiz_questions": len(course.quiz_questions),
                "total_duration": course.total_duration,
                "degraded": course.is_degraded,
                "script_source": script.source,
            },
        )
        return course


def create_pipeline(
    http_client: Optional[httpx.AsyncClient] = None,
    settings: Optional[PipelineSettings] = None,
) -> CourseGenerationPipeline:
    """Wire a pipeline from the environment."""
    settings = settings or PipelineSettings.from_env()
    storage, repository = create_storage_and_repository()
    lip_sync, text_to_video = build_video_ladders(http_client, settings.http_timeout_seconds)
    return CourseGenerationPipeline(
        script_generator=ScriptGenerator(build_content_providers(http_client=http_client)),
        narration=NarrationSynthesizer(create_narration_provider(http_client), storage),
        video=VideoSynthesizer(
            lip_sync,
            text_to_video,
            storage=storage,
            http_client=http_client,
            poll_interval_seconds=settings.poll_interval_seconds,
            poll_max_attempts=settings.poll_max_attempts,
        ),
        storage=storage,
        repository=repository,
        extraction=ExtractionClient(
            settings.extraction_service_url,
            http_client=http_client,
            timeout=settings.http_timeout_seconds,
        ),
        settings=settings,
    )
