"""
CourseGenerationUseCase - job lifecycle around one pipeline run.

Routes hand over a GenerationRequest; this class creates the job record,
schedules the run in the background, mirrors pipeline progress onto the
job, and records the final outcome. The pipeline itself knows nothing
about jobs.
"""

from dataclasses import replace
from typing import Any, Callable, Dict, Optional

import httpx
from fastapi import BackgroundTasks

from app.config import PipelineSettings
from app.core import (
    PersistenceError,
    clear_context,
    get_logger,
    new_id,
    set_course_id,
    set_job_id,
)
from app.models import Course, GenerationRequest, GenerationStartResponse, JobStatus, get_status_from_stage
from app.services.infrastructure.orchestration import JobManager, get_job_manager
from app.services.pipeline.orchestrator import CourseGenerationPipeline, create_pipeline

from .base import UseCase

logger = get_logger(__name__, component="course_generation")

PipelineFactory = Callable[[httpx.AsyncClient], CourseGenerationPipeline]


def course_summary(course: Course) -> Dict[str, Any]:
    """What the job record keeps about a finished course"""
    return {
        "course_id": course.id,
        "title": course.title,
        "status": course.status.value,
        "thumbnail_url": course.thumbnail_url,
        "episode_count": len(course.episodes),
        "quiz_count": len(course.quiz_questions),
        "total_duration": course.total_duration,
        "degraded": course.is_degraded,
    }


class CourseGenerationUseCase(UseCase[GenerationRequest, Course]):
    """Create a job, run the pipeline in the background, record the outcome."""

    def __init__(
        self,
        job_manager: Optional[JobManager] = None,
        pipeline_factory: Optional[PipelineFactory] = None,
        settings: Optional[PipelineSettings] = None,
    ):
        self.job_manager = job_manager or get_job_manager()
        self.settings = settings or PipelineSettings.from_env()
        self.pipeline_factory = pipeline_factory or (
            lambda client: create_pipeline(http_client=client, settings=self.settings)
        )

    def _progress_callback(self, job_id: str) -> Callable[[str, int, str], None]:
        def _update(stage: str, percent: int, message: str) -> None:
            status = get_status_from_stage(stage)
            # COMPLETED is only written once the outcome is recorded
            if status is JobStatus.COMPLETED:
                status = JobStatus.SAVING
            self.job_manager.update_job(job_id, status, float(percent), message, stage=stage)

        return _update

    async def execute(self, request: GenerationRequest, job_id: Optional[str] = None) -> Course:
        """Run the pipeline once. Raises PersistenceError like the pipeline."""
        async with httpx.AsyncClient(
            timeout=self.settings.http_timeout_seconds,
            follow_redirects=True,
        ) as client:
            pipeline = self.pipeline_factory(client)
            return await pipeline.run(
                request,
                on_progress=self._progress_callback(job_id) if job_id else None,
            )

    async def run_job(self, job_id: str, request: GenerationRequest) -> None:
        """Background body: never raises, always leaves the job terminal."""
        set_job_id(job_id)
        set_course_id(request.course_id)
        try:
            course = await self.execute(request, job_id)
            self.job_manager.update_job(
                job_id,
                JobStatus.COMPLETED,
                100.0,
                "Course generated with degraded media" if course.is_degraded else "Course generated successfully!",
                stage="complete",
                result=course_summary(course),
            )
        except PersistenceError as e:
            logger.error("Course generation failed", extra={"error": str(e)})
            self.job_manager.update_job(job_id, JobStatus.FAILED, message=str(e), error=str(e))
        except Exception as e:  # noqa: BLE001
            logger.exception("Unexpected error during course generation")
            self.job_manager.update_job(
                job_id, JobStatus.FAILED, message=f"Error: {e}", error=str(e)
            )
        finally:
            clear_context()

    def start_generation(
        self,
        request: GenerationRequest,
        background_tasks: BackgroundTasks,
    ) -> GenerationStartResponse:
        """Register the job, schedule the run and return immediately."""
        course_id = request.course_id or new_id()
        if request.course_id != course_id:
            request = replace(request, course_id=course_id)

        job_id = new_id()
        self.job_manager.create_job(job_id, course_id=course_id)
        background_tasks.add_task(self.run_job, job_id, request)

        logger.info(
            "Course generation queued",
            extra={"job_id": job_id, "course_id": course_id, "title": request.title},
        )
        return GenerationStartResponse(
            job_id=job_id,
            course_id=course_id,
            status=JobStatus.PENDING.value,
            progress=0.0,
            message="Course generation started",
        )
