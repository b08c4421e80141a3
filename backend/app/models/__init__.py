"""
Pydantic models for API request/response schemas

Domain objects used inside the pipeline live in `course.py` as plain
dataclasses; the models here only describe what crosses the HTTP boundary.
"""

from pydantic import BaseModel
from typing import Any, Dict, List, Optional

from .course import (
    AsyncJob,
    Course,
    CourseStatus,
    Episode,
    EpisodeStatus,
    GeneratedScript,
    GenerationProgressEvent,
    GenerationRequest,
    JobState,
    QuizQuestion,
    ReferenceImage,
    Scene,
    ScriptSegment,
)
from .status import JobStatus, get_status_from_stage


# === Request Models ===

class TextGenerationRequest(BaseModel):
    """JSON variant of the generate endpoint for callers that already have text"""
    title: str
    source_text: str
    description: str = ""
    voice_id: Optional[str] = None
    organization_id: Optional[str] = None


# === Response Models ===

class GenerationStartResponse(BaseModel):
    """Returned immediately when a generation job is queued"""
    job_id: str
    course_id: str
    status: str
    progress: float
    message: str


class JobResponse(BaseModel):
    """Response with job status and results"""
    job_id: str
    status: str
    progress: float
    message: str
    stage: Optional[str] = None
    course_id: Optional[str] = None
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class JobListResponse(BaseModel):
    jobs: List[JobResponse]


class HealthResponse(BaseModel):
    """Service health plus which providers are configured"""
    status: str
    version: str
    providers: Dict[str, bool]


__all__ = [
    # Domain
    "AsyncJob",
    "Course",
    "CourseStatus",
    "Episode",
    "EpisodeStatus",
    "GeneratedScript",
    "GenerationProgressEvent",
    "GenerationRequest",
    "JobState",
    "QuizQuestion",
    "ReferenceImage",
    "Scene",
    "ScriptSegment",
    "JobStatus",
    "get_status_from_stage",
    # API
    "TextGenerationRequest",
    "GenerationStartResponse",
    "JobResponse",
    "JobListResponse",
    "HealthResponse",
]
