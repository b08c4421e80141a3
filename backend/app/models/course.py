"""
Course domain model

In-memory graph the pipeline builds up stage by stage:

    Course
      +-- Episode (one per ScriptSegment, same order)
      |     +-- Scene (timed slice of the episode script)
      |     +-- QuizQuestion (even share of the course quiz list)
      +-- QuizQuestion (aggregate list)

Only the orchestrator mutates these objects; once handed to the repository
nothing else holds a reference.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class CourseStatus(str, Enum):
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"


class EpisodeStatus(str, Enum):
    READY = "ready"
    DEGRADED = "degraded"


class JobState(str, Enum):
    """Normalized state of a submitted provider job"""
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"
    TIMEOUT = "timeout"

    @property
    def is_terminal(self) -> bool:
        return self is not JobState.PENDING


@dataclass(frozen=True)
class ReferenceImage:
    """A photo supplied with the request (usually a presenter portrait)"""
    filename: str
    content: bytes
    content_type: str = "image/jpeg"


@dataclass(frozen=True)
class GenerationRequest:
    """Everything one pipeline run needs. Never mutated after construction.

    Either `source_text` or `document_bytes` should be set; when both are
    present the text wins and extraction is skipped.
    """
    title: str
    description: str = ""
    source_text: Optional[str] = None
    document_bytes: Optional[bytes] = None
    document_name: Optional[str] = None
    document_content_type: str = "application/pdf"
    reference_images: Tuple[ReferenceImage, ...] = ()
    voice_id: Optional[str] = None
    organization_id: Optional[str] = None
    course_id: Optional[str] = None


@dataclass
class ScriptSegment:
    title: str
    script: str
    key_points: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "script": self.script, "key_points": list(self.key_points)}


@dataclass
class QuizQuestion:
    question: str
    options: List[str]
    correct_answer: int
    explanation: str = ""
    trigger_percentage: int = 50

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.question,
            "options": list(self.options),
            "correct_answer": self.correct_answer,
            "explanation": self.explanation,
            "trigger_percentage": self.trigger_percentage,
        }


@dataclass
class GeneratedScript:
    """Output of the Script Generator"""
    segments: List[ScriptSegment]
    quiz_questions: List[QuizQuestion]
    summary: str = ""
    # Which provider produced it ("offline" for the deterministic fallback)
    source: str = "offline"


@dataclass
class Scene:
    id: str
    order: int
    script: str
    duration: int
    start_time: int
    image_url: Optional[str] = None

    @property
    def end_time(self) -> int:
        return self.start_time + self.duration

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "order": self.order,
            "script": self.script,
            "image_url": self.image_url,
            "duration": self.duration,
            "start_time": self.start_time,
        }


@dataclass
class Episode:
    id: str
    order: int
    title: str
    script: str
    duration: int
    description: str = ""
    audio_url: Optional[str] = None
    video_url: Optional[str] = None
    video_provider: Optional[str] = None
    skip_video: bool = False
    scenes: List[Scene] = field(default_factory=list)
    quiz_questions: List[QuizQuestion] = field(default_factory=list)

    @property
    def media_url(self) -> Optional[str]:
        """What the player should load: video first, then audio"""
        return self.video_url or self.audio_url

    @property
    def status(self) -> EpisodeStatus:
        return EpisodeStatus.READY if self.media_url else EpisodeStatus.DEGRADED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "order": self.order,
            "title": self.title,
            "description": self.description,
            "script": self.script,
            "duration": self.duration,
            "audio_url": self.audio_url,
            "video_url": self.video_url,
            "video_provider": self.video_provider,
            "skip_video": self.skip_video,
            "status": self.status.value,
            "scenes": [scene.to_dict() for scene in self.scenes],
            "quiz_questions": [quiz.to_dict() for quiz in self.quiz_questions],
        }


@dataclass
class Course:
    id: str
    title: str
    description: str = ""
    thumbnail_url: Optional[str] = None
    organization_id: Optional[str] = None
    status: CourseStatus = CourseStatus.PROCESSING
    episodes: List[Episode] = field(default_factory=list)
    quiz_questions: List[QuizQuestion] = field(default_factory=list)
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())
    updated_at: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def total_duration(self) -> int:
        return sum(episode.duration for episode in self.episodes)

    @property
    def is_degraded(self) -> bool:
        return any(episode.status is EpisodeStatus.DEGRADED for episode in self.episodes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "thumbnail_url": self.thumbnail_url,
            "organization_id": self.organization_id,
            "status": self.status.value,
            "total_duration": self.total_duration,
            "degraded": self.is_degraded,
            "episodes": [episode.to_dict() for episode in self.episodes],
            "quiz_questions": [quiz.to_dict() for quiz in self.quiz_questions],
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass(frozen=True)
class GenerationProgressEvent:
    stage: str
    percent: int
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"stage": self.stage, "percent": self.percent, "message": self.message}


@dataclass
class AsyncJob:
    """One submitted provider job. Mutated only by the poller."""
    provider_id: str
    job_id: str
    submitted_at: str = field(default_factory=lambda: datetime.now().isoformat())
    status: JobState = JobState.PENDING
    output_url: Optional[str] = None
    error: Optional[str] = None
    attempts: int = 0


__all__ = [
    "CourseStatus",
    "EpisodeStatus",
    "JobState",
    "ReferenceImage",
    "GenerationRequest",
    "ScriptSegment",
    "QuizQuestion",
    "GeneratedScript",
    "Scene",
    "Episode",
    "Course",
    "GenerationProgressEvent",
    "AsyncJob",
]
