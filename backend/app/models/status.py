"""
Job status constants and enumerations.

A job wraps exactly one pipeline run; its status tracks which stage the
run is in.
"""

from enum import Enum


class JobStatus(Enum):
    """Enumeration of all possible job statuses."""

    PENDING = "pending"
    EXTRACTING = "extracting"
    UPLOADING_PHOTOS = "uploading_photos"
    GENERATING_SCRIPT = "generating_script"
    SYNTHESIZING_AUDIO = "synthesizing_audio"
    SYNTHESIZING_VIDEO = "synthesizing_video"
    SAVING = "saving"
    COMPLETED = "completed"
    FAILED = "failed"
    INTERRUPTED = "interrupted"

    def is_terminal(self) -> bool:
        """Check if this status is a terminal state (no further progress)."""
        return self in (JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.INTERRUPTED)

    def is_in_progress(self) -> bool:
        """Check if this status indicates active processing."""
        return not self.is_terminal() and self is not JobStatus.PENDING


# Pipeline stage name -> job status
STAGE_TO_STATUS_MAP = {
    "extract": JobStatus.EXTRACTING,
    "photos": JobStatus.UPLOADING_PHOTOS,
    "script": JobStatus.GENERATING_SCRIPT,
    "audio": JobStatus.SYNTHESIZING_AUDIO,
    "video": JobStatus.SYNTHESIZING_VIDEO,
    "persist": JobStatus.SAVING,
    "complete": JobStatus.COMPLETED,
}


def get_status_from_stage(stage: str) -> JobStatus:
    """
    Convert a pipeline stage name to the job status shown to clients.

    Unknown stages keep the job "pending" rather than failing it.
    """
    return STAGE_TO_STATUS_MAP.get(stage, JobStatus.PENDING)


__all__ = [
    "JobStatus",
    "STAGE_TO_STATUS_MAP",
    "get_status_from_stage",
]
