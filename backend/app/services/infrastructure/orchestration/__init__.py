"""Job orchestration - job tracking and provider job polling."""

from .job_manager import JobManager, Job, JobStatus, get_job_manager
from .poller import StatusSnapshot, poll, poll_job

__all__ = [
    "JobManager",
    "Job",
    "JobStatus",
    "get_job_manager",
    "StatusSnapshot",
    "poll",
    "poll_job",
]
