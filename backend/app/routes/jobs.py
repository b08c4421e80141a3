"""
Job status routes.

A job wraps one course generation run; clients poll it for progress and
the final course summary.
"""

from fastapi import APIRouter, HTTPException

from ..core import validate_job_id
from ..models import JobListResponse, JobResponse
from ..services.infrastructure.orchestration import Job, get_job_manager

router = APIRouter(prefix="/api/jobs", tags=["jobs"])


def job_to_response(job: Job) -> JobResponse:
    return JobResponse(
        job_id=job.id,
        status=job.status.value,
        progress=job.progress,
        message=job.message,
        stage=job.stage,
        course_id=job.course_id,
        result=job.result,
        error=job.error,
        created_at=job.created_at,
        updated_at=job.updated_at,
    )


@router.get("", response_model=JobListResponse)
async def list_jobs():
    """List all jobs, most recently updated first."""
    return JobListResponse(jobs=[job_to_response(job) for job in get_job_manager().get_all_jobs()])


@router.get("/{job_id}", response_model=JobResponse)
async def get_job_status(job_id: str):
    """Current status and latest progress of a generation job."""
    if not validate_job_id(job_id):
        raise HTTPException(status_code=400, detail="Invalid job ID format")

    job = get_job_manager().get_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job_to_response(job)
