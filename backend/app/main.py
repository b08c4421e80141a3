"""
Course Generation Backend API
FastAPI application that turns training documents into narrated video courses

This is the main entry point that wires together all routes and services.
"""

import os
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .config import (
    API_DESCRIPTION,
    API_TITLE,
    API_VERSION,
    CORS_ORIGINS,
    COURSE_DATA_DIR,
    JOB_DATA_DIR,
    OUTPUT_DIR,
    UPLOAD_DIR,
)
from .core import (
    clear_context,
    get_logger,
    parse_bool_env,
    run_startup_runtime_checks,
    set_request_id,
    setup_logging,
)
from .models import HealthResponse
from .routes import generation_router, jobs_router

# Initialize logging
log_level = os.getenv("LOG_LEVEL", "INFO")
log_file = os.getenv("LOG_FILE")
use_json_logs = parse_bool_env(os.getenv("JSON_LOGS"), default=False)

setup_logging(
    level=log_level,
    log_file=Path(log_file) if log_file else None,
    use_json=use_json_logs,
)

logger = get_logger(__name__, service="api")
logger.info("Starting Course Generation API", extra={
    "log_level": log_level,
    "json_logs": use_json_logs,
})


def configured_providers() -> dict:
    """Which external collaborators have credentials in the environment"""
    from .services.infrastructure.storage import supabase_configured
    from .services.llm import get_all_providers

    return {
        **get_all_providers(),
        "elevenlabs": bool(os.getenv("ELEVENLABS_API_KEY")),
        "edge_tts": os.getenv("TTS_ENGINE", "").strip().lower() == "edge",
        "replicate": bool(os.getenv("REPLICATE_API_TOKEN")),
        "fal": bool(os.getenv("FAL_KEY")),
        "d_id": bool(os.getenv("DID_API_KEY")),
        "supabase": supabase_configured(),
        "extraction_service": bool(os.getenv("EXTRACTION_SERVICE_URL")),
    }


async def _run_startup() -> None:
    """Check working directories and close out jobs a restart left behind."""
    from .services.infrastructure.orchestration import get_job_manager

    app.state.runtime_report = run_startup_runtime_checks(
        directories={
            "upload_dir": UPLOAD_DIR,
            "output_dir": OUTPUT_DIR,
            "job_data_dir": JOB_DATA_DIR,
            "course_data_dir": COURSE_DATA_DIR,
        },
        strict_dirs=True,
    )
    logger.info("Startup runtime checks complete", extra={"runtime_report": app.state.runtime_report})

    # Runs are in-process; anything still active did not survive the restart
    marked = get_job_manager().mark_interrupted_jobs_failed()
    if marked:
        logger.info("Closed out interrupted jobs", extra={"count": marked})


@asynccontextmanager
async def lifespan(_app: FastAPI):
    await _run_startup()
    yield


# Create FastAPI app
app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    lifespan=lifespan,
)


@app.middleware("http")
async def add_request_correlation(request: Request, call_next):
    """Attach a correlation id to every request and its log records."""
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    set_request_id(request_id)
    path = request.url.path

    logger.info(f"{request.method} {path}", extra={
        "method": request.method,
        "path": path,
        "client": request.client.host if request.client else "unknown",
    })

    try:
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        response.headers.setdefault("X-Content-Type-Options", "nosniff")

        logger.info(f"Response: {response.status_code}", extra={
            "status_code": response.status_code,
            "method": request.method,
            "path": path,
        })
        return response
    finally:
        clear_context()


# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(generation_router)
app.include_router(jobs_router)


@app.get("/")
async def root():
    """Root endpoint - API info"""
    return {
        "message": "Course Generation API - turn documents into video courses",
        "version": API_VERSION,
    }


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Liveness plus provider configuration.

    Every provider is optional (the pipeline degrades without it), so the
    service reports healthy regardless and lists what is configured.
    """
    return HealthResponse(status="healthy", version=API_VERSION, providers=configured_providers())


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        reload=True,
        reload_excludes=["outputs/*", "job_data/*", "course_data/*", "uploads/*", "*.pyc", "__pycache__/*"]
    )
