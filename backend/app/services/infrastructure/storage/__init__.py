"""Storage layer - object storage for media and the course repository."""

import os

from app.core import get_logger
from .course_repository import (
    CourseRepository,
    FileBasedCourseRepository,
    SupabaseCourseRepository,
    distribute_quizzes,
)
from .object_storage import (
    AUDIO_BUCKET,
    IMAGES_BUCKET,
    VIDEOS_BUCKET,
    LocalObjectStorage,
    ObjectStorage,
    StorageError,
    SupabaseObjectStorage,
    audio_key,
    is_inline_reference,
    photo_key,
    to_data_uri,
    video_key,
)
from .supabase_client import create_supabase_client, supabase_configured

logger = get_logger(__name__, component="storage")


def resolve_storage_backend() -> str:
    """STORAGE_BACKEND wins; otherwise Supabase when configured, else local."""
    backend = os.getenv("STORAGE_BACKEND", "").strip().lower()
    if backend in {"supabase", "local"}:
        return backend
    return "supabase" if supabase_configured() else "local"


def create_storage_and_repository(client=None):
    """Build the (ObjectStorage, CourseRepository) pair for the active backend."""
    backend = resolve_storage_backend()
    if backend == "supabase":
        client = client or create_supabase_client()
        logger.info("Using Supabase storage backend")
        return SupabaseObjectStorage(client), SupabaseCourseRepository(client)
    logger.info("Using local storage backend")
    return LocalObjectStorage(), FileBasedCourseRepository()


__all__ = [
    "CourseRepository",
    "FileBasedCourseRepository",
    "SupabaseCourseRepository",
    "distribute_quizzes",
    "AUDIO_BUCKET",
    "IMAGES_BUCKET",
    "VIDEOS_BUCKET",
    "LocalObjectStorage",
    "ObjectStorage",
    "StorageError",
    "SupabaseObjectStorage",
    "audio_key",
    "is_inline_reference",
    "photo_key",
    "to_data_uri",
    "video_key",
    "create_supabase_client",
    "supabase_configured",
    "resolve_storage_backend",
    "create_storage_and_repository",
]
