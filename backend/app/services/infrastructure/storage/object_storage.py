"""
Object storage - durable homes for photos, narration audio and video.

Keys are deterministic per course and episode, and every put overwrites,
so a retried run replaces its earlier assets instead of piling up copies.

Classes:
    ObjectStorage: Abstract put/remove interface
    SupabaseObjectStorage: Supabase Storage buckets
    LocalObjectStorage: Files under OUTPUT_DIR, served from PUBLIC_BASE_URL
"""

import asyncio
import base64
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from app.config import OUTPUT_DIR
from app.core import get_logger, validate_path_within_directory

logger = get_logger(__name__, component="object_storage")

IMAGES_BUCKET = "images"
AUDIO_BUCKET = "audio"
VIDEOS_BUCKET = "videos"


def photo_key(course_id: str, index: int, safe_name: str) -> str:
    return f"courses/{course_id}/photos/{index}-{safe_name}"


def audio_key(course_id: str, episode_number: int) -> str:
    return f"courses/{course_id}/audio/episode-{episode_number}.mp3"


def video_key(course_id: str, episode_number: int) -> str:
    return f"courses/{course_id}/video/episode-{episode_number}.mp4"


def to_data_uri(data: bytes, content_type: str) -> str:
    """Self-contained asset reference for when storage is unavailable"""
    return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"


def is_inline_reference(url: Optional[str]) -> bool:
    return bool(url) and url.startswith("data:")


class StorageError(Exception):
    """Upload or removal failed"""


class ObjectStorage(ABC):
    """
    Abstract object storage.

    Implementations raise StorageError on failure; callers decide whether
    that is fatal (it never is inside the pipeline).
    """

    @abstractmethod
    async def put(self, bucket: str, key: str, data: bytes, content_type: str) -> str:
        """Store `data` under bucket/key, overwriting, and return its public URL."""

    @abstractmethod
    async def remove(self, bucket: str, key: str) -> None:
        """Delete bucket/key. Missing objects are not an error."""


class SupabaseObjectStorage(ObjectStorage):
    """Supabase Storage. The SDK is synchronous, so calls run in a thread."""

    def __init__(self, client: Any):
        self._client = client

    def _put_sync(self, bucket: str, key: str, data: bytes, content_type: str) -> str:
        store = self._client.storage.from_(bucket)
        store.upload(
            key,
            data,
            file_options={"content-type": content_type, "upsert": "true"},
        )
        return store.get_public_url(key)

    async def put(self, bucket: str, key: str, data: bytes, content_type: str) -> str:
        try:
            url = await asyncio.to_thread(self._put_sync, bucket, key, data, content_type)
        except Exception as e:
            raise StorageError(f"Upload to {bucket}/{key} failed: {e}") from e
        return url.rstrip("?")

    async def remove(self, bucket: str, key: str) -> None:
        try:
            await asyncio.to_thread(self._client.storage.from_(bucket).remove, [key])
        except Exception as e:
            raise StorageError(f"Removal of {bucket}/{key} failed: {e}") from e


class LocalObjectStorage(ObjectStorage):
    """Writes objects to disk. Used in development and tests."""

    def __init__(self, root_dir: Optional[Path] = None, public_base_url: Optional[str] = None):
        self.root_dir = Path(root_dir) if root_dir else OUTPUT_DIR
        self.root_dir.mkdir(parents=True, exist_ok=True)
        base = public_base_url if public_base_url is not None else os.getenv("PUBLIC_BASE_URL", "")
        self.public_base_url = base.rstrip("/")

    def _path(self, bucket: str, key: str) -> Path:
        path = self.root_dir / bucket / key
        if not validate_path_within_directory(path, self.root_dir):
            raise StorageError(f"Key escapes storage root: {bucket}/{key}")
        return path

    def _url(self, bucket: str, key: str, path: Path) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{bucket}/{key}"
        return path.resolve().as_uri()

    async def put(self, bucket: str, key: str, data: bytes, content_type: str) -> str:
        path = self._path(bucket, key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(path.write_bytes, data)
        except OSError as e:
            raise StorageError(f"Write to {path} failed: {e}") from e
        logger.debug("Stored object", extra={"bucket": bucket, "key": key, "bytes": len(data)})
        return self._url(bucket, key, path)

    async def remove(self, bucket: str, key: str) -> None:
        try:
            self._path(bucket, key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Removal of {bucket}/{key} failed: {e}") from e
