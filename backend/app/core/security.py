"""
Input hygiene for uploaded files and identifiers

Anything user supplied that ends up in a storage key, a file path or a URL
passes through here first.
"""

import os
import re
import uuid
from pathlib import Path

from .logging import get_logger

logger = get_logger(__name__, component="security")

_UUID_PATTERN = re.compile(
    r"^[a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12}$",
    re.IGNORECASE,
)
_OBJECT_NAME_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_filename(filename: str) -> str:
    """
    Strip a client-supplied filename down to something safe on disk.

    Removes directory components, null bytes, leading dots, control
    characters and characters reserved on common filesystems.

    Raises:
        ValueError: If nothing usable is left

    Example:
        >>> sanitize_filename("../../etc/passwd")
        'passwd'
        >>> sanitize_filename("<handbook>.pdf")
        'handbook.pdf'
    """
    original_filename = filename

    filename = os.path.basename(filename.replace("\\", "/"))
    filename = filename.replace("\x00", "")
    filename = filename.lstrip(".")
    filename = "".join(char for char in filename if 31 < ord(char) != 127)
    for char in '<>:"|?*':
        filename = filename.replace(char, "")
    filename = filename.encode("ascii", "ignore").decode("ascii")
    filename = filename[:255].strip()

    if not filename or filename.replace(".", "") == "":
        logger.warning("Filename sanitization resulted in empty string", extra={
            "original": original_filename,
        })
        raise ValueError("Invalid filename after sanitization")

    if filename != original_filename:
        logger.debug("Filename sanitized", extra={
            "original": original_filename,
            "sanitized": filename,
        })

    return filename


def sanitize_object_name(filename: str, fallback: str = "file") -> str:
    """Make a filename safe to embed in an object storage key.

    Never raises: an unusable name collapses to `fallback`.

    >>> sanitize_object_name("My Team Photo (1).JPG")
    'My_Team_Photo_1_.JPG'
    """
    try:
        cleaned = sanitize_filename(filename)
    except ValueError:
        return fallback
    cleaned = _OBJECT_NAME_UNSAFE.sub("_", cleaned).strip("_") or fallback
    return cleaned[:120]


def validate_job_id(job_id: str) -> bool:
    """Job ids are UUIDs; anything else is rejected before touching disk."""
    is_valid = bool(_UUID_PATTERN.match(job_id or ""))
    if not is_valid:
        logger.warning("Invalid job ID format", extra={"job_id": job_id})
    return is_valid


def new_id() -> str:
    return str(uuid.uuid4())


def stable_id(parent_id: str, kind: str, number: int) -> str:
    """Deterministic UUID for a child row, so re-runs upsert the same ids."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"{parent_id}/{kind}/{number}"))


def validate_path_within_directory(path: Path, allowed_directory: Path) -> bool:
    """True when `path` resolves to somewhere inside `allowed_directory`."""
    try:
        path = path.resolve()
        allowed_directory = allowed_directory.resolve()
    except (OSError, RuntimeError) as e:
        logger.warning("Path resolution failed", extra={"path": str(path), "error": str(e)})
        return False

    try:
        path.relative_to(allowed_directory)
        return True
    except ValueError:
        logger.warning("Path traversal attempt detected", extra={
            "path": str(path),
            "allowed_directory": str(allowed_directory),
        })
        return False
