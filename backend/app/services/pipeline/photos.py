"""
Photos stage

Uploads the request's reference images and returns one URL per image.
A failed upload is replaced by a generated avatar so the list never has
holes; with no images at all a single course-level avatar is returned.
"""

from typing import List, Sequence
from urllib.parse import quote_plus

from app.core import get_logger, sanitize_object_name
from app.models.course import ReferenceImage
from app.services.infrastructure.storage import (
    IMAGES_BUCKET,
    ObjectStorage,
    StorageError,
    photo_key,
)

logger = get_logger(__name__, component="photos")


def employee_avatar_url(number: int) -> str:
    return f"https://ui-avatars.com/api/?name=Employee+{number}&background=random&size=400"


def course_avatar_url(title: str) -> str:
    return (
        f"https://ui-avatars.com/api/?name={quote_plus(title or 'Course')}"
        "&background=667eea&color=fff&size=400&font-size=0.25"
    )


async def upload_reference_images(
    storage: ObjectStorage,
    course_id: str,
    images: Sequence[ReferenceImage],
    title: str = "",
) -> List[str]:
    if not images:
        return [course_avatar_url(title)]

    urls: List[str] = []
    for index, image in enumerate(images):
        key = photo_key(course_id, index, sanitize_object_name(image.filename, fallback=f"photo-{index}"))
        try:
            urls.append(await storage.put(IMAGES_BUCKET, key, image.content, image.content_type))
        except StorageError as e:
            logger.warning(
                "Photo upload failed, using avatar",
                extra={"key": key, "error": str(e)},
            )
            urls.append(employee_avatar_url(index + 1))
    return urls
