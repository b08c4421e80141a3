"""
Course generation routes

Thin HTTP layer: validate the upload, build a GenerationRequest, hand it to
CourseGenerationUseCase and return the job handle.
"""

import os
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, UploadFile

from ..config import ALLOWED_DOCUMENT_TYPES, ALLOWED_IMAGE_TYPES
from ..core import get_logger, sanitize_filename
from ..models import GenerationRequest, GenerationStartResponse, ReferenceImage, TextGenerationRequest
from ..services.use_cases import CourseGenerationUseCase

logger = get_logger(__name__, component="generation_routes")

router = APIRouter(prefix="/api/courses", tags=["generation"])

MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_SIZE", 50 * 1024 * 1024))  # 50MB default
TEXT_DOCUMENT_TYPES = {"text/plain", "text/markdown"}

_use_case: Optional[CourseGenerationUseCase] = None


def get_generation_use_case() -> CourseGenerationUseCase:
    global _use_case
    if _use_case is None:
        _use_case = CourseGenerationUseCase()
    return _use_case


async def _read_upload(upload: UploadFile, allowed_types: List[str]) -> bytes:
    content_type = (upload.content_type or "").split(";")[0].strip().lower()
    if content_type not in allowed_types:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type '{content_type}' for {upload.filename}",
        )

    data = await upload.read()
    if len(data) > MAX_UPLOAD_SIZE:
        logger.warning("File too large", extra={"size": len(data), "max_size": MAX_UPLOAD_SIZE})
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Max allowed: {MAX_UPLOAD_SIZE // (1024 * 1024)}MB",
        )
    return data


def _safe_name(filename: Optional[str], fallback: str) -> str:
    try:
        return sanitize_filename(filename or fallback)
    except ValueError:
        return fallback


@router.post("/generate", response_model=GenerationStartResponse)
async def generate_course(
    background_tasks: BackgroundTasks,
    title: str = Form(...),
    description: str = Form(""),
    voice_id: Optional[str] = Form(None),
    organization_id: Optional[str] = Form(None),
    source_text: Optional[str] = Form(None),
    document: Optional[UploadFile] = File(None),
    photos: Optional[List[UploadFile]] = File(None),
    use_case: CourseGenerationUseCase = Depends(get_generation_use_case),
):
    """Start course generation from an uploaded document (or raw text)."""
    if not title.strip():
        raise HTTPException(status_code=400, detail="Title is required")
    if document is None and not (source_text and source_text.strip()):
        raise HTTPException(status_code=400, detail="Provide a document or source_text")

    document_bytes = None
    document_name = None
    document_content_type = "application/pdf"
    if document is not None:
        document_bytes = await _read_upload(document, ALLOWED_DOCUMENT_TYPES)
        document_name = _safe_name(document.filename, "document.pdf")
        document_content_type = (document.content_type or document_content_type).split(";")[0].strip().lower()
        # Plain text needs no extraction service
        if document_content_type in TEXT_DOCUMENT_TYPES and not source_text:
            source_text = document_bytes.decode("utf-8", errors="replace")

    reference_images = []
    for index, photo in enumerate(photos or []):
        content = await _read_upload(photo, ALLOWED_IMAGE_TYPES)
        reference_images.append(
            ReferenceImage(
                filename=_safe_name(photo.filename, f"photo-{index}.jpg"),
                content=content,
                content_type=(photo.content_type or "image/jpeg").split(";")[0].strip().lower(),
            )
        )

    request = GenerationRequest(
        title=title.strip(),
        description=description.strip(),
        source_text=source_text,
        document_bytes=document_bytes,
        document_name=document_name,
        document_content_type=document_content_type,
        reference_images=tuple(reference_images),
        voice_id=voice_id or None,
        organization_id=organization_id or None,
    )
    return use_case.start_generation(request, background_tasks)


@router.post("/generate/text", response_model=GenerationStartResponse)
async def generate_course_from_text(
    body: TextGenerationRequest,
    background_tasks: BackgroundTasks,
    use_case: CourseGenerationUseCase = Depends(get_generation_use_case),
):
    """Start course generation from text that is already extracted."""
    if not body.title.strip():
        raise HTTPException(status_code=400, detail="Title is required")
    if not body.source_text.strip():
        raise HTTPException(status_code=400, detail="source_text must not be empty")

    request = GenerationRequest(
        title=body.title.strip(),
        description=body.description.strip(),
        source_text=body.source_text,
        voice_id=body.voice_id,
        organization_id=body.organization_id,
    )
    return use_case.start_generation(request, background_tasks)
