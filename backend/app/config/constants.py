"""
Constants configuration

Constants, API settings, and CORS configuration.
"""

# API settings
API_TITLE = "Course Generation API"
API_DESCRIPTION = "Turn training documents into narrated, multi-episode video courses"
API_VERSION = "1.0.0"

# CORS origins
CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]

# File upload settings
ALLOWED_DOCUMENT_TYPES = [
    "application/pdf",
    "text/plain",
    "text/markdown",
]

ALLOWED_IMAGE_TYPES = [
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/webp",
]

__all__ = [
    "API_TITLE",
    "API_DESCRIPTION",
    "API_VERSION",
    "CORS_ORIGINS",
    "ALLOWED_DOCUMENT_TYPES",
    "ALLOWED_IMAGE_TYPES",
]
