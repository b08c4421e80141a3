"""
Application configuration and settings
"""

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from .paths import (
    APP_DIR,
    BACKEND_DIR,
    UPLOAD_DIR,
    OUTPUT_DIR,
    JOB_DATA_DIR,
    COURSE_DATA_DIR,
)
from .constants import (
    API_TITLE,
    API_DESCRIPTION,
    API_VERSION,
    CORS_ORIGINS,
    ALLOWED_DOCUMENT_TYPES,
    ALLOWED_IMAGE_TYPES,
)
from .pipeline import (
    STAGE_WINDOWS,
    STAGE_ORDER,
    PipelineSettings,
)
from .providers import (
    ContentProviderType,
    NarrationEngineType,
    VideoStrategy,
    get_content_provider_order,
)

__all__ = [
    "APP_DIR",
    "BACKEND_DIR",
    "UPLOAD_DIR",
    "OUTPUT_DIR",
    "JOB_DATA_DIR",
    "COURSE_DATA_DIR",
    "API_TITLE",
    "API_DESCRIPTION",
    "API_VERSION",
    "CORS_ORIGINS",
    "ALLOWED_DOCUMENT_TYPES",
    "ALLOWED_IMAGE_TYPES",
    "STAGE_WINDOWS",
    "STAGE_ORDER",
    "PipelineSettings",
    "ContentProviderType",
    "NarrationEngineType",
    "VideoStrategy",
    "get_content_provider_order",
]
