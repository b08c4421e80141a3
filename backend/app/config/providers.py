"""
Provider Configuration

Which third-party services the pipeline talks to, in which order, and with
which models. Each capability has a fixed priority list; the pipeline walks
the list until one provider succeeds.

=== CONTENT GENERATION (fast/cheap first) ===
    - gemini    : Google Gemini via google-genai (requires GEMINI_API_KEY)
    - anthropic : Anthropic Messages API (requires ANTHROPIC_API_KEY)
    - ollama    : Local Ollama server (OLLAMA_HOST)

Override the order with CONTENT_PROVIDERS="ollama,gemini".

=== NARRATION ===
    TTS_ENGINE=elevenlabs (default) or TTS_ENGINE=edge

=== VIDEO LADDERS ===
    Lip-sync      : sadtalker (Replicate) -> sync_lipsync (fal) -> did_audio (D-ID)
    Text-to-video : svd (Replicate) -> text_to_video (Replicate)
                    -> kling (fal) -> did_avatar (D-ID) -> placeholder

A provider without credentials is reported as unavailable and counts as a
failed rung; the ladder simply moves on.
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple


class ContentProviderType(str, Enum):
    """Supported content generation providers"""
    GEMINI = "gemini"
    ANTHROPIC = "anthropic"
    OLLAMA = "ollama"


DEFAULT_CONTENT_PROVIDER_ORDER: Tuple[ContentProviderType, ...] = (
    ContentProviderType.GEMINI,
    ContentProviderType.ANTHROPIC,
    ContentProviderType.OLLAMA,
)

# Max characters of source text sent to each provider
CONTENT_CONTEXT_BUDGETS: Dict[ContentProviderType, int] = {
    ContentProviderType.GEMINI: 15000,
    ContentProviderType.ANTHROPIC: 8000,
    ContentProviderType.OLLAMA: 6000,
}

GEMINI_CONTENT_MODEL = os.getenv("GEMINI_CONTENT_MODEL", "gemini-2.5-flash")
ANTHROPIC_CONTENT_MODEL = os.getenv("ANTHROPIC_CONTENT_MODEL", "claude-3-5-sonnet-20241022")
OLLAMA_CONTENT_MODEL = os.getenv("OLLAMA_CONTENT_MODEL", "gemma3:12b")
OLLAMA_HOST = os.getenv("OLLAMA_HOST", "http://localhost:11434")

CONTENT_MAX_TOKENS = 4096


def get_content_provider_order() -> List[ContentProviderType]:
    """Resolve the content provider priority list.

    CONTENT_PROVIDERS wins when set; unknown names are ignored so a typo
    never disables the whole list.
    """
    raw = os.getenv("CONTENT_PROVIDERS", "").strip()
    if not raw:
        return list(DEFAULT_CONTENT_PROVIDER_ORDER)

    order: List[ContentProviderType] = []
    for name in raw.split(","):
        try:
            provider = ContentProviderType(name.strip().lower())
        except ValueError:
            continue
        if provider not in order:
            order.append(provider)
    return order or list(DEFAULT_CONTENT_PROVIDER_ORDER)


# =============================================================================
# NARRATION
# =============================================================================

class NarrationEngineType(str, Enum):
    ELEVENLABS = "elevenlabs"
    EDGE = "edge"


ELEVENLABS_BASE_URL = "https://api.elevenlabs.io/v1"
ELEVENLABS_MODEL_ID = os.getenv("ELEVENLABS_MODEL_ID", "eleven_monolingual_v1")
EDGE_DEFAULT_VOICE = "en-US-AriaNeural"


# =============================================================================
# VIDEO
# =============================================================================

class VideoStrategy(str, Enum):
    LIP_SYNC = "lip_sync"
    TEXT_TO_VIDEO = "text_to_video"


@dataclass(frozen=True)
class VideoProviderSpec:
    """Static description of one rung of a video ladder"""
    name: str
    vendor: str
    model: str
    needs_image: bool = False
    needs_audio: bool = False
    needs_script: bool = False
    description: str = ""


REPLICATE_BASE_URL = "https://api.replicate.com/v1"
FAL_QUEUE_BASE_URL = "https://queue.fal.run"
DID_BASE_URL = "https://api.d-id.com"

LIP_SYNC_LADDER: Tuple[VideoProviderSpec, ...] = (
    VideoProviderSpec(
        name="sadtalker",
        vendor="replicate",
        model=os.getenv("REPLICATE_LIPSYNC_VERSION", "cjwbw/sadtalker"),
        needs_image=True,
        needs_audio=True,
        description="Talking head from a portrait and narration audio",
    ),
    VideoProviderSpec(
        name="sync_lipsync",
        vendor="fal",
        model=os.getenv("FAL_LIPSYNC_MODEL", "fal-ai/sadtalker"),
        needs_image=True,
        needs_audio=True,
        description="Alternate vendor lip-sync",
    ),
    VideoProviderSpec(
        name="did_audio",
        vendor="did",
        model="talks",
        needs_image=True,
        needs_audio=True,
        description="D-ID talk driven by an audio URL",
    ),
)

TEXT_TO_VIDEO_LADDER: Tuple[VideoProviderSpec, ...] = (
    VideoProviderSpec(
        name="svd",
        vendor="replicate",
        model=os.getenv("REPLICATE_IMAGE_TO_VIDEO_VERSION", "stability-ai/stable-video-diffusion"),
        needs_image=True,
        description="Image-conditioned short clip",
    ),
    VideoProviderSpec(
        name="text_to_video",
        vendor="replicate",
        model=os.getenv("REPLICATE_TEXT_TO_VIDEO_VERSION", "anotherjesse/zeroscope-v2-xl"),
        needs_script=True,
        description="Text-conditioned short clip",
    ),
    VideoProviderSpec(
        name="kling",
        vendor="fal",
        model=os.getenv("FAL_IMAGE_TO_VIDEO_MODEL", "fal-ai/kling-video/v1/standard/image-to-video"),
        needs_image=True,
        description="Alternate vendor image-conditioned clip",
    ),
    VideoProviderSpec(
        name="did_avatar",
        vendor="did",
        model="talks",
        needs_image=True,
        needs_script=True,
        description="Talking avatar reading a short script",
    ),
)


__all__ = [
    "ContentProviderType",
    "DEFAULT_CONTENT_PROVIDER_ORDER",
    "CONTENT_CONTEXT_BUDGETS",
    "GEMINI_CONTENT_MODEL",
    "ANTHROPIC_CONTENT_MODEL",
    "OLLAMA_CONTENT_MODEL",
    "OLLAMA_HOST",
    "CONTENT_MAX_TOKENS",
    "get_content_provider_order",
    "NarrationEngineType",
    "ELEVENLABS_BASE_URL",
    "ELEVENLABS_MODEL_ID",
    "EDGE_DEFAULT_VOICE",
    "VideoStrategy",
    "VideoProviderSpec",
    "REPLICATE_BASE_URL",
    "FAL_QUEUE_BASE_URL",
    "DID_BASE_URL",
    "LIP_SYNC_LADDER",
    "TEXT_TO_VIDEO_LADDER",
]
