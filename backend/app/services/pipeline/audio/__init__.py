"""Audio generation - narration providers and the narration synthesizer."""

import os
from typing import Optional

import httpx

from .narration import NarrationAsset, NarrationSynthesizer, clean_narration_text
from .providers import (
    EdgeNarrationProvider,
    ElevenLabsProvider,
    NarrationError,
    NarrationProvider,
)


def create_narration_provider(http_client: Optional[httpx.AsyncClient] = None) -> NarrationProvider:
    """Factory: return the narration provider selected by ``TTS_ENGINE``.

    Supported values:
      - ``"elevenlabs"`` (default) - needs ELEVENLABS_API_KEY
      - ``"edge"`` - free Edge TTS via ``edge-tts``
    """
    engine_name = os.getenv("TTS_ENGINE", "elevenlabs").lower().strip()
    if engine_name == "edge":
        return EdgeNarrationProvider()
    return ElevenLabsProvider(http_client=http_client)


__all__ = [
    "NarrationAsset",
    "NarrationSynthesizer",
    "clean_narration_text",
    "EdgeNarrationProvider",
    "ElevenLabsProvider",
    "NarrationError",
    "NarrationProvider",
    "create_narration_provider",
]
