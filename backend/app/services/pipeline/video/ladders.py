"""
Builds the two provider ladders from the static rung descriptions in
app.config.providers.
"""

from typing import Dict, List, Optional, Sequence, Tuple, Type

import httpx

from app.config.providers import LIP_SYNC_LADDER, TEXT_TO_VIDEO_LADDER, VideoProviderSpec

from .base import VideoProvider
from .did import DIDVideoProvider
from .fal import FalVideoProvider
from .replicate import ReplicateVideoProvider

PROVIDER_CLASSES: Dict[str, Type[VideoProvider]] = {
    "replicate": ReplicateVideoProvider,
    "fal": FalVideoProvider,
    "did": DIDVideoProvider,
}


def build_ladder(
    specs: Sequence[VideoProviderSpec],
    http_client: Optional[httpx.AsyncClient] = None,
    timeout: float = 30.0,
) -> List[VideoProvider]:
    """Instantiate every rung, configured or not.

    Unconfigured rungs stay in the ladder so the synthesizer can log them
    as skipped; they never make a network call.
    """
    return [
        PROVIDER_CLASSES[spec.vendor](spec, http_client=http_client, timeout=timeout)
        for spec in specs
    ]


def build_video_ladders(
    http_client: Optional[httpx.AsyncClient] = None,
    timeout: float = 30.0,
) -> Tuple[List[VideoProvider], List[VideoProvider]]:
    """(lip_sync, text_to_video) ladders"""
    return (
        build_ladder(LIP_SYNC_LADDER, http_client, timeout),
        build_ladder(TEXT_TO_VIDEO_LADDER, http_client, timeout),
    )
