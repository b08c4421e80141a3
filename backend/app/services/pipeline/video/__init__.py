"""Video generation - job providers, status adapters, ladders and the synthesizer."""

from .base import VideoJobInput, VideoProvider, VideoProviderError
from .did import DIDVideoProvider, adapt_did_status
from .fal import FalVideoProvider, adapt_fal_status
from .ladders import build_ladder, build_video_ladders
from .replicate import ReplicateVideoProvider, adapt_replicate_status, final_output_url
from .synthesizer import VideoOutcome, VideoSynthesizer, choose_strategy

__all__ = [
    "VideoJobInput",
    "VideoProvider",
    "VideoProviderError",
    "DIDVideoProvider",
    "FalVideoProvider",
    "ReplicateVideoProvider",
    "adapt_did_status",
    "adapt_fal_status",
    "adapt_replicate_status",
    "final_output_url",
    "build_ladder",
    "build_video_ladders",
    "VideoOutcome",
    "VideoSynthesizer",
    "choose_strategy",
]
