"""
Pipeline Configuration

Tunable constants for the course generation pipeline and the declarative
stage-weight table used for progress reporting.

=== STAGES ===

The pipeline always runs the same stages in the same order:

    extract -> photos -> script -> audio -> video -> persist -> complete

Each stage owns a fixed percentage window. Sub-progress inside a stage
(e.g. "3 of 5 episodes narrated") is interpolated linearly inside that
window, so the overall percentage never goes backwards.

=== HEURISTICS ===

Durations are estimated, never decoded:
    - From text: ~150 words per minute at ~5 characters per word
    - From audio bytes: ~2000 bytes per second of speech (16 kbps mpeg)
Both estimates are clamped to a 10 second minimum.
"""

import os
from dataclasses import dataclass
from typing import Dict, Tuple

from app.core.runtime import env_float, env_int


# =============================================================================
# STAGES
# =============================================================================

STAGE_EXTRACT = "extract"
STAGE_PHOTOS = "photos"
STAGE_SCRIPT = "script"
STAGE_AUDIO = "audio"
STAGE_VIDEO = "video"
STAGE_PERSIST = "persist"
STAGE_COMPLETE = "complete"

STAGE_ORDER = (
    STAGE_EXTRACT,
    STAGE_PHOTOS,
    STAGE_SCRIPT,
    STAGE_AUDIO,
    STAGE_VIDEO,
    STAGE_PERSIST,
    STAGE_COMPLETE,
)

# stage -> (start_percent, end_percent)
STAGE_WINDOWS: Dict[str, Tuple[int, int]] = {
    STAGE_EXTRACT: (5, 15),
    STAGE_PHOTOS: (20, 30),
    STAGE_SCRIPT: (35, 55),
    STAGE_AUDIO: (60, 75),
    STAGE_VIDEO: (75, 90),
    STAGE_PERSIST: (92, 92),
    STAGE_COMPLETE: (100, 100),
}


# =============================================================================
# SCRIPT GENERATION
# =============================================================================

MAX_SEGMENTS = 8

# Offline generator
OFFLINE_MAX_SEGMENTS = 5
OFFLINE_MIN_PARAGRAPH_CHARS = 30
OFFLINE_SCRIPT_CHARS = 500

QUIZ_TRIGGER_PERCENTAGES = (30, 60, 90)
QUIZ_OPTION_COUNT = 4


# =============================================================================
# NARRATION
# =============================================================================

NARRATION_MAX_CHARS = 5000
NARRATION_MIN_CHARS = 10
AUDIO_BYTES_PER_SECOND = 2000
DEFAULT_VOICE_ID = "21m00Tcm4TlvDq8ikWAM"


# =============================================================================
# TIMING
# =============================================================================

MIN_DURATION_SECONDS = 10
WORDS_PER_MINUTE = 150
CHARS_PER_WORD = 5

MAX_SCENES_PER_EPISODE = 6
SENTENCES_PER_SCENE = 3


# =============================================================================
# VIDEO
# =============================================================================

AVATAR_SCRIPT_CHARS = 300
VIDEO_PROMPT_CHARS = 500

# Episode description fallback length
EPISODE_DESCRIPTION_CHARS = 150


@dataclass(frozen=True)
class PipelineSettings:
    """Runtime knobs read from the environment at pipeline construction time.

    Kept separate from the module constants so tests (and callers) can build
    a pipeline with a fast poller without touching the environment.
    """
    poll_interval_seconds: float = 2.0
    poll_max_attempts: int = 120
    http_timeout_seconds: float = 30.0
    extraction_service_url: str = ""

    @property
    def poll_budget_seconds(self) -> float:
        """Worst-case wall clock for a single provider attempt"""
        return self.poll_interval_seconds * self.poll_max_attempts

    @classmethod
    def from_env(cls) -> "PipelineSettings":
        return cls(
            poll_interval_seconds=env_float("VIDEO_POLL_INTERVAL_SECONDS", 2.0, 0.0),
            poll_max_attempts=env_int("VIDEO_POLL_MAX_ATTEMPTS", 120, 1),
            http_timeout_seconds=env_float("HTTP_TIMEOUT_SECONDS", 30.0, 1.0),
            extraction_service_url=os.getenv("EXTRACTION_SERVICE_URL", "").strip(),
        )


__all__ = [
    "STAGE_EXTRACT",
    "STAGE_PHOTOS",
    "STAGE_SCRIPT",
    "STAGE_AUDIO",
    "STAGE_VIDEO",
    "STAGE_PERSIST",
    "STAGE_COMPLETE",
    "STAGE_ORDER",
    "STAGE_WINDOWS",
    "MAX_SEGMENTS",
    "OFFLINE_MAX_SEGMENTS",
    "OFFLINE_MIN_PARAGRAPH_CHARS",
    "OFFLINE_SCRIPT_CHARS",
    "QUIZ_TRIGGER_PERCENTAGES",
    "QUIZ_OPTION_COUNT",
    "NARRATION_MAX_CHARS",
    "NARRATION_MIN_CHARS",
    "AUDIO_BYTES_PER_SECOND",
    "DEFAULT_VOICE_ID",
    "MIN_DURATION_SECONDS",
    "WORDS_PER_MINUTE",
    "CHARS_PER_WORD",
    "MAX_SCENES_PER_EPISODE",
    "SENTENCES_PER_SCENE",
    "AVATAR_SCRIPT_CHARS",
    "VIDEO_PROMPT_CHARS",
    "EPISODE_DESCRIPTION_CHARS",
    "PipelineSettings",
]
