"""
Duration heuristics.

Nothing here decodes media. Durations are estimates that are good enough to
lay out a scene timeline and place quiz triggers.
"""

import math

from app.config.pipeline import (
    AUDIO_BYTES_PER_SECOND,
    CHARS_PER_WORD,
    MIN_DURATION_SECONDS,
    WORDS_PER_MINUTE,
)


def round_half_up(value: float) -> int:
    """Round .5 away from zero (Python's round() would go to even)."""
    return int(math.floor(value + 0.5))


def estimate_duration(text: str) -> int:
    """Seconds needed to read `text` aloud at ~150 wpm, minimum 10."""
    words = len(text or "") / CHARS_PER_WORD
    seconds = round_half_up(words / WORDS_PER_MINUTE * 60)
    return max(seconds, MIN_DURATION_SECONDS)


def estimate_duration_from_bytes(byte_count: int) -> int:
    """Seconds of speech in an mpeg narration of `byte_count` bytes, minimum 10."""
    return max(round_half_up(byte_count / AUDIO_BYTES_PER_SECOND), MIN_DURATION_SECONDS)
