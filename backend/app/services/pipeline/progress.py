"""
Progress reporting

Turns (stage, fraction) pairs into percentages using the STAGE_WINDOWS table
and forwards them to the caller's callback. Reported values never go down.
"""

from typing import Callable, Dict, List, Mapping, Optional, Tuple

from app.config.pipeline import STAGE_WINDOWS
from app.core import get_logger
from app.models.course import GenerationProgressEvent

from .timing import round_half_up

logger = get_logger(__name__, component="progress")

ProgressCallback = Callable[[str, int, str], None]


def stage_percent(
    stage: str,
    fraction: float = 0.0,
    windows: Mapping[str, Tuple[int, int]] = STAGE_WINDOWS,
) -> int:
    """Linear interpolation inside the stage window, fraction clamped to [0, 1]."""
    start, end = windows[stage]
    fraction = min(max(fraction, 0.0), 1.0)
    return round_half_up(start + fraction * (end - start))


class ProgressReporter:
    def __init__(
        self,
        on_progress: Optional[ProgressCallback] = None,
        windows: Mapping[str, Tuple[int, int]] = STAGE_WINDOWS,
    ):
        self.on_progress = on_progress
        self.windows: Dict[str, Tuple[int, int]] = dict(windows)
        self.percent = 0
        self.events: List[GenerationProgressEvent] = []

    def report(self, stage: str, message: str, fraction: float = 0.0) -> GenerationProgressEvent:
        percent = max(self.percent, stage_percent(stage, fraction, self.windows))
        self.percent = percent
        event = GenerationProgressEvent(stage=stage, percent=percent, message=message)
        self.events.append(event)

        if self.on_progress is not None:
            try:
                self.on_progress(stage, percent, message)
            except Exception as e:
                logger.warning(
                    "Progress callback raised; ignoring",
                    extra={"stage": stage, "percent": percent, "error": str(e)},
                )
        return event

    def step(self, stage: str, done: int, total: int, message: str) -> GenerationProgressEvent:
        """Report `done` of `total` items completed within a stage."""
        return self.report(stage, message, done / total if total else 1.0)
