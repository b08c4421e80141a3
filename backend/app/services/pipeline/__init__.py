"""
Pipeline services - the course generation flow.

Pipeline Stages:
1. Extract - document text (external service, placeholder fallback)
2. Photos - reference images to durable storage
3. Script - segments and quiz questions (provider ladder, offline fallback)
4. Audio - narration per segment, scenes per episode
5. Video - lip-sync or text-to-video ladder per episode
6. Persist - course graph to the repository

The orchestrator lives in `orchestrator.py`; import it from there to keep
this package import cheap.
"""

from .errors import StageError, StageErrorKind, StageResult

__all__ = [
    "StageError",
    "StageErrorKind",
    "StageResult",
]
