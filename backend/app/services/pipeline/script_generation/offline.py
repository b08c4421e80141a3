"""
Deterministic offline script generator.

Used when no content provider is configured or all of them fail. It never
calls out and never raises, so the script stage always produces something:

    - paragraphs = blank-line separated blocks of at least 30 characters
    - segments   = paragraphs bucketed evenly into at most 5 chunks, each
                   chunk's text capped at 500 characters
    - quizzes    = exactly 3 template questions at 30 / 60 / 90 percent,
                   independent of how many segments were produced
"""

import re
from typing import List

from app.config.pipeline import (
    OFFLINE_MAX_SEGMENTS,
    OFFLINE_MIN_PARAGRAPH_CHARS,
    OFFLINE_SCRIPT_CHARS,
    QUIZ_TRIGGER_PERCENTAGES,
)
from app.models.course import GeneratedScript, QuizQuestion, ScriptSegment

_BLANK_LINE = re.compile(r"\n\s*\n")
_FIRST_SENTENCE = re.compile(r"^(.+?[.!?])(?:\s|$)", re.DOTALL)

OFFLINE_SUMMARY = (
    "This training covers essential concepts and best practices for your professional development."
)
GENERIC_KEY_POINTS = [
    "Understanding core principles",
    "Applying best practices",
    "Following guidelines",
]
KEY_POINT_CHARS = 120


def split_paragraphs(text: str, min_chars: int = OFFLINE_MIN_PARAGRAPH_CHARS) -> List[str]:
    """Blank-line separated paragraphs with at least `min_chars` characters"""
    paragraphs = (" ".join(block.split()) for block in _BLANK_LINE.split(text or ""))
    return [paragraph for paragraph in paragraphs if len(paragraph) >= min_chars]


def bucket_evenly(items: List[str], max_buckets: int) -> List[List[str]]:
    """Split items into min(max_buckets, len(items)) non-empty, contiguous,
    near-equal buckets. Earlier buckets take the remainder."""
    count = min(max_buckets, len(items))
    if count == 0:
        return []
    size, remainder = divmod(len(items), count)
    buckets: List[List[str]] = []
    start = 0
    for index in range(count):
        end = start + size + (1 if index < remainder else 0)
        buckets.append(items[start:end])
        start = end
    return buckets


def _key_points(paragraphs: List[str]) -> List[str]:
    points = []
    for paragraph in paragraphs[:3]:
        match = _FIRST_SENTENCE.match(paragraph)
        sentence = (match.group(1) if match else paragraph).strip()
        points.append(sentence[:KEY_POINT_CHARS])
    return points or list(GENERIC_KEY_POINTS)


def template_quizzes(title: str) -> List[QuizQuestion]:
    """Three generic comprehension questions, one per trigger point"""
    first, second, third = QUIZ_TRIGGER_PERCENTAGES
    return [
        QuizQuestion(
            question=f"What is the main focus of {title}?",
            options=[
                "Following established procedures",
                "Completing tasks quickly",
                "Working independently",
                "Minimizing communication",
            ],
            correct_answer=0,
            explanation="Following established procedures ensures consistency and compliance.",
            trigger_percentage=first,
        ),
        QuizQuestion(
            question="What should you do when encountering an unfamiliar situation?",
            options=[
                "Ignore it and move on",
                "Consult the appropriate resources or ask for guidance",
                "Make assumptions and proceed",
                "Wait for someone else to handle it",
            ],
            correct_answer=1,
            explanation="Consulting resources or asking for guidance ensures proper handling of situations.",
            trigger_percentage=second,
        ),
        QuizQuestion(
            question="What is the best practice for continuous improvement?",
            options=[
                "Avoid feedback",
                "Stay with current methods",
                "Regularly review and update knowledge",
                "Focus only on speed",
            ],
            correct_answer=2,
            explanation="Regular review and updating of knowledge supports continuous improvement.",
            trigger_percentage=third,
        ),
    ]


class OfflineScriptGenerator:
    """Builds a course script from the source text alone."""

    def __init__(
        self,
        max_segments: int = OFFLINE_MAX_SEGMENTS,
        min_paragraph_chars: int = OFFLINE_MIN_PARAGRAPH_CHARS,
        script_chars: int = OFFLINE_SCRIPT_CHARS,
    ):
        self.max_segments = max_segments
        self.min_paragraph_chars = min_paragraph_chars
        self.script_chars = script_chars

    def generate(self, text: str, title: str) -> GeneratedScript:
        paragraphs = split_paragraphs(text, self.min_paragraph_chars)
        segments = [
            ScriptSegment(
                title=f"Section {index + 1}: Key Concepts",
                script=" ".join(chunk)[:self.script_chars].strip(),
                key_points=_key_points(chunk),
            )
            for index, chunk in enumerate(bucket_evenly(paragraphs, self.max_segments))
        ]
        return GeneratedScript(
            segments=segments,
            quiz_questions=template_quizzes(title),
            summary=OFFLINE_SUMMARY,
            source="offline",
        )
