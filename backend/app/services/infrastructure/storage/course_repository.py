"""
Course repository - the persistence gateway for finished courses.

Writes the Course -> Episode -> QuizQuestion rows in that order, once, at
the end of a run. Every write is an upsert keyed by a deterministic id, so
retrying a run for the same course overwrites the previous rows.

Failure policy:
    - course or episode row fails  -> PersistenceError (the run fails)
    - a quiz row fails             -> logged and skipped

Classes:
    CourseRepository: Abstract interface
    SupabaseCourseRepository: courses / episodes / quiz_questions tables
    FileBasedCourseRepository: one JSON document per course on disk
"""

import asyncio
import json
import math
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, TypeVar

from app.config import COURSE_DATA_DIR
from app.core import PersistenceError, get_logger, stable_id
from app.models.course import Course, Episode, QuizQuestion

logger = get_logger(__name__, component="course_repository")

QUIZ_TIME_LIMIT_SECONDS = 15

T = TypeVar("T")


def distribute_quizzes(quizzes: Sequence[T], episode_count: int) -> List[List[T]]:
    """Split a flat quiz list into per-episode chunks of ceil(Q / E).

    With 3 questions and 5 episodes the first three episodes get one each
    and the last two get none.
    """
    if episode_count <= 0:
        return []
    per_episode = math.ceil(len(quizzes) / episode_count) if quizzes else 0
    return [
        list(quizzes[index * per_episode:(index + 1) * per_episode])
        for index in range(episode_count)
    ]


def course_row(course: Course) -> Dict[str, Any]:
    row = {
        "id": course.id,
        "title": course.title,
        "description": course.description,
        "thumbnail_url": course.thumbnail_url,
        "status": course.status.value,
        "created_at": course.created_at,
        "updated_at": course.updated_at,
    }
    if course.organization_id:
        row["organization_id"] = course.organization_id
    return row


def episode_row(course: Course, episode: Episode, index: int) -> Dict[str, Any]:
    return {
        "id": episode.id,
        "course_id": course.id,
        "title": episode.title,
        "description": episode.description,
        "episode_order": index + 1,
        "duration": episode.duration,
        "video_url": episode.media_url,
        "status": episode.status.value,
        "created_at": course.created_at,
        "updated_at": course.updated_at,
    }


def quiz_row(episode: Episode, quiz: QuizQuestion, index: int, created_at: str) -> Dict[str, Any]:
    return {
        "id": stable_id(episode.id, "quiz", index + 1),
        "episode_id": episode.id,
        "question_text": quiz.question,
        "options": list(quiz.options),
        "correct_answer": quiz.correct_answer,
        "explanation": quiz.explanation,
        "trigger_time": quiz.trigger_percentage,
        "time_limit": QUIZ_TIME_LIMIT_SECONDS,
        "created_at": created_at,
    }


class CourseRepository(ABC):
    """
    Abstract persistence gateway.

    `save_course` either durably stores the course graph or raises
    PersistenceError with a descriptive message.
    """

    async def save_course(self, course: Course) -> None:
        course.updated_at = datetime.now().isoformat()
        batch = self._begin(course)
        await self._write_course(batch, course_row(course))

        quiz_sets = distribute_quizzes(course.quiz_questions, len(course.episodes))
        skipped = 0
        for index, episode in enumerate(course.episodes):
            await self._write_episode(batch, episode_row(course, episode, index))
            for quiz_index, quiz in enumerate(quiz_sets[index]):
                row = quiz_row(episode, quiz, quiz_index, course.updated_at)
                if not await self._write_quiz(batch, row):
                    skipped += 1

        await self._commit(batch)

        logger.info(
            "Course persisted",
            extra={
                "course_id": course.id,
                "episodes": len(course.episodes),
                "quiz_questions": len(course.quiz_questions) - skipped,
                "quiz_skipped": skipped,
            },
        )

    def _begin(self, course: Course) -> Any:
        """Per-save state handed to every write hook; None when unused."""
        return None

    async def _commit(self, batch: Any) -> None:
        """Called once after every row was written."""

    @abstractmethod
    async def _write_course(self, batch: Any, row: Dict[str, Any]) -> None:
        """Upsert the course row; raise PersistenceError on failure."""

    @abstractmethod
    async def _write_episode(self, batch: Any, row: Dict[str, Any]) -> None:
        """Upsert one episode row; raise PersistenceError on failure."""

    @abstractmethod
    async def _write_quiz(self, batch: Any, row: Dict[str, Any]) -> bool:
        """Upsert one quiz row; return False (never raise) on failure."""

    @abstractmethod
    async def get_course(self, course_id: str) -> Optional[Dict[str, Any]]:
        """Read back the stored course row, or None."""


class SupabaseCourseRepository(CourseRepository):
    """Supabase tables. The SDK is synchronous, so calls run in a thread."""

    COURSES_TABLE = "courses"
    EPISODES_TABLE = "episodes"
    QUIZ_TABLE = "quiz_questions"

    def __init__(self, client: Any):
        self._client = client

    async def _upsert(self, table: str, row: Dict[str, Any]) -> Any:
        return await asyncio.to_thread(
            lambda: self._client.table(table).upsert(row).execute()
        )

    async def _write_course(self, batch: Any, row: Dict[str, Any]) -> None:
        try:
            await self._upsert(self.COURSES_TABLE, row)
        except Exception as e:
            raise PersistenceError(f"Failed to save course {row['id']}: {e}") from e

    async def _write_episode(self, batch: Any, row: Dict[str, Any]) -> None:
        try:
            await self._upsert(self.EPISODES_TABLE, row)
        except Exception as e:
            raise PersistenceError(
                f"Failed to save episode {row['episode_order']} of course {row['course_id']}: {e}"
            ) from e

    async def _write_quiz(self, batch: Any, row: Dict[str, Any]) -> bool:
        try:
            await self._upsert(self.QUIZ_TABLE, row)
            return True
        except Exception as e:
            logger.warning(
                "Skipping quiz question that failed to save",
                extra={"quiz_id": row["id"], "error": str(e)},
            )
            return False

    async def get_course(self, course_id: str) -> Optional[Dict[str, Any]]:
        response = await asyncio.to_thread(
            lambda: self._client.table(self.COURSES_TABLE).select("*").eq("id", course_id).execute()
        )
        return response.data[0] if response.data else None


class FileBasedCourseRepository(CourseRepository):
    """
    Stores each course as {course_id}.json with the same row shapes the
    database would receive. Rewriting the file is the upsert.
    """

    def __init__(self, storage_dir: Optional[Path] = None):
        self._storage_dir = Path(storage_dir) if storage_dir else COURSE_DATA_DIR
        self._storage_dir.mkdir(parents=True, exist_ok=True)

    def _course_file(self, course_id: str) -> Path:
        return self._storage_dir / f"{course_id}.json"

    def _begin(self, course: Course) -> Dict[str, Any]:
        return {"course_id": course.id, "course": None, "episodes": [], "quiz_questions": []}

    async def _commit(self, batch: Dict[str, Any]) -> None:
        course_id = batch.pop("course_id")
        try:
            with open(self._course_file(course_id), "w", encoding="utf-8") as f:
                json.dump(batch, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise PersistenceError(f"Failed to save course {course_id}: {e}") from e

    async def _write_course(self, batch: Dict[str, Any], row: Dict[str, Any]) -> None:
        batch["course"] = row

    async def _write_episode(self, batch: Dict[str, Any], row: Dict[str, Any]) -> None:
        batch["episodes"].append(row)

    async def _write_quiz(self, batch: Dict[str, Any], row: Dict[str, Any]) -> bool:
        batch["quiz_questions"].append(row)
        return True

    def load_document(self, course_id: str) -> Optional[Dict[str, Any]]:
        """Full stored document (course, episodes, quiz_questions)"""
        course_file = self._course_file(course_id)
        if not course_file.exists():
            return None
        with open(course_file, "r", encoding="utf-8") as f:
            return json.load(f)

    async def get_course(self, course_id: str) -> Optional[Dict[str, Any]]:
        document = self.load_document(course_id)
        return document["course"] if document else None
