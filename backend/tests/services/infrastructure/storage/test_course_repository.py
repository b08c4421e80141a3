"""
Tests for the course repository and quiz distribution
"""

import asyncio

import pytest

from app.core import PersistenceError, stable_id
from app.models.course import Course, CourseStatus, Episode, QuizQuestion
from app.services.infrastructure.storage import (
    FileBasedCourseRepository,
    SupabaseCourseRepository,
    create_storage_and_repository,
    distribute_quizzes,
    resolve_storage_backend,
)
from app.services.infrastructure.storage.course_repository import QUIZ_TIME_LIMIT_SECONDS


def make_course(episode_count=2, quiz_count=3, course_id="course-1"):
    course = Course(id=course_id, title="Safety 101", description="Basics", status=CourseStatus.READY)
    for index in range(episode_count):
        course.episodes.append(Episode(
            id=stable_id(course.id, "episode", index + 1),
            order=index + 1,
            title=f"Episode {index + 1}",
            script="Some narration.",
            duration=30,
            audio_url=f"https://cdn.example/audio-{index + 1}.mp3",
        ))
    course.quiz_questions = [
        QuizQuestion(question=f"Q{i}?", options=["a", "b", "c", "d"], correct_answer=i % 4)
        for i in range(quiz_count)
    ]
    return course


class TestDistributeQuizzes:
    def test_three_quizzes_five_episodes(self):
        assert [len(chunk) for chunk in distribute_quizzes([1, 2, 3], 5)] == [1, 1, 1, 0, 0]

    def test_ceil_share(self):
        assert distribute_quizzes([1, 2, 3, 4, 5], 2) == [[1, 2, 3], [4, 5]]

    def test_no_quizzes(self):
        assert distribute_quizzes([], 3) == [[], [], []]

    def test_no_episodes(self):
        assert distribute_quizzes([1, 2], 0) == []


class SlowFileRepository(FileBasedCourseRepository):
    """Suspends between rows so concurrent saves interleave."""

    async def _write_episode(self, batch, row):
        await asyncio.sleep(0)
        await super()._write_episode(batch, row)


class TestFileBasedCourseRepository:
    @pytest.mark.asyncio
    async def test_document_shape(self, tmp_path):
        repository = FileBasedCourseRepository(tmp_path)
        course = make_course()
        course.episodes[1].video_url = "https://cdn.example/video-2.mp4"

        await repository.save_course(course)
        document = repository.load_document("course-1")

        assert document["course"]["title"] == "Safety 101"
        assert document["course"]["status"] == "ready"
        assert "organization_id" not in document["course"]

        episodes = document["episodes"]
        assert [row["episode_order"] for row in episodes] == [1, 2]
        assert episodes[0]["video_url"] == "https://cdn.example/audio-1.mp3"
        assert episodes[1]["video_url"] == "https://cdn.example/video-2.mp4"
        assert all(row["course_id"] == "course-1" for row in episodes)

        quizzes = document["quiz_questions"]
        # ceil(3 / 2) = 2 for the first episode, 1 for the second
        assert [row["episode_id"] for row in quizzes] == [episodes[0]["id"]] * 2 + [episodes[1]["id"]]
        assert quizzes[0]["time_limit"] == QUIZ_TIME_LIMIT_SECONDS
        assert quizzes[0]["trigger_time"] == 50

    @pytest.mark.asyncio
    async def test_resave_overwrites_with_same_ids(self, tmp_path):
        repository = FileBasedCourseRepository(tmp_path)
        await repository.save_course(make_course())
        first = repository.load_document("course-1")
        await repository.save_course(make_course())
        second = repository.load_document("course-1")

        assert [row["id"] for row in first["quiz_questions"]] == [row["id"] for row in second["quiz_questions"]]
        assert len(list(tmp_path.glob("*.json"))) == 1

    @pytest.mark.asyncio
    async def test_get_course(self, tmp_path):
        repository = FileBasedCourseRepository(tmp_path)
        assert await repository.get_course("course-1") is None
        await repository.save_course(make_course())
        assert (await repository.get_course("course-1"))["id"] == "course-1"


class FakeQuery:
    def __init__(self, table, row):
        self.table = table
        self.row = row

    def execute(self):
        if self.table.name in self.table.client.failing_tables:
            raise RuntimeError(f"{self.table.name} insert rejected")
        self.table.client.rows.setdefault(self.table.name, []).append(self.row)
        return self


class FakeTable:
    def __init__(self, client, name):
        self.client = client
        self.name = name

    def upsert(self, row):
        return FakeQuery(self, row)


class FakeSupabase:
    def __init__(self, failing_tables=()):
        self.failing_tables = set(failing_tables)
        self.rows = {}

    def table(self, name):
        return FakeTable(self, name)


class TestSupabaseCourseRepository:
    @pytest.mark.asyncio
    async def test_writes_all_tables(self):
        client = FakeSupabase()
        await SupabaseCourseRepository(client).save_course(make_course())
        assert len(client.rows["courses"]) == 1
        assert len(client.rows["episodes"]) == 2
        assert len(client.rows["quiz_questions"]) == 3

    @pytest.mark.asyncio
    async def test_quiz_failures_are_skipped(self):
        client = FakeSupabase(failing_tables={"quiz_questions"})
        await SupabaseCourseRepository(client).save_course(make_course())
        assert len(client.rows["episodes"]) == 2
        assert "quiz_questions" not in client.rows

    @pytest.mark.asyncio
    async def test_episode_failure_is_fatal(self):
        client = FakeSupabase(failing_tables={"episodes"})
        with pytest.raises(PersistenceError, match="episode 1"):
            await SupabaseCourseRepository(client).save_course(make_course())

    @pytest.mark.asyncio
    async def test_course_failure_is_fatal(self):
        client = FakeSupabase(failing_tables={"courses"})
        with pytest.raises(PersistenceError, match="course-1"):
            await SupabaseCourseRepository(client).save_course(make_course())
        assert "episodes" not in client.rows


class TestBackendSelection:
    def test_explicit_backend_wins(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "local")
        monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co")
        monkeypatch.setenv("SUPABASE_SERVICE_KEY", "key")
        assert resolve_storage_backend() == "local"

    def test_auto_detects_local_without_credentials(self, monkeypatch):
        monkeypatch.delenv("STORAGE_BACKEND", raising=False)
        assert resolve_storage_backend() == "local"

    def test_supabase_backend_uses_given_client(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "supabase")
        storage, repository = create_storage_and_repository(client=FakeSupabase())
        assert isinstance(repository, SupabaseCourseRepository)


@pytest.mark.asyncio
async def test_concurrent_saves_do_not_mix_documents(tmp_path):
    repository = SlowFileRepository(tmp_path)
    first = make_course(episode_count=3, course_id="course-a")
    second = make_course(episode_count=2, quiz_count=1, course_id="course-b")

    await asyncio.gather(repository.save_course(first), repository.save_course(second))

    document_a = repository.load_document("course-a")
    document_b = repository.load_document("course-b")
    assert {row["course_id"] for row in document_a["episodes"]} == {"course-a"}
    assert {row["course_id"] for row in document_b["episodes"]} == {"course-b"}
    assert len(document_a["episodes"]) == 3
    assert len(document_b["episodes"]) == 2
    assert len(document_a["quiz_questions"]) == 3
    assert len(document_b["quiz_questions"]) == 1
    assert "course_id" not in document_a
