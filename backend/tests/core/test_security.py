import uuid

import pytest

from app.core.security import (
    new_id,
    sanitize_filename,
    sanitize_object_name,
    stable_id,
    validate_job_id,
    validate_path_within_directory,
)


class TestSanitizeFilename:
    def test_basic_sanitization(self):
        assert sanitize_filename("safe_file.txt") == "safe_file.txt"

    def test_path_traversal_removal(self):
        assert sanitize_filename("../../etc/passwd") == "passwd"
        assert sanitize_filename("..\\windows\\system32") == "system32"

    def test_null_byte_injection(self):
        assert sanitize_filename("file.txt\x00.exe") == "file.txt.exe"

    def test_dangerous_characters(self):
        assert sanitize_filename('file"name.txt') == "filename.txt"
        assert sanitize_filename("<handbook>.pdf") == "handbook.pdf"

    def test_empty_result_raises_error(self):
        with pytest.raises(ValueError):
            sanitize_filename("   ...   ")


class TestSanitizeObjectName:
    def test_spaces_and_brackets_become_underscores(self):
        assert sanitize_object_name("My Team Photo (1).JPG") == "My_Team_Photo_1_.JPG"

    def test_unusable_name_uses_fallback(self):
        assert sanitize_object_name("...", fallback="photo-0") == "photo-0"

    def test_length_is_capped(self):
        assert len(sanitize_object_name("a" * 300 + ".png")) == 120


class TestValidateJobId:
    def test_valid_uuid(self):
        assert validate_job_id("12345678-1234-1234-1234-1234567890ab") is True
        assert validate_job_id(new_id()) is True

    def test_invalid_format(self):
        assert validate_job_id("invalid-uuid") is False
        assert validate_job_id("12345678-1234-1234-1234-1234567890ab/../passwd") is False


class TestStableId:
    def test_same_inputs_same_id(self):
        assert stable_id("course-1", "episode", 2) == stable_id("course-1", "episode", 2)

    def test_different_inputs_different_ids(self):
        ids = {
            stable_id("course-1", "episode", 1),
            stable_id("course-1", "episode", 2),
            stable_id("course-2", "episode", 1),
            stable_id("course-1", "quiz", 1),
        }
        assert len(ids) == 4

    def test_is_a_uuid(self):
        assert uuid.UUID(stable_id("course-1", "episode", 1)).version == 5


class TestValidatePathWithinDirectory:
    def test_safe_path(self, tmp_path):
        assert validate_path_within_directory(tmp_path / "a" / "b.json", tmp_path) is True

    def test_traversal_is_rejected(self, tmp_path):
        assert validate_path_within_directory(tmp_path / ".." / "escape.json", tmp_path) is False
