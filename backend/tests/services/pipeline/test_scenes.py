"""
Tests for scene segmentation and duration heuristics
"""

import pytest

from app.services.pipeline.scenes import group_sentences, segment_scenes, split_sentences
from app.services.pipeline.timing import (
    estimate_duration,
    estimate_duration_from_bytes,
    round_half_up,
)


def script_with(sentence_count):
    return " ".join(f"Sentence number {index} is about safe lifting." for index in range(sentence_count))


class TestTiming:
    @pytest.mark.parametrize("value,expected", [(0.5, 1), (1.5, 2), (2.5, 3), (2.49, 2)])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_text_duration(self):
        # 750 chars = 150 words = 60 seconds at 150 wpm
        assert estimate_duration("x" * 750) == 60
        assert estimate_duration("short") == 10
        assert estimate_duration("") == 10

    def test_byte_duration(self):
        assert estimate_duration_from_bytes(61000) == 31
        assert estimate_duration_from_bytes(0) == 10


class TestSplitSentences:
    def test_punctuation_and_trailing_text(self):
        assert split_sentences("Stop! Look around... Is it safe? Then proceed") == [
            "Stop!",
            "Look around...",
            "Is it safe?",
            "Then proceed",
        ]

    def test_empty(self):
        assert split_sentences("") == []
        assert split_sentences(None) == []


class TestGroupSentences:
    def test_three_per_scene(self):
        assert [len(group) for group in group_sentences(["s"] * 7)] == [3, 3, 1]

    def test_capped_at_six_scenes(self):
        groups = group_sentences(["s"] * 40)
        assert len(groups) <= 6
        assert sum(len(group) for group in groups) == 40


class TestSegmentScenes:
    def test_scenes_are_contiguous_from_offset(self):
        scenes = segment_scenes(script_with(9), [], "ep-1", 120)
        assert len(scenes) == 3
        assert scenes[0].start_time == 120
        for previous, current in zip(scenes, scenes[1:]):
            assert current.start_time == previous.end_time
        assert [scene.order for scene in scenes] == [0, 1, 2]
        assert scenes[1].id == "ep-1-scene-2"

    def test_long_script_has_at_most_six_scenes(self):
        scenes = segment_scenes(script_with(50), [], "ep-1", 0)
        assert len(scenes) <= 6
        assert all(scene.duration >= 10 for scene in scenes)

    def test_images_assigned_round_robin(self):
        scenes = segment_scenes(script_with(12), ["a.jpg", "b.jpg"], "ep-1", 0)
        assert [scene.image_url for scene in scenes] == ["a.jpg", "b.jpg", "a.jpg", "b.jpg"]

    def test_no_images(self):
        scenes = segment_scenes(script_with(2), [], "ep-1", 0)
        assert scenes[0].image_url is None

    def test_empty_script_has_no_scenes(self):
        assert segment_scenes("   ", ["a.jpg"], "ep-1", 0) == []
