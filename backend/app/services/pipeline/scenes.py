"""
Scene Segmenter

Splits one episode script into timed scenes:

    sentences      = punctuation-bounded runs ("...?" / "...!" / "...")
    scene_count    = min(ceil(sentences / 3), 6)
    group_size     = ceil(sentences / scene_count)
    scene.duration = text heuristic (see timing.py)
    scene.start    = previous scene's end; the first scene starts at the
                     episode's offset on the course timeline

Images are assigned round-robin. Empty groups produce no scene.
"""

import math
import re
from typing import List, Sequence

from app.config.pipeline import MAX_SCENES_PER_EPISODE, SENTENCES_PER_SCENE
from app.models.course import Scene

from .timing import estimate_duration

# Trailing text without closing punctuation still counts as a sentence
_SENTENCE = re.compile(r"[^.!?]+(?:[.!?]+|$)")


def split_sentences(script: str) -> List[str]:
    sentences = [match.group(0).strip() for match in _SENTENCE.finditer(script or "")]
    return [sentence for sentence in sentences if sentence]


def group_sentences(sentences: Sequence[str]) -> List[List[str]]:
    if not sentences:
        return []
    scene_count = min(math.ceil(len(sentences) / SENTENCES_PER_SCENE), MAX_SCENES_PER_EPISODE)
    group_size = math.ceil(len(sentences) / scene_count)
    return [
        list(sentences[index * group_size:(index + 1) * group_size])
        for index in range(scene_count)
    ]


def segment_scenes(
    script: str,
    image_urls: Sequence[str],
    episode_id: str,
    episode_start_time: int,
) -> List[Scene]:
    scenes: List[Scene] = []
    cursor = episode_start_time

    for group in group_sentences(split_sentences(script)):
        text = " ".join(group).strip()
        if not text:
            continue
        index = len(scenes)
        duration = estimate_duration(text)
        scenes.append(
            Scene(
                id=f"{episode_id}-scene-{index + 1}",
                order=index,
                script=text,
                image_url=image_urls[index % len(image_urls)] if image_urls else None,
                duration=duration,
                start_time=cursor,
            )
        )
        cursor += duration

    return scenes
