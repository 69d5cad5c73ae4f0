"""Shared fixtures for Shikkha tests."""

import pytest

from shikkha.catalog import MemoryLessonStore
from shikkha.schemas import Identity, Lesson
from shikkha.utils import load_seed_lessons


COLLECTION = "artifacts/test-app/public/data/lessons"


def make_lesson(number, title=None, track="Fundamental", key=None, video_id="abcdefghijk"):
    return Lesson(
        key=key or f"doc-{number}",
        number=number,
        title=title or f"Lesson {number}",
        video_id=video_id,
        track=track,
    )


def make_document(number, title=None, track="Fundamental", video_id="abcdefghijk"):
    return {"n": number, "t": title or f"Lesson {number}", "id": video_id, "track": track}


@pytest.fixture
def seed_lessons():
    return load_seed_lessons()


@pytest.fixture
def store():
    return MemoryLessonStore()


@pytest.fixture
def deferred_store():
    return MemoryLessonStore(deliver_immediately=False)


@pytest.fixture
def identity():
    return Identity(uid="user_001")
