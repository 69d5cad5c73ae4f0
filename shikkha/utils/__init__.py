"""Shikkha utilities."""

from .youtube import extract_video_id, YOUTUBE_ID_PATTERN
from .fixture_loader import load_seed_lessons, SEED_LESSONS_PATH

__all__ = [
    "extract_video_id",
    "YOUTUBE_ID_PATTERN",
    "load_seed_lessons",
    "SEED_LESSONS_PATH",
]
