"""
Shikkha Schemas - Pydantic models for the lesson catalog.

This module exports all schema classes for:
- Lesson: stored lesson records, tracks
- Session: identity and synchronization state
"""

# Lesson schemas
from .lesson import (
    ALL_TRACKS,
    VIDEO_ID_LENGTH,
    Track,
    LessonRecord,
    Lesson,
)

# Session schemas
from .session import (
    SyncState,
    Identity,
)

__all__ = [
    # Lesson
    'ALL_TRACKS',
    'VIDEO_ID_LENGTH',
    'Track',
    'LessonRecord',
    'Lesson',
    # Session
    'SyncState',
    'Identity',
]
