"""
Add-lesson submission.

Validates the form, fills in defaults, and issues exactly one insert.
The new lesson reaches the catalog through the next store snapshot;
nothing is added to the local list here.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from shikkha.schemas import LessonRecord, Track
from shikkha.utils import extract_video_id

from .errors import LessonValidationError, StoreError
from .store import LessonStore


logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass
class AddLessonForm:
    """Raw add-lesson form input, as typed by the user."""
    url: str = ""
    title: str = ""
    number: str = ""
    track: Track = Track.FUNDAMENTAL

    def reset(self):
        """Clear the text fields; the track choice is kept."""
        self.url = ""
        self.title = ""
        self.number = ""


def parse_lesson_number(raw: Optional[str]) -> Optional[int]:
    """
    Read a lesson number from form text.

    Leading digits are used ("12a" -> 12). Empty, non-numeric and
    non-positive input gives None.
    """
    if raw is None:
        return None
    match = _LEADING_INT.match(str(raw))
    if not match:
        return None
    value = int(match.group(1))
    return value if value > 0 else None


def build_lesson_record(form: AddLessonForm, existing_count: int) -> LessonRecord:
    """
    Turn form input into a storable record.

    Args:
        form: Submitted form
        existing_count: Number of lessons currently in the catalog

    Returns:
        LessonRecord with defaults applied

    Raises:
        LessonValidationError: If the URL has no YouTube id or the track is unknown
    """
    video_id = extract_video_id(form.url)
    if video_id is None:
        raise LessonValidationError("Invalid YouTube URL")

    try:
        track = Track(form.track)
    except ValueError:
        raise LessonValidationError(f"Unknown track: {form.track}")

    # Best effort: not guaranteed unique
    number = parse_lesson_number(form.number) or existing_count + 1
    title = (form.title or "").strip() or f"Lesson {number}"

    return LessonRecord(number=number, title=title, video_id=video_id, track=track.value)


class LessonSubmitter:
    """Writes validated lessons to the shared collection."""

    def __init__(self, store: LessonStore, collection: str):
        self.store = store
        self.collection = collection
        self.last_error: Optional[StoreError] = None

    def submit(self, form: AddLessonForm, existing_count: int) -> Optional[str]:
        """
        Validate and insert one lesson.

        On success the form is reset. A store failure is logged and leaves
        the form untouched.

        Returns:
            Key of the new document, or None if the write failed

        Raises:
            LessonValidationError: Before any write, for invalid input
        """
        record = build_lesson_record(form, existing_count)

        try:
            key = self.store.insert(self.collection, record.to_document())
        except StoreError as e:
            self.last_error = e
            logger.error(f"Add failed: {e}")
            return None

        self.last_error = None
        logger.info(f"Added lesson {record.number} ({record.video_id}) as {key}")
        form.reset()
        return key
