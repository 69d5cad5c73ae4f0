"""
Lesson schemas for Shikkha.

Defines Pydantic models for the lesson catalog:
- Track enumeration (closed set of subject categories)
- LessonRecord: the stored document shape {n, t, id, track}
- Lesson: a stored record plus the opaque key assigned by the store
"""

from pydantic import BaseModel, ConfigDict, Field, StrictInt
from enum import Enum


# Sentinel used by the track filter, never stored on a lesson
ALL_TRACKS = "All"

VIDEO_ID_LENGTH = 11

# Fields that make up the stored document; anything else stays client-side
WIRE_FIELDS = {"number", "title", "video_id", "track"}


class Track(str, Enum):
    FUNDAMENTAL = "Fundamental"
    ENGINEERING = "Engineering"
    MARKETING = "Marketing"


class LessonRecord(BaseModel):
    """
    Lesson document as written to and read from the store.

    Field names on the wire are the short aliases (n, t, id, track).
    `track` is kept as a plain string so documents written by other
    clients with an unknown track still load; use `known_track` to map
    it onto the enum.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True, str_strip_whitespace=True)

    number: StrictInt = Field(..., alias="n", gt=0)
    title: str = Field(..., alias="t", min_length=1)
    video_id: str = Field(..., alias="id", min_length=VIDEO_ID_LENGTH, max_length=VIDEO_ID_LENGTH)
    track: str

    @property
    def known_track(self) -> Track | None:
        try:
            return Track(self.track)
        except ValueError:
            return None

    def to_document(self) -> dict:
        """Serialize to the wire shape."""
        return self.model_dump(by_alias=True, mode="json", include=WIRE_FIELDS)


class Lesson(LessonRecord):
    """A lesson as held by the catalog: record + store document key."""
    key: str

    @classmethod
    def from_document(cls, key: str, data: dict) -> "Lesson":
        return cls.model_validate({**data, "key": key})
