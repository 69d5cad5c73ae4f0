"""
Catalog view model and renderer.

Provides:
- Search/track filtering of the synchronized lesson list
- Dashboard totals per track
- HTML lesson cards for the grid
"""

import html
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from shikkha.schemas import ALL_TRACKS, Lesson, Track

from .player import thumbnail_url


# Filter chips in display order
TRACK_FILTERS = [ALL_TRACKS] + [track.value for track in Track]

TRACK_FILTER_LABELS = {
    ALL_TRACKS: "সব ক্লাস",
}

TRACK_STYLES = {
    Track.FUNDAMENTAL.value: {"color": "#f97316", "icon": "🧱"},
    Track.ENGINEERING.value: {"color": "#3b82f6", "icon": "💻"},
    Track.MARKETING.value: {"color": "#10b981", "icon": "📈"},
}

DEFAULT_TRACK_STYLE = {"color": "#64748b", "icon": "🎬"}


@dataclass
class CatalogStats:
    """Totals over the full synchronized set (independent of filters)."""
    total: int = 0
    by_track: dict[str, int] = field(default_factory=lambda: {t.value: 0 for t in Track})

    @property
    def fundamental(self) -> int:
        return self.by_track[Track.FUNDAMENTAL.value]

    @property
    def engineering(self) -> int:
        return self.by_track[Track.ENGINEERING.value]

    @property
    def marketing(self) -> int:
        return self.by_track[Track.MARKETING.value]


def track_filter_label(track: str) -> str:
    return TRACK_FILTER_LABELS.get(track, track)


def matches_search(lesson: Lesson, search_query: str) -> bool:
    """Case-insensitive title substring, or substring of the lesson number."""
    if not search_query:
        return True
    return (
        search_query.lower() in lesson.title.lower()
        or search_query in str(lesson.number)
    )


def matches_track(lesson: Lesson, active_track: str) -> bool:
    return active_track == ALL_TRACKS or lesson.track == active_track


def filter_lessons(
    lessons: Iterable[Lesson],
    search_query: str = "",
    active_track: str = ALL_TRACKS,
) -> list[Lesson]:
    """
    Visible subset of the catalog, order preserved.

    A lesson is shown when it matches both the search text and the track.
    """
    return [
        lesson for lesson in lessons
        if matches_search(lesson, search_query) and matches_track(lesson, active_track)
    ]


def compute_catalog_stats(lessons: Sequence[Lesson]) -> CatalogStats:
    """
    Count lessons in total and per known track.

    Lessons with an unrecognised track count toward the total only.
    """
    stats = CatalogStats(total=len(lessons))
    for lesson in lessons:
        if lesson.track in stats.by_track:
            stats.by_track[lesson.track] += 1
    return stats


def get_catalog_css() -> str:
    """Get CSS styles for the lesson grid."""
    return """
    <style>
    .lesson-card {
        background: white;
        border: 1px solid #e2e8f0;
        border-radius: 16px;
        overflow: hidden;
        margin-bottom: 0.5em;
    }
    .lesson-thumb {
        position: relative;
        aspect-ratio: 16 / 9;
        background: #0f172a;
    }
    .lesson-thumb img {
        width: 100%;
        height: 100%;
        object-fit: cover;
        opacity: 0.9;
    }
    .lesson-number {
        position: absolute;
        top: 0.6em;
        left: 0.6em;
        background: #2563eb;
        color: white;
        font-size: 0.7em;
        font-weight: 800;
        padding: 0.2em 0.6em;
        border-radius: 6px;
    }
    .lesson-body {
        padding: 0.8em 1em;
    }
    .lesson-track {
        font-size: 0.65em;
        font-weight: 900;
        text-transform: uppercase;
        letter-spacing: 0.1em;
    }
    .lesson-title {
        font-weight: 700;
        color: #1e293b;
        line-height: 1.4;
        margin-top: 0.3em;
    }
    .catalog-empty {
        text-align: center;
        color: #94a3b8;
        padding: 3em 0;
    }
    </style>
    """


def render_lesson_card(lesson: Lesson) -> str:
    """Render one grid card (thumbnail, class number, track, title)."""
    style = TRACK_STYLES.get(lesson.track, DEFAULT_TRACK_STYLE)
    title = html.escape(lesson.title)

    return f"""
    <div class="lesson-card">
        <div class="lesson-thumb">
            <img src="{thumbnail_url(lesson.video_id)}" alt="{title}">
            <span class="lesson-number">Class {lesson.number}</span>
        </div>
        <div class="lesson-body">
            <span class="lesson-track" style="color: {style['color']};">{style['icon']} {html.escape(lesson.track)}</span>
            <div class="lesson-title">{title}</div>
        </div>
    </div>
    """


def render_empty_state(search_query: str = "") -> str:
    if search_query:
        message = f"“{html.escape(search_query)}” এর জন্য কোনো ক্লাস পাওয়া যায়নি"
    else:
        message = "কোনো ক্লাস পাওয়া যায়নি"
    return f'<div class="catalog-empty">{message}</div>'
