"""
Shikkha Viewer - View model and rendering for the lesson catalog.

This module provides:
- Search/track filtering and dashboard totals
- Lesson card rendering
- YouTube thumbnail, embed and watch URLs
"""

from .catalog import (
    TRACK_FILTERS,
    TRACK_STYLES,
    CatalogStats,
    track_filter_label,
    matches_search,
    matches_track,
    filter_lessons,
    compute_catalog_stats,
    get_catalog_css,
    render_lesson_card,
    render_empty_state,
)

from .player import (
    thumbnail_url,
    embed_url,
    watch_url,
    render_player,
)

__all__ = [
    # Catalog
    "TRACK_FILTERS",
    "TRACK_STYLES",
    "CatalogStats",
    "track_filter_label",
    "matches_search",
    "matches_track",
    "filter_lessons",
    "compute_catalog_stats",
    "get_catalog_css",
    "render_lesson_card",
    "render_empty_state",
    # Player
    "thumbnail_url",
    "embed_url",
    "watch_url",
    "render_player",
]
