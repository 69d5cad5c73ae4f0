"""
Player helpers - YouTube URLs and the embedded player.
"""

import html
from urllib.parse import quote


YOUTUBE_THUMBNAIL_URL = "https://img.youtube.com/vi/{video_id}/mqdefault.jpg"
YOUTUBE_EMBED_URL = "https://www.youtube.com/embed/{video_id}?autoplay=1&rel=0"
YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v={video_id}"


def _safe(video_id: str) -> str:
    return quote(video_id, safe="-_")


def thumbnail_url(video_id: str) -> str:
    return YOUTUBE_THUMBNAIL_URL.format(video_id=_safe(video_id))


def embed_url(video_id: str) -> str:
    return YOUTUBE_EMBED_URL.format(video_id=_safe(video_id))


def watch_url(video_id: str) -> str:
    return YOUTUBE_WATCH_URL.format(video_id=_safe(video_id))


def render_player(video_id: str, title: str = "") -> str:
    """
    Render a responsive 16:9 autoplaying embed.

    Args:
        video_id: YouTube video id
        title: Accessible frame title

    Returns:
        HTML string for st.components.v1.html / st.markdown
    """
    return f"""
    <div style="position: relative; padding-top: 56.25%; background: black; border-radius: 16px; overflow: hidden;">
        <iframe src="{embed_url(video_id)}"
                title="{html.escape(title)}"
                style="position: absolute; inset: 0; width: 100%; height: 100%; border: 0;"
                allow="accelerometer; autoplay; clipboard-write; encrypted-media; gyroscope; picture-in-picture"
                allowfullscreen></iframe>
    </div>
    """
