"""
YouTube URL parsing.

Extracts the 11-character video id from the common URL shapes:
youtu.be/<id>, watch?v=<id>, ...&v=<id>, embed/<id>, v/<id>, u/<x>/<id>.
"""

import re
from typing import Optional

from shikkha.schemas import VIDEO_ID_LENGTH


YOUTUBE_ID_PATTERN = re.compile(r"^.*(youtu\.be/|v/|u/\w/|embed/|watch\?v=|&v=)([^#&?]*).*")


def extract_video_id(url: Optional[str]) -> Optional[str]:
    """
    Extract a YouTube video id from a URL.

    Args:
        url: Arbitrary text (may be empty, malformed, or not a YouTube URL)

    Returns:
        The video id, or None when no segment of exactly 11 characters
        follows a recognised prefix. Never raises.
    """
    if not isinstance(url, str):
        return None

    match = YOUTUBE_ID_PATTERN.match(url)
    if not match:
        return None

    candidate = match.group(2)
    return candidate if len(candidate) == VIDEO_ID_LENGTH else None
