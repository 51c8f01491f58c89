"""Extract YouTube video IDs from user input."""

import re
from typing import Optional

ID_CHARS = r"[A-Za-z0-9_-]{11}"

_BARE_ID = re.compile(rf"^{ID_CHARS}$")

# Checked in order; the first match wins.
_URL_PATTERNS = [
    re.compile(rf"youtube\.com/watch\?(?:.*&)?v=({ID_CHARS})"),
    re.compile(rf"youtu\.be/({ID_CHARS})"),
    re.compile(rf"youtube\.com/embed/({ID_CHARS})"),
    re.compile(rf"youtube\.com/shorts/({ID_CHARS})"),
]


def extract_video_id(text: str) -> Optional[str]:
    """
    Extract the 11-character video ID from a bare ID or a YouTube URL.

    Supports watch, youtu.be, embed and shorts URLs. Returns None when
    nothing matches.
    """
    text = text.strip()

    if _BARE_ID.match(text):
        return text

    for pattern in _URL_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)

    return None


def watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"
