"""
Helpers for videos hosted on YouTube
"""

import re
from typing import Optional

YOUTUBE_PATTERNS = [
    re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/|youtube\.com/v/|youtube\.com/watch\?.*v=)([^#&?/]*)"),
    re.compile(r"youtube\.com/shorts/([^#&?/]*)"),
    re.compile(r"youtube\.com/live/([^#&?/]*)"),
]


def extract_youtube_video_id(url: Optional[str]) -> Optional[str]:
    """Video id from watch, short-link, embed, v/, shorts or live URLs"""
    if not url:
        return None
    for pattern in YOUTUBE_PATTERNS:
        match = pattern.search(url)
        if match and match.group(1):
            return match.group(1)
    return None


def is_valid_youtube_url(url: Optional[str]) -> bool:
    return extract_youtube_video_id(url) is not None


def youtube_embed_url(video_id: str) -> str:
    return f"https://www.youtube.com/embed/{video_id}"


def youtube_thumbnail_url(video_id: str, quality: str = "hqdefault") -> str:
    return f"https://img.youtube.com/vi/{video_id}/{quality}.jpg"
