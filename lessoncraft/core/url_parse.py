"""
YouTube URL parsing and validation.
"""

from urllib.parse import urlsplit, parse_qs

from lessoncraft.core.constants import (
    ErrorCode, VIDEO_ID_LENGTH, SHORT_LINK_HOSTS, MAIN_HOSTS, PATH_ID_PREFIXES,
    YOUTUBE_WATCH_URL,
)
from lessoncraft.core.error_codes import ActivityError


def _is_video_id(token) -> bool:
    return bool(token) and len(token) == VIDEO_ID_LENGTH


def extract_video_id(url) -> str | None:
    """
    Extract the 11-character video_id from a YouTube URL.

    Accepts youtu.be/<id>, youtube.com/watch?v=<id> (also m. and www.),
    youtube.com/shorts/<id> and youtube.com/embed/<id>.
    Returns None for anything else. Never raises.
    """
    if not isinstance(url, str):
        return None
    url = url.strip()
    if not url:
        return None

    try:
        parsed = urlsplit(url)
        host = parsed.hostname or ''
        query = parse_qs(parsed.query)
    except ValueError:
        return None

    if host.startswith('www.'):
        host = host[len('www.'):]

    segments = [part for part in parsed.path.split('/') if part]

    if host in SHORT_LINK_HOSTS:
        if segments and _is_video_id(segments[0]):
            return segments[0]
        return None

    if host in MAIN_HOSTS:
        v = query.get('v', [None])[0]
        if _is_video_id(v):
            return v
        if (len(segments) >= 2 and segments[0] in PATH_ID_PREFIXES
                and _is_video_id(segments[1])):
            return segments[1]

    return None


def validate_youtube_url(url) -> str:
    """
    Validate a YouTube URL and return the video_id.
    Raises ActivityError if invalid.
    """
    video_id = extract_video_id(url)
    if not video_id:
        raise ActivityError(ErrorCode.INVALID_URL, "Invalid YouTube URL", details=str(url))
    return video_id


def build_watch_url(video_id: str) -> str:
    """Canonical watch-page URL for a video_id."""
    return YOUTUBE_WATCH_URL.format(video_id=video_id)
