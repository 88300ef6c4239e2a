"""
Caption tracks embedded in a YouTube watch page.

The watch page inlines the player response as JS; we cut the "captions"
object out by its neighbouring markers and parse it as JSON. This is
string surgery on markup YouTube controls. When the page layout changes,
extraction yields no tracks and the caller falls through to yt-dlp.
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit, urlunsplit, parse_qsl, urlencode

from lessoncraft.core.constants import (
    CAPTIONS_MARKER, VIDEO_DETAILS_MARKER, PREFERRED_CAPTION_LANGUAGES,
)

logger = logging.getLogger(__name__)


@dataclass
class CaptionTrack:
    language_code: str
    base_url: str = ""
    kind: Optional[str] = None       # None = creator-authored, "asr" = auto-generated
    name: str = ""

    @property
    def is_auto_generated(self) -> bool:
        return bool(self.kind)

    @classmethod
    def from_dict(cls, raw: dict) -> "CaptionTrack":
        name = raw.get('name') or {}
        if isinstance(name, dict):
            label = name.get('simpleText') or ''.join(
                run.get('text', '') for run in name.get('runs', []) if isinstance(run, dict)
            )
        else:
            label = str(name)
        return cls(
            language_code=raw.get('languageCode') or '',
            base_url=raw.get('baseUrl') or '',
            kind=raw.get('kind') or None,
            name=label,
        )


def extract_caption_tracks(video_page_body: str | None) -> list[CaptionTrack]:
    """
    Return the caption tracks listed in a watch page's player response.
    Empty list when the markers are missing or the slice is not valid JSON.
    """
    parts = (video_page_body or '').split(CAPTIONS_MARKER)
    if len(parts) <= 1:
        return []

    captions_raw = parts[1].split(VIDEO_DETAILS_MARKER)[0].replace('\n', '', 1)
    try:
        captions_json = json.loads(captions_raw)
        raw_tracks = captions_json['playerCaptionsTracklistRenderer']['captionTracks']
    except (ValueError, KeyError, TypeError) as e:
        logger.debug("Could not parse captions block: %s", e)
        return []

    if not isinstance(raw_tracks, list):
        return []
    return [CaptionTrack.from_dict(t) for t in raw_tracks if isinstance(t, dict)]


def choose_preferred_caption_track(tracks: list[CaptionTrack]) -> CaptionTrack | None:
    """
    Pick one track: creator-authored English first, then any English
    (auto-generated accepted), then whatever is listed first.
    """
    if not tracks:
        return None

    for language in PREFERRED_CAPTION_LANGUAGES:
        for track in tracks:
            if track.language_code == language and not track.kind:
                return track

    for language in PREFERRED_CAPTION_LANGUAGES:
        for track in tracks:
            if track.language_code == language:
                return track

    return tracks[0]


def with_query_param(url: str, key: str, value: str) -> str:
    """Return url with query parameter key set to value (replacing any existing)."""
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != key]
    query.append((key, value))
    return urlunsplit(parts._replace(query=urlencode(query)))
