"""
Captions fetching: the three ways we know to get a transcript.

  1. youtube-transcript-api (cheap, breaks whenever YouTube changes things)
  2. the caption-track URL scraped from the watch page
  3. yt-dlp subtitle download into a temp directory (slow, most robust)

Each returns transcript text, "" meaning nothing usable. Failures may raise;
transcript.acquire_transcript decides what to do with them.
"""

import logging
from pathlib import Path

import requests
from youtube_transcript_api import YouTubeTranscriptApi

from lessoncraft.core.constants import (
    YOUTUBE_USER_AGENT, HTTP_TIMEOUT_SEC, CAPTION_PAYLOAD_FORMAT,
    SUBTITLE_LANGS, SUBTITLE_FORMAT, PREFERRED_VTT_SUFFIXES,
)
from lessoncraft.core.url_parse import build_watch_url
from lessoncraft.core.text_clean import normalize_transcript_text
from lessoncraft.core.caption_tracks import (
    extract_caption_tracks, choose_preferred_caption_track, with_query_param,
)
from lessoncraft.core.captions_parse import parse_caption_payload, parse_vtt_file
from lessoncraft.core.ytdlp_binary import YtDlpBinary, get_ytdlp
from lessoncraft.core.security_utils import make_work_dir
from lessoncraft.core.cleanup import remove_work_dir

logger = logging.getLogger(__name__)

_BROWSER_HEADERS = {"User-Agent": YOUTUBE_USER_AGENT}


# ── 1. youtube-transcript-api ─────────────────────────────────────────

def _snippet_text(snippet) -> str:
    if isinstance(snippet, dict):
        return snippet.get('text') or ''
    return getattr(snippet, 'text', '') or ''


def fetch_library_transcript(video_id: str, api: YouTubeTranscriptApi | None = None) -> str:
    """Fetch via youtube-transcript-api. Any library error counts as no transcript."""
    api = api or YouTubeTranscriptApi()
    try:
        snippets = list(api.fetch(video_id))
    except Exception as e:
        logger.info("youtube-transcript-api gave nothing for %s: %s", video_id, type(e).__name__)
        return ""

    texts = (_snippet_text(s) for s in snippets)
    return normalize_transcript_text(' '.join(t for t in texts if t))


# ── 2. Caption-track scraping ─────────────────────────────────────────

def fetch_caption_track_transcript(video_id: str, session: requests.Session | None = None) -> str:
    """
    Scrape the watch page for caption tracks and download the preferred one.
    Non-200 responses and pages without tracks give "".
    """
    http = session or requests

    resp = http.get(build_watch_url(video_id), headers=_BROWSER_HEADERS, timeout=HTTP_TIMEOUT_SEC)
    if not resp.ok:
        logger.info("Watch page for %s returned %s", video_id, resp.status_code)
        return ""

    tracks = extract_caption_tracks(resp.text)
    track = choose_preferred_caption_track(tracks)
    if not track or not track.base_url:
        logger.info("No caption tracks on watch page for %s", video_id)
        return ""

    logger.info("Using caption track %s (kind=%s) for %s",
                track.language_code, track.kind or "manual", video_id)

    payload_url = with_query_param(track.base_url, 'fmt', CAPTION_PAYLOAD_FORMAT)
    resp = http.get(payload_url, headers=_BROWSER_HEADERS, timeout=HTTP_TIMEOUT_SEC)
    if not resp.ok:
        logger.info("Caption payload for %s returned %s", video_id, resp.status_code)
        return ""

    return parse_caption_payload(resp.text)


# ── 3. yt-dlp subtitle download ───────────────────────────────────────

def choose_preferred_vtt_file(filenames: list[str]) -> str | None:
    """
    Pick the subtitle file to read out of whatever yt-dlp wrote.
    Plain English first, then the original-language auto track, then
    the en→en translation, else the first VTT file.
    """
    vtt_files = [name for name in filenames if name.endswith('.' + SUBTITLE_FORMAT)]
    if not vtt_files:
        return None

    for suffix in PREFERRED_VTT_SUFFIXES:
        for name in vtt_files:
            if name.endswith(suffix):
                return name

    return vtt_files[0]


def build_subtitle_args(video_id: str, work_dir: Path) -> list[str]:
    """yt-dlp arguments: English subs (manual and auto) as VTT, no video."""
    return [
        build_watch_url(video_id),
        "--skip-download",
        "--write-subs",
        "--write-auto-subs",
        "--sub-langs", SUBTITLE_LANGS,
        "--sub-format", SUBTITLE_FORMAT,
        "-o", str(work_dir / "%(id)s.%(ext)s"),
    ]


def fetch_ytdlp_transcript(video_id: str, ytdlp: YtDlpBinary | None = None,
                           binary_path: Path | None = None,
                           work_root: Path | None = None) -> str:
    """
    Download English subtitles with yt-dlp and parse the preferred file.
    The work directory is always removed, whatever happens.
    """
    ytdlp = ytdlp or get_ytdlp(binary_path)
    work_dir = make_work_dir(video_id, work_root)

    try:
        ytdlp.run(build_subtitle_args(video_id, work_dir))

        filenames = sorted(p.name for p in work_dir.iterdir() if p.is_file())
        selected = choose_preferred_vtt_file(filenames)
        if not selected:
            logger.info("yt-dlp wrote no subtitles for %s", video_id)
            return ""

        logger.info("Parsing yt-dlp subtitles %s", selected)
        return parse_vtt_file(work_dir / selected)
    finally:
        remove_work_dir(work_dir)
