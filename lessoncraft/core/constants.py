"""
Shared constants for Lesson Craft.
Single source of truth, imported by every other module.
"""

import os
import pathlib
import sys
import tempfile

# ── Application identity ──────────────────────────────────────────────
APP_NAME = "LessonCraft"
APP_VERSION = "1.0.0"

# ── Filesystem paths ─────────────────────────────────────────────────
HOME = pathlib.Path.home()
TEMP_DIR = pathlib.Path(tempfile.gettempdir())

CONFIG_DIR = HOME / ".config" / "lessoncraft"
CONFIG_PATH = CONFIG_DIR / "config.json"
LOG_DIR = HOME / ".cache" / "lessoncraft" / "logs"

# Prefix of the per-request yt-dlp work directories
SUBTITLE_WORKDIR_PREFIX = "lessoncraft-sub-"

# ── Error codes ───────────────────────────────────────────────────────
class ErrorCode:
    # Client-facing (400)
    URL_REQUIRED = "ERR_URL_REQUIRED"
    INVALID_URL = "ERR_INVALID_URL"
    TRANSCRIPT_UNAVAILABLE = "ERR_TRANSCRIPT_UNAVAILABLE"

    # Server-side (500)
    DOWNLOADER_FAILED = "ERR_DOWNLOADER_FAILED"
    GENERATION_FAILED = "ERR_GENERATION_FAILED"
    GENERATION_TIMEOUT = "ERR_GENERATION_TIMEOUT"
    CONFIG = "ERR_CONFIG"

CLIENT_ERRORS = {
    ErrorCode.URL_REQUIRED,
    ErrorCode.INVALID_URL,
    ErrorCode.TRANSCRIPT_UNAVAILABLE,
}

# ── Transcript acquisition ────────────────────────────────────────────
class TranscriptMethod:
    LIBRARY = "library"
    CAPTION_TRACK = "caption_track"
    YTDLP = "ytdlp"

YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
YOUTUBE_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36"
)
HTTP_TIMEOUT_SEC = 30

VIDEO_ID_LENGTH = 11
SHORT_LINK_HOSTS = ("youtu.be",)
MAIN_HOSTS = ("youtube.com", "m.youtube.com")
PATH_ID_PREFIXES = ("shorts", "embed")

# Embedded player-response markers on the watch page
CAPTIONS_MARKER = '"captions":'
VIDEO_DETAILS_MARKER = ',"videoDetails"'

PREFERRED_CAPTION_LANGUAGES = ("en", "en-US", "en-GB")
CAPTION_PAYLOAD_FORMAT = "json3"

# yt-dlp subtitle output, in order of preference
SUBTITLE_LANGS = "en.*,en"
SUBTITLE_FORMAT = "vtt"
PREFERRED_VTT_SUFFIXES = (".en.vtt", ".en-orig.vtt", ".en-en.vtt")

MAX_TRANSCRIPT_CHARS = 12000

# ── yt-dlp binary ─────────────────────────────────────────────────────
YT_DLP_RELEASE_URL = "https://github.com/yt-dlp/yt-dlp/releases/latest/download/{asset}"

if sys.platform == "win32":
    YT_DLP_ASSET = "yt-dlp.exe"
elif sys.platform == "darwin":
    YT_DLP_ASSET = "yt-dlp_macos"
else:
    YT_DLP_ASSET = "yt-dlp"

YT_DLP_BINARY_PATH = TEMP_DIR / ("yt-dlp.exe" if os.name == "nt" else "yt-dlp")
YT_DLP_DOWNLOAD_TIMEOUT_SEC = 120
YT_DLP_RUN_TIMEOUT_SEC = 300

# ── DeepSeek ──────────────────────────────────────────────────────────
DEEPSEEK_API_URL = "https://api.deepseek.com/v1/chat/completions"
DEEPSEEK_MODEL = "deepseek-chat"
DEEPSEEK_TEMPERATURE = 1.1
GENERATION_TIMEOUT_SEC = 60

# ── HTTP server ───────────────────────────────────────────────────────
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000
