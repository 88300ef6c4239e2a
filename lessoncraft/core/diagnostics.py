"""
Diagnostics: tool version detection for the health endpoint.
"""

import logging
from importlib import metadata
from pathlib import Path

from lessoncraft.core.constants import YT_DLP_BINARY_PATH
from lessoncraft.core.error_codes import ActivityError
from lessoncraft.core.ytdlp_binary import YtDlpBinary, peek_ytdlp

logger = logging.getLogger(__name__)


def get_ytdlp_version(binary_path: Path | None = None) -> str:
    """
    Return yt-dlp version string, or a status message.
    Never triggers the download; an absent binary reports "Not downloaded".
    """
    binary_path = binary_path or YT_DLP_BINARY_PATH
    handle = peek_ytdlp()
    if handle is None:
        if not binary_path.exists():
            return "Not downloaded"
        handle = YtDlpBinary(binary_path)

    try:
        return handle.version()
    except ActivityError as e:
        return f"Error: {e.message}"


def get_library_version(distribution: str = "youtube-transcript-api") -> str:
    try:
        return metadata.version(distribution)
    except metadata.PackageNotFoundError:
        return "Not installed"


def get_diagnostics(binary_path: Path | None = None) -> dict:
    """Gather all diagnostic information."""
    binary_path = binary_path or YT_DLP_BINARY_PATH
    handle = peek_ytdlp()
    return {
        "ytdlp_path": str(handle.path if handle else binary_path),
        "ytdlp_version": get_ytdlp_version(binary_path),
        "youtube_transcript_api_version": get_library_version(),
    }
