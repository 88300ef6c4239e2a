"""
yt-dlp binary handle.

The binary is fetched from the GitHub releases page on first use and kept
in the temp directory for the life of the machine. The handle itself is
process-wide: created at most once, under a lock so concurrent first
callers share one download. A failed initialization caches nothing, so the
next call tries again.
"""

import os
import stat
import logging
import subprocess
import threading
import tempfile
from pathlib import Path

import requests

from lessoncraft.core.constants import (
    ErrorCode, YT_DLP_BINARY_PATH, YT_DLP_RELEASE_URL, YT_DLP_ASSET,
    YT_DLP_DOWNLOAD_TIMEOUT_SEC, YT_DLP_RUN_TIMEOUT_SEC,
)
from lessoncraft.core.error_codes import ActivityError
from lessoncraft.core.security_utils import run_subprocess_capture

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 256


class YtDlpBinary:
    """Thin wrapper around a yt-dlp executable on disk."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def __repr__(self):
        return f"YtDlpBinary({str(self.path)!r})"

    def run(self, args: list[str], timeout: int | None = YT_DLP_RUN_TIMEOUT_SEC) -> subprocess.CompletedProcess:
        """
        Run yt-dlp with the given arguments.
        Raises ActivityError on launch failure, timeout or non-zero exit.
        """
        try:
            result = run_subprocess_capture([str(self.path), *args], timeout=timeout)
        except subprocess.TimeoutExpired:
            raise ActivityError(ErrorCode.DOWNLOADER_FAILED,
                                f"yt-dlp timed out after {timeout}s")
        except OSError as e:
            raise ActivityError(ErrorCode.DOWNLOADER_FAILED, f"yt-dlp could not start: {e}")

        if result.returncode != 0:
            stderr = result.stderr or ""
            raise ActivityError(ErrorCode.DOWNLOADER_FAILED,
                                f"yt-dlp failed (rc={result.returncode}): {stderr[:300]}")
        return result

    def version(self) -> str:
        return self.run(["--version"], timeout=10).stdout.strip()


def download_ytdlp(dest: Path, session: requests.Session | None = None) -> Path:
    """
    Download the latest yt-dlp release asset to dest and mark it executable.
    Writes to a sibling temp file first so a half-written binary never sits at dest.
    """
    url = YT_DLP_RELEASE_URL.format(asset=YT_DLP_ASSET)
    http = session or requests
    dest.parent.mkdir(parents=True, exist_ok=True)

    logger.info("Downloading yt-dlp from %s to %s", url, dest)
    try:
        resp = http.get(url, stream=True, timeout=YT_DLP_DOWNLOAD_TIMEOUT_SEC)
    except requests.exceptions.RequestException as e:
        raise ActivityError(ErrorCode.DOWNLOADER_FAILED, f"yt-dlp download failed: {e}")

    with resp:
        if resp.status_code != 200:
            raise ActivityError(ErrorCode.DOWNLOADER_FAILED,
                                f"yt-dlp download returned {resp.status_code}")

        fd, tmp_name = tempfile.mkstemp(prefix=dest.name + ".", suffix=".part", dir=dest.parent)
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, 'wb') as f:
                for chunk in resp.iter_content(chunk_size=_CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
            tmp_path.chmod(tmp_path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
            os.replace(tmp_path, dest)
        except (OSError, requests.exceptions.RequestException) as e:
            tmp_path.unlink(missing_ok=True)
            raise ActivityError(ErrorCode.DOWNLOADER_FAILED, f"yt-dlp download failed: {e}")

    return dest


# ── Process-wide handle ───────────────────────────────────────────────

_instance: YtDlpBinary | None = None
_lock = threading.Lock()


def _initialize(binary_path: Path) -> YtDlpBinary:
    if not binary_path.exists():
        download_ytdlp(binary_path)
    else:
        logger.debug("Using cached yt-dlp at %s", binary_path)
    return YtDlpBinary(binary_path)


def get_ytdlp(binary_path: Path | None = None) -> YtDlpBinary:
    """
    Return the shared yt-dlp handle, downloading the binary on first use.
    Raises ActivityError if the binary cannot be obtained; nothing is cached
    in that case.
    """
    global _instance
    if _instance is not None:
        return _instance

    with _lock:
        if _instance is None:
            _instance = _initialize(Path(binary_path or YT_DLP_BINARY_PATH))
            logger.info("yt-dlp ready: %s", _instance.path)
        return _instance


def peek_ytdlp() -> YtDlpBinary | None:
    """The cached handle, without initializing one."""
    return _instance


def reset_ytdlp():
    """Drop the cached handle so the next get_ytdlp() initializes again."""
    global _instance
    with _lock:
        _instance = None
