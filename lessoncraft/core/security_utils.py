"""
Security utilities for Lesson Craft.
- Filename sanitization for URL-derived tokens
- Temporary work directories
- Safe subprocess execution (argument arrays only)
"""

import re
import subprocess
import tempfile
import time
import logging
from pathlib import Path

from lessoncraft.core.constants import TEMP_DIR, SUBTITLE_WORKDIR_PREFIX

logger = logging.getLogger(__name__)

# Anything outside this set is replaced before a token reaches the filesystem
_UNSAFE_TOKEN_CHARS = re.compile(r'[^A-Za-z0-9_-]')


# ── Filename / path safety ────────────────────────────────────────────

def sanitize_token(token: str) -> str:
    """
    Make a URL-derived token (video_id) safe to embed in a file name.
    Video IDs come straight from the query string, so "../" is possible.
    """
    safe = _UNSAFE_TOKEN_CHARS.sub('_', token or '')
    return safe or "unknown"


def make_work_dir(video_id: str, base_dir: Path | None = None) -> Path:
    """
    Create a uniquely named temporary directory for one subtitle download.
    The caller owns it and must remove it.
    """
    base = base_dir or TEMP_DIR
    base.mkdir(parents=True, exist_ok=True)
    prefix = f"{SUBTITLE_WORKDIR_PREFIX}{sanitize_token(video_id)}-{int(time.time() * 1000)}-"
    return Path(tempfile.mkdtemp(prefix=prefix, dir=base))


# ── Subprocess safety ─────────────────────────────────────────────────

def run_subprocess(args: list[str], **kwargs) -> subprocess.CompletedProcess:
    """
    Execute a subprocess using argument arrays only.
    shell=True is explicitly forbidden.
    """
    if not isinstance(args, (list, tuple)):
        raise TypeError("Subprocess args must be a list/tuple, not a string")

    # Force shell=False: drop any caller-supplied value
    kwargs.pop('shell', None)

    logger.debug("Running subprocess: %s", ' '.join(str(a) for a in args))
    return subprocess.run([str(a) for a in args], shell=False, **kwargs)


def run_subprocess_capture(args: list[str], timeout: int | None = 300, **kwargs) -> subprocess.CompletedProcess:
    """Run subprocess and capture stdout/stderr as text."""
    return run_subprocess(
        args,
        capture_output=True,
        text=True,
        encoding='utf-8',
        errors='replace',
        timeout=timeout,
        **kwargs,
    )
