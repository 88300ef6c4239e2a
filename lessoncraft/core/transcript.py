"""
Transcript acquisition: try each caption source in order until one yields text.

Sources are cheapest first. A source that raises or comes back empty is
logged and skipped; only running out of sources is reported to the caller,
as ActivityError(TRANSCRIPT_UNAVAILABLE).
"""

import logging
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Callable, Iterable, Optional

import requests

from lessoncraft.core.constants import ErrorCode, TranscriptMethod, MAX_TRANSCRIPT_CHARS
from lessoncraft.core.error_codes import ActivityError
from lessoncraft.core.captions_fetch import (
    fetch_library_transcript, fetch_caption_track_transcript, fetch_ytdlp_transcript,
)

logger = logging.getLogger(__name__)


class AttemptStatus:
    SUCCESS = "success"
    EMPTY = "empty"
    ERROR = "error"


@dataclass
class AcquisitionResult:
    status: str
    method: str
    text: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == AttemptStatus.SUCCESS

    @classmethod
    def success(cls, method: str, text: str) -> "AcquisitionResult":
        return cls(AttemptStatus.SUCCESS, method, text=text)

    @classmethod
    def empty(cls, method: str) -> "AcquisitionResult":
        return cls(AttemptStatus.EMPTY, method)

    @classmethod
    def failure(cls, method: str, error: BaseException) -> "AcquisitionResult":
        return cls(AttemptStatus.ERROR, method, error=f"{type(error).__name__}: {error}")


class TranscriptStrategy:
    """One named caption source. attempt() never raises."""

    def __init__(self, name: str, fetch: Callable[[str], str]):
        self.name = name
        self.fetch = fetch

    def __repr__(self):
        return f"TranscriptStrategy({self.name!r})"

    def attempt(self, video_id: str) -> AcquisitionResult:
        try:
            text = self.fetch(video_id)
        except Exception as e:
            logger.warning("Transcript source %s failed for %s: %s", self.name, video_id, e)
            return AcquisitionResult.failure(self.name, e)

        if not text or not text.strip():
            return AcquisitionResult.empty(self.name)
        return AcquisitionResult.success(self.name, text)


def default_strategies(session: requests.Session | None = None,
                       ytdlp_path: Path | None = None) -> list[TranscriptStrategy]:
    """The fixed fallback order: library, caption-track scrape, yt-dlp."""
    return [
        TranscriptStrategy(TranscriptMethod.LIBRARY, fetch_library_transcript),
        TranscriptStrategy(TranscriptMethod.CAPTION_TRACK,
                           partial(fetch_caption_track_transcript, session=session)),
        TranscriptStrategy(TranscriptMethod.YTDLP,
                           partial(fetch_ytdlp_transcript, binary_path=ytdlp_path)),
    ]


def acquire_transcript(video_id: str,
                       strategies: Iterable[TranscriptStrategy] | None = None) -> AcquisitionResult:
    """
    Run the strategies in order and return the first successful result.
    Raises ActivityError(TRANSCRIPT_UNAVAILABLE) when none produce text.
    """
    if strategies is None:
        strategies = default_strategies()

    attempts = []
    for strategy in strategies:
        logger.info("Trying transcript source %s for %s", strategy.name, video_id)
        result = strategy.attempt(video_id)
        if result.ok:
            logger.info("Transcript for %s from %s (%d chars)",
                        video_id, strategy.name, len(result.text))
            return result
        attempts.append(result)
        logger.info("Transcript source %s for %s: %s", strategy.name, video_id, result.status)

    summary = ", ".join(f"{a.method}={a.status}" for a in attempts)
    raise ActivityError(ErrorCode.TRANSCRIPT_UNAVAILABLE,
                        "Transcript is empty or unavailable for this video",
                        details=summary or None)


def limit_transcript_length(transcript_text: str, max_chars: int = MAX_TRANSCRIPT_CHARS) -> str:
    """Cut the transcript to at most max_chars characters (no word-boundary adjustment)."""
    if not transcript_text or len(transcript_text) <= max_chars:
        return transcript_text
    return transcript_text[:max_chars]
