"""
Standardised error handling for Lesson Craft.
"""

from lessoncraft.core.constants import ErrorCode, CLIENT_ERRORS


class ActivityError(Exception):
    """Raised when a request hits a known error condition."""

    def __init__(self, code: str, message: str, details: str | None = None):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(f"[{code}] {message}")

    @property
    def http_status(self) -> int:
        return http_status_for(self.code)


def is_client_error(code: str) -> bool:
    return code in CLIENT_ERRORS


def http_status_for(code: str) -> int:
    """400 for problems the caller can fix by picking another input, else 500."""
    return 400 if is_client_error(code) else 500


def is_transcript_unavailable(exc: BaseException) -> bool:
    return isinstance(exc, ActivityError) and exc.code == ErrorCode.TRANSCRIPT_UNAVAILABLE
