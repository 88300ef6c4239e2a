"""
Transcript text cleanup shared by every caption source.
Removes markup, decodes entities, collapses whitespace, drops [Music] markers.
"""

import re

_MUSIC_MARKER_RE = re.compile(r'\[Music\]', re.IGNORECASE)
_WHITESPACE_RE = re.compile(r'\s+')
_TAG_RE = re.compile(r'<[^>]*>')
_NUMERIC_ENTITY_RE = re.compile(r'&#(\d+);')

_NAMED_ENTITIES = (
    ('&amp;', '&'),
    ('&lt;', '<'),
    ('&gt;', '>'),
    ('&#39;', "'"),
    ('&quot;', '"'),
)


def normalize_transcript_text(text: str | None) -> str:
    """Drop [Music] markers, collapse whitespace runs, trim. Idempotent."""
    text = text or ''
    # Removing one marker can splice a new one together: "[Mu[Music]sic]"
    removed = 1
    while removed:
        text, removed = _MUSIC_MARKER_RE.subn('', text)
    return _WHITESPACE_RE.sub(' ', text).strip()


def _decode_numeric(match: re.Match) -> str:
    try:
        return chr(int(match.group(1)))
    except (ValueError, OverflowError):
        return match.group(0)


def decode_html_entities(text) -> str:
    """Decode the handful of entities YouTube emits in caption payloads."""
    if not text or not isinstance(text, str):
        return ''
    for entity, char in _NAMED_ENTITIES:
        text = text.replace(entity, char)
    return _NUMERIC_ENTITY_RE.sub(_decode_numeric, text)


def strip_tags(text: str | None) -> str:
    """Remove <...> markup, then decode entities."""
    return decode_html_entities(_TAG_RE.sub('', text or ''))
