"""
Caption payload parsing → plain text.

Three wire formats reach us:
  - json3 timed events (caption-track endpoint with fmt=json3)
  - timedtext XML (<text start=".." dur="..">...</text>), what the same
    endpoint serves when the fmt parameter is ignored
  - WebVTT files written by yt-dlp
All of them come out normalized by text_clean.normalize_transcript_text.
"""

import json
import re
import logging
from pathlib import Path

from lessoncraft.core.text_clean import normalize_transcript_text, strip_tags

logger = logging.getLogger(__name__)

_XML_TEXT_RE = re.compile(r'<text[^>]*>([\s\S]*?)</text>')
_CUE_ID_RE = re.compile(r'^\d+$')
_VTT_HEADER = 'WEBVTT'
_VTT_METADATA_PREFIXES = ('Kind:', 'Language:')
_VTT_TIMING_ARROW = '-->'


def parse_json3_transcript(data) -> str:
    """Concatenate segment text of every json3 event, one event per phrase."""
    if not isinstance(data, dict) or not isinstance(data.get('events'), list):
        return ''

    text_parts = []
    for event in data['events']:
        segs = event.get('segs') if isinstance(event, dict) else None
        if not isinstance(segs, list):
            continue
        segment_text = ''.join(
            (seg.get('utf8') or '') if isinstance(seg, dict) else ''
            for seg in segs
        ).strip()
        if segment_text:
            text_parts.append(segment_text)

    return normalize_transcript_text(' '.join(text_parts))


def parse_xml_transcript(body: str | None) -> str:
    """Pull every <text> span out of a timedtext XML document."""
    pieces = (strip_tags(m.group(1)) for m in _XML_TEXT_RE.finditer(body or ''))
    return normalize_transcript_text(' '.join(p for p in pieces if p))


def parse_caption_payload(body: str | None) -> str:
    """
    Parse a raw caption-track response.
    json3 first; on decode failure or empty output, the same body as XML.
    """
    try:
        text = parse_json3_transcript(json.loads(body or ''))
        if text:
            return text
    except ValueError:
        logger.debug("Caption payload is not json3, trying XML")

    return parse_xml_transcript(body)


def parse_vtt_to_text(content: str | None) -> str:
    """
    Convert WebVTT content to clean plain text.
    Drops header/metadata, cue numbers and timing lines; strips styling tags;
    collapses the consecutive repeats auto-captions are full of.
    """
    text_lines: list[str] = []

    for raw_line in (content or '').split('\n'):
        line = raw_line.strip()
        if not line:
            continue
        if line == _VTT_HEADER or line.startswith(_VTT_METADATA_PREFIXES):
            continue
        if _VTT_TIMING_ARROW in line:
            continue
        if _CUE_ID_RE.match(line):
            continue

        cleaned = strip_tags(line).strip()
        if not cleaned:
            continue

        # Skip if identical to previous line (rolling auto-captions repeat)
        if text_lines and text_lines[-1] == cleaned:
            continue
        text_lines.append(cleaned)

    return normalize_transcript_text(' '.join(text_lines))


def parse_vtt_file(vtt_path: Path) -> str:
    """Read a VTT subtitle file and convert it to clean plain text."""
    content = vtt_path.read_text(encoding='utf-8', errors='replace')
    return parse_vtt_to_text(content)
