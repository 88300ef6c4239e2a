"""
DeepSeek integration: turn a video transcript into a B1-B2 lesson activity.
"""

import re
import logging
import requests

from lessoncraft.core.error_codes import ActivityError
from lessoncraft.core.constants import (
    ErrorCode, DEEPSEEK_API_URL, DEEPSEEK_MODEL, DEEPSEEK_TEMPERATURE,
    GENERATION_TIMEOUT_SEC,
)

logger = logging.getLogger(__name__)

_OPENING_FENCE_JSON_RE = re.compile(r'^```json\s*', re.IGNORECASE)
_OPENING_FENCE_RE = re.compile(r'^```\s*')
_CLOSING_FENCE_RE = re.compile(r'```\s*$')

VIDEO_ACTIVITY_PROMPT = '''We are creating an English lesson activity for B1-B2 learners.

The following text is a transcript of a YouTube video:
"""
{transcript}
"""

Based on this transcript, generate an activity with:
1. 5 multiple-choice fill-in-the-blank sentences based on the transcript content.
2. 1 open question that asks for reflection or summary of the video.

You MUST respond with ONLY valid JSON in this exact structure:
{{
  "multiple_choice_sentences": [
    {{
      "sentence": "The sentence with a __________ blank.",
      "options": ["option1", "option2", "option3", "option4"],
      "correct_option": 0
    }}
  ],
  "open_question": "Your open-ended question here."
}}

Important:
- Generate exactly 5 items in multiple_choice_sentences.
- Randomize the correct option position.
- correct_option must be a number from 0 to 3.
- Return only JSON with no markdown or extra text.'''


def build_video_activity_prompt(transcript_text: str) -> str:
    return VIDEO_ACTIVITY_PROMPT.format(transcript=transcript_text)


def normalize_deepseek_response(content: str | None) -> str:
    """Strip the markdown code fences models like to wrap JSON in."""
    clean = (content or '').strip()
    clean = _OPENING_FENCE_JSON_RE.sub('', clean)
    clean = _OPENING_FENCE_RE.sub('', clean)
    clean = _CLOSING_FENCE_RE.sub('', clean)
    return clean.strip()


def _api_error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return 'Unknown error'
    error = body.get('error') if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get('message'):
        return error['message']
    return 'Unknown error'


def generate_video_activity(transcript_text: str, api_key: str | None,
                            api_url: str = DEEPSEEK_API_URL,
                            model: str = DEEPSEEK_MODEL,
                            timeout_sec: float = GENERATION_TIMEOUT_SEC,
                            session: requests.Session | None = None) -> str:
    """
    Ask DeepSeek for a video activity built from transcript_text.
    Returns the raw message content ("" if the response carries none).
    """
    if not api_key:
        raise ActivityError(ErrorCode.CONFIG, "DeepSeek API key is not configured")

    http = session or requests
    payload = {
        "model": model,
        "messages": [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": build_video_activity_prompt(transcript_text)},
                ],
            },
        ],
        "temperature": DEEPSEEK_TEMPERATURE,
    }
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {api_key}",
    }

    try:
        resp = http.post(api_url, headers=headers, json=payload, timeout=timeout_sec)
    except requests.exceptions.Timeout:
        raise ActivityError(ErrorCode.GENERATION_TIMEOUT,
                            f"DeepSeek request timed out after {timeout_sec}s")
    except requests.exceptions.RequestException as e:
        raise ActivityError(ErrorCode.GENERATION_FAILED, f"DeepSeek request failed: {e}")

    if resp.status_code != 200:
        # Never include request headers here; they carry the key
        raise ActivityError(ErrorCode.GENERATION_FAILED,
                            f"HTTP error! status: {resp.status_code} - {_api_error_message(resp)}")

    try:
        data = resp.json()
    except ValueError:
        raise ActivityError(ErrorCode.GENERATION_FAILED, "Failed to parse DeepSeek response JSON")

    try:
        content = data['choices'][0]['message']['content']
    except (IndexError, KeyError, TypeError):
        logger.warning("DeepSeek response had no message content")
        return ""
    return content or ""
