"""
HTTP surface for video activities.

POST /api/generate-video-activity   transcript → DeepSeek activity
POST /api/video-transcript          transcript only
GET  /api/health                    tool diagnostics
"""

import time
import logging
from datetime import datetime, timezone

from flask import Flask, jsonify, request, current_app

from lessoncraft.core.config import AppConfig
from lessoncraft.core.constants import APP_NAME, APP_VERSION, ErrorCode
from lessoncraft.core.error_codes import ActivityError, is_transcript_unavailable
from lessoncraft.core.url_parse import validate_youtube_url
from lessoncraft.core.transcript import (
    acquire_transcript, default_strategies, limit_transcript_length,
)
from lessoncraft.core.activity_generate import (
    generate_video_activity, normalize_deepseek_response,
)
from lessoncraft.core.diagnostics import get_diagnostics

logger = logging.getLogger(__name__)

TRANSCRIPT_ERROR_MESSAGE = (
    "Could not retrieve transcript for this video. "
    "Please try another one with captions enabled."
)


def _config() -> AppConfig:
    return current_app.config['LESSONCRAFT']


def _request_body() -> dict:
    """JSON object body of the current request; anything else reads as empty."""
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return {}
    return body


def _require_video_id(body: dict) -> tuple[str, str]:
    """Return (youtube_url, video_id) from a request body or raise a 400 ActivityError."""
    youtube_url = body.get('youtubeUrl')
    if not youtube_url:
        raise ActivityError(ErrorCode.URL_REQUIRED, "YouTube URL is required")
    return youtube_url, validate_youtube_url(youtube_url)


def _acquire(video_id: str):
    config = _config()
    return acquire_transcript(video_id, default_strategies(ytdlp_path=config.ytdlp_path))


def _error_response(e: ActivityError, fallback_message: str):
    if e.code in (ErrorCode.URL_REQUIRED, ErrorCode.INVALID_URL):
        return jsonify({"error": e.message}), 400
    if is_transcript_unavailable(e):
        return jsonify({"error": TRANSCRIPT_ERROR_MESSAGE, "details": e.message}), 400
    logger.error("Request failed: %s", e)
    return jsonify({"error": fallback_message, "details": e.message}), e.http_status


def generate_video_activity_route():
    body = _request_body()
    try:
        youtube_url, video_id = _require_video_id(body)
        config = _config()

        result = _acquire(video_id)
        limited = limit_transcript_length(result.text, config.max_transcript_chars)
        generated_raw = generate_video_activity(
            limited,
            api_key=config.deepseek_api_key,
            api_url=config.deepseek_api_url,
            model=config.deepseek_model,
            timeout_sec=config.generation_timeout_sec,
        )
    except ActivityError as e:
        return _error_response(e, "Failed to generate video activity")
    except Exception as e:
        logger.error("Error generating video activity: %s", e, exc_info=True)
        return jsonify({"error": "Failed to generate video activity", "details": str(e)}), 500

    activity_data = {
        "timestamp": int(time.time() * 1000),
        "youtubeUrl": youtube_url,
        "videoId": video_id,
        "transcriptText": result.text,
        "generatedContent": normalize_deepseek_response(generated_raw),
        "activitySource": "video",
        "createdAt": datetime.now(timezone.utc).isoformat(),
    }
    return jsonify({
        "success": True,
        "message": "Video activity generated successfully",
        "data": activity_data,
    })


def video_transcript_route():
    body = _request_body()
    try:
        _, video_id = _require_video_id(body)
        result = _acquire(video_id)
    except ActivityError as e:
        return _error_response(e, "Failed to fetch transcript")
    except Exception as e:
        logger.error("Error fetching transcript: %s", e, exc_info=True)
        return jsonify({"error": "Failed to fetch transcript", "details": str(e)}), 500

    return jsonify({
        "videoId": video_id,
        "method": result.method,
        "transcript": result.text,
        "limitedTranscript": limit_transcript_length(result.text, _config().max_transcript_chars),
    })


def health_route():
    return jsonify({
        "status": "ok",
        "app": APP_NAME,
        "version": APP_VERSION,
        "diagnostics": get_diagnostics(_config().ytdlp_path),
    })


def handle_unexpected_error(e):
    logger.error("Unhandled error: %s", e, exc_info=True)
    return jsonify({"error": "Something went wrong!"}), 500


def create_app(config: AppConfig | None = None) -> Flask:
    """Build the Flask application."""
    app = Flask(__name__)
    app.config['LESSONCRAFT'] = config or AppConfig()

    app.add_url_rule('/api/generate-video-activity', view_func=generate_video_activity_route,
                     methods=['POST'])
    app.add_url_rule('/api/video-transcript', view_func=video_transcript_route, methods=['POST'])
    app.add_url_rule('/api/health', view_func=health_route, methods=['GET'])
    app.register_error_handler(500, handle_unexpected_error)

    return app
