#!/usr/bin/env python3
"""
Tests for the HTTP layer and DeepSeek activity generation.
"""

import sys
import tempfile
from pathlib import Path
from unittest import mock

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import unittest

import requests

from lessoncraft.core.config import AppConfig
from lessoncraft.core.constants import ErrorCode
from lessoncraft.core.error_codes import ActivityError
from lessoncraft.core.transcript import AcquisitionResult
from lessoncraft.core.activity_generate import (
    generate_video_activity, normalize_deepseek_response, build_video_activity_prompt,
)
from lessoncraft.web.server import create_app, TRANSCRIPT_ERROR_MESSAGE

URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


class ServerTestCase(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.config = AppConfig(Path(self.tmpdir.name) / "config.json", env={
            "DEEPSEEK_API_KEY": "sk-test",
            "MAX_TRANSCRIPT_CHARS": "1000",
        })
        app = create_app(self.config)
        app.testing = True
        self.client = app.test_client()

    def tearDown(self):
        self.tmpdir.cleanup()


class TestGenerateVideoActivityRoute(ServerTestCase):

    def test_missing_url(self):
        resp = self.client.post("/api/generate-video-activity", json={})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error"], "YouTube URL is required")

    def test_body_that_is_not_an_object(self):
        for payload in (["x"], "https://youtu.be/dQw4w9WgXcQ", 42):
            with mock.patch("lessoncraft.web.server.acquire_transcript") as acquire:
                resp = self.client.post("/api/generate-video-activity", json=payload)
            self.assertEqual(resp.status_code, 400)
            self.assertEqual(resp.get_json()["error"], "YouTube URL is required")
            acquire.assert_not_called()

    def test_invalid_url(self):
        with mock.patch("lessoncraft.web.server.acquire_transcript") as acquire:
            resp = self.client.post("/api/generate-video-activity",
                                    json={"youtubeUrl": "https://vimeo.com/123"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error"], "Invalid YouTube URL")
        acquire.assert_not_called()

    def test_transcript_unavailable(self):
        unavailable = ActivityError(ErrorCode.TRANSCRIPT_UNAVAILABLE,
                                    "Transcript is empty or unavailable for this video")
        with mock.patch("lessoncraft.web.server.acquire_transcript", side_effect=unavailable), \
                mock.patch("lessoncraft.web.server.generate_video_activity") as generate:
            resp = self.client.post("/api/generate-video-activity", json={"youtubeUrl": URL})
        self.assertEqual(resp.status_code, 400)
        body = resp.get_json()
        self.assertEqual(body["error"], TRANSCRIPT_ERROR_MESSAGE)
        self.assertIn("unavailable", body["details"])
        generate.assert_not_called()

    def test_success(self):
        transcript = "word " * 400
        with mock.patch("lessoncraft.web.server.acquire_transcript",
                        return_value=AcquisitionResult.success("library", transcript)), \
                mock.patch("lessoncraft.web.server.generate_video_activity",
                           return_value='```json\n{"open_question": "Why?"}\n```') as generate:
            resp = self.client.post("/api/generate-video-activity", json={"youtubeUrl": URL})

        self.assertEqual(resp.status_code, 200)
        body = resp.get_json()
        self.assertTrue(body["success"])
        data = body["data"]
        self.assertEqual(data["videoId"], "dQw4w9WgXcQ")
        self.assertEqual(data["youtubeUrl"], URL)
        self.assertEqual(data["transcriptText"], transcript)
        self.assertEqual(data["generatedContent"], '{"open_question": "Why?"}')
        self.assertEqual(data["activitySource"], "video")
        self.assertIn("createdAt", data)

        sent_transcript = generate.call_args.args[0]
        self.assertEqual(len(sent_transcript), 1000)
        self.assertEqual(generate.call_args.kwargs["api_key"], "sk-test")

    def test_generation_failure_is_500(self):
        with mock.patch("lessoncraft.web.server.acquire_transcript",
                        return_value=AcquisitionResult.success("library", "text")), \
                mock.patch("lessoncraft.web.server.generate_video_activity",
                           side_effect=ActivityError(ErrorCode.GENERATION_FAILED, "HTTP error! status: 502")):
            resp = self.client.post("/api/generate-video-activity", json={"youtubeUrl": URL})
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.get_json()["error"], "Failed to generate video activity")

    def test_unexpected_error_is_500(self):
        with mock.patch("lessoncraft.web.server.acquire_transcript", side_effect=RuntimeError("boom")):
            resp = self.client.post("/api/generate-video-activity", json={"youtubeUrl": URL})
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.get_json()["details"], "boom")


class TestVideoTranscriptRoute(ServerTestCase):

    def test_returns_transcript_and_limited_copy(self):
        transcript = "x" * 1500
        with mock.patch("lessoncraft.web.server.acquire_transcript",
                        return_value=AcquisitionResult.success("caption_track", transcript)):
            resp = self.client.post("/api/video-transcript",
                                    json={"youtubeUrl": "https://youtu.be/dQw4w9WgXcQ"})
        self.assertEqual(resp.status_code, 200)
        body = resp.get_json()
        self.assertEqual(body["videoId"], "dQw4w9WgXcQ")
        self.assertEqual(body["method"], "caption_track")
        self.assertEqual(len(body["transcript"]), 1500)
        self.assertEqual(len(body["limitedTranscript"]), 1000)

    def test_invalid_url(self):
        resp = self.client.post("/api/video-transcript", json={"youtubeUrl": "nope"})
        self.assertEqual(resp.status_code, 400)

    def test_non_json_body(self):
        resp = self.client.post("/api/video-transcript", data="youtubeUrl=x")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error"], "YouTube URL is required")

    def test_json_list_body(self):
        resp = self.client.post("/api/video-transcript", json=["x"])
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error"], "YouTube URL is required")


class TestHealthRoute(ServerTestCase):

    def test_health(self):
        with mock.patch("lessoncraft.web.server.get_diagnostics",
                        return_value={"ytdlp_version": "Not downloaded"}):
            resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        body = resp.get_json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["diagnostics"]["ytdlp_version"], "Not downloaded")


class TestActivityGenerate(unittest.TestCase):

    def _session(self, status_code=200, payload=None, json_error=False):
        resp = mock.Mock()
        resp.status_code = status_code
        if json_error:
            resp.json.side_effect = ValueError("no json")
        else:
            resp.json.return_value = payload
        session = mock.Mock()
        session.post.return_value = resp
        return session

    def test_normalize_strips_fences(self):
        self.assertEqual(normalize_deepseek_response('```json\n{"a": 1}\n```'), '{"a": 1}')
        self.assertEqual(normalize_deepseek_response('```JSON {"a": 1}```  '), '{"a": 1}')
        self.assertEqual(normalize_deepseek_response('```\n[1]\n```'), '[1]')
        self.assertEqual(normalize_deepseek_response('  {"a": 1} '), '{"a": 1}')
        self.assertEqual(normalize_deepseek_response(None), '')

    def test_prompt_contains_transcript(self):
        prompt = build_video_activity_prompt("the cat sat")
        self.assertIn('"""\nthe cat sat\n"""', prompt)
        self.assertIn('"multiple_choice_sentences"', prompt)

    def test_returns_content(self):
        session = self._session(payload={"choices": [{"message": {"content": "{}"}}]})
        result = generate_video_activity("text", api_key="sk", session=session, timeout_sec=7)
        self.assertEqual(result, "{}")
        kwargs = session.post.call_args.kwargs
        self.assertEqual(kwargs["timeout"], 7)
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer sk")
        self.assertEqual(kwargs["json"]["model"], "deepseek-chat")
        self.assertEqual(kwargs["json"]["temperature"], 1.1)

    def test_missing_content_is_empty(self):
        session = self._session(payload={"choices": []})
        self.assertEqual(generate_video_activity("text", api_key="sk", session=session), "")

    def test_missing_key(self):
        with self.assertRaises(ActivityError) as ctx:
            generate_video_activity("text", api_key=None)
        self.assertEqual(ctx.exception.code, ErrorCode.CONFIG)

    def test_http_error_uses_api_message(self):
        session = self._session(status_code=401, payload={"error": {"message": "Invalid key"}})
        with self.assertRaises(ActivityError) as ctx:
            generate_video_activity("text", api_key="sk", session=session)
        self.assertEqual(ctx.exception.code, ErrorCode.GENERATION_FAILED)
        self.assertEqual(ctx.exception.message, "HTTP error! status: 401 - Invalid key")

    def test_http_error_without_json(self):
        session = self._session(status_code=502, json_error=True)
        with self.assertRaises(ActivityError) as ctx:
            generate_video_activity("text", api_key="sk", session=session)
        self.assertIn("Unknown error", ctx.exception.message)

    def test_timeout(self):
        session = mock.Mock()
        session.post.side_effect = requests.exceptions.Timeout()
        with self.assertRaises(ActivityError) as ctx:
            generate_video_activity("text", api_key="sk", session=session)
        self.assertEqual(ctx.exception.code, ErrorCode.GENERATION_TIMEOUT)


if __name__ == "__main__":
    unittest.main()
