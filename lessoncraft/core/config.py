"""
Application configuration manager.
Defaults, overlaid by an optional JSON file, overlaid by environment variables.
"""

import json
import os
import logging
from pathlib import Path

from lessoncraft.core.constants import (
    CONFIG_PATH, LOG_DIR, DEFAULT_HOST, DEFAULT_PORT, MAX_TRANSCRIPT_CHARS,
    GENERATION_TIMEOUT_SEC, DEEPSEEK_API_URL, DEEPSEEK_MODEL, YT_DLP_BINARY_PATH,
)

# Validation bounds
_MAX_CHARS_MIN = 500
_MAX_CHARS_MAX = 100_000
_TIMEOUT_MIN = 5
_TIMEOUT_MAX = 600
_PORT_MIN = 1
_PORT_MAX = 65535
_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

# Never persisted to the JSON file
_SECRET_KEYS = {'deepseek_api_key'}

logger = logging.getLogger(__name__)

_DEFAULTS = {
    'host': DEFAULT_HOST,
    'port': DEFAULT_PORT,
    'log_level': 'INFO',
    'log_dir': str(LOG_DIR),
    'deepseek_api_key': None,
    'deepseek_api_url': DEEPSEEK_API_URL,
    'deepseek_model': DEEPSEEK_MODEL,
    'generation_timeout_sec': GENERATION_TIMEOUT_SEC,
    'max_transcript_chars': MAX_TRANSCRIPT_CHARS,
    'ytdlp_path': str(YT_DLP_BINARY_PATH),
}

# Environment variable → config key
_ENV_KEYS = {
    'HOST': 'host',
    'PORT': 'port',
    'LOG_LEVEL': 'log_level',
    'LOG_DIR': 'log_dir',
    'DEEPSEEK_API_KEY': 'deepseek_api_key',
    'DEEPSEEK_API_URL': 'deepseek_api_url',
    'DEEPSEEK_MODEL': 'deepseek_model',
    'GENERATION_TIMEOUT_SEC': 'generation_timeout_sec',
    'MAX_TRANSCRIPT_CHARS': 'max_transcript_chars',
    'YT_DLP_PATH': 'ytdlp_path',
}


class AppConfig:
    """Manages application configuration stored as JSON plus environment overrides."""

    def __init__(self, config_path: Path | None = None, env: dict | None = None):
        self.env = os.environ if env is None else env
        self.path = config_path or Path(self.env.get('LESSONCRAFT_CONFIG', CONFIG_PATH))
        self._data: dict = {}
        self.load()

    def load(self):
        """Load config from disk and the environment, merging with defaults."""
        self._data = dict(_DEFAULTS)
        if self.path.exists():
            try:
                with open(self.path, 'r') as f:
                    saved = json.load(f)
                for key, value in saved.items():
                    self._data[key] = self._validate(key, value)
            except (OSError, ValueError, AttributeError) as e:
                logger.warning("Failed to load config %s: %s", self.path, e)

        for env_key, key in _ENV_KEYS.items():
            value = self.env.get(env_key)
            if value not in (None, ''):
                self._data[key] = self._validate(key, value)

    def save(self):
        """Persist config to disk (secrets excluded)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {k: v for k, v in self._data.items() if k not in _SECRET_KEYS}
        with open(self.path, 'w') as f:
            json.dump(data, f, indent=2)

    def get(self, key: str, default=None):
        return self._data.get(key, default)

    def set(self, key: str, value):
        self._data[key] = self._validate(key, value)

    def _validate(self, key: str, value):
        """Validate and coerce config values to safe ranges."""
        if key == 'port':
            try:
                value = int(value)
            except (TypeError, ValueError):
                logger.warning("Invalid port %r - using default", value)
                return DEFAULT_PORT
            return max(_PORT_MIN, min(_PORT_MAX, value))

        if key == 'max_transcript_chars':
            try:
                value = int(value)
            except (TypeError, ValueError):
                logger.warning("Invalid max_transcript_chars %r - using default", value)
                return MAX_TRANSCRIPT_CHARS
            return max(_MAX_CHARS_MIN, min(_MAX_CHARS_MAX, value))

        if key == 'generation_timeout_sec':
            try:
                value = float(value)
            except (TypeError, ValueError):
                logger.warning("Invalid generation_timeout_sec %r - using default", value)
                return GENERATION_TIMEOUT_SEC
            return max(_TIMEOUT_MIN, min(_TIMEOUT_MAX, value))

        if key == 'log_level':
            level = str(value).upper()
            if level not in _LOG_LEVELS:
                logger.warning("Invalid log_level %r - using INFO", value)
                return 'INFO'
            return level

        return value

    def as_dict(self) -> dict:
        """Config values with secrets masked, safe to log or return over HTTP."""
        return {k: ('***' if k in _SECRET_KEYS and v else v) for k, v in self._data.items()}

    @property
    def host(self) -> str:
        return self._data.get('host', DEFAULT_HOST)

    @property
    def port(self) -> int:
        return self._data.get('port', DEFAULT_PORT)

    @property
    def log_level(self) -> str:
        return self._data.get('log_level', 'INFO')

    @property
    def log_dir(self) -> Path:
        return Path(self._data.get('log_dir') or LOG_DIR)

    @property
    def deepseek_api_key(self) -> str | None:
        return self._data.get('deepseek_api_key')

    @property
    def deepseek_api_url(self) -> str:
        return self._data.get('deepseek_api_url', DEEPSEEK_API_URL)

    @property
    def deepseek_model(self) -> str:
        return self._data.get('deepseek_model', DEEPSEEK_MODEL)

    @property
    def generation_timeout_sec(self) -> float:
        return self._data.get('generation_timeout_sec', GENERATION_TIMEOUT_SEC)

    @property
    def max_transcript_chars(self) -> int:
        return self._data.get('max_transcript_chars', MAX_TRANSCRIPT_CHARS)

    @property
    def ytdlp_path(self) -> Path:
        return Path(self._data.get('ytdlp_path') or YT_DLP_BINARY_PATH)
