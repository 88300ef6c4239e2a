"""
Lesson Craft video backend: server entry point.
Loads .env, configures logging, serves the Flask app.
"""

import sys
import logging
from pathlib import Path
from datetime import datetime

from dotenv import load_dotenv

from lessoncraft.core.config import AppConfig
from lessoncraft.core.constants import APP_NAME, APP_VERSION

logger = logging.getLogger("lessoncraft")


def setup_logging(config: AppConfig) -> Path:
    """Log to stderr and to <log_dir>/app.log. Returns the log file path."""
    log_dir = config.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "app.log"

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )
    return log_file


def main():
    load_dotenv()
    config = AppConfig()
    log_file = setup_logging(config)

    logger.info("=" * 60)
    logger.info("%s v%s starting at %s", APP_NAME, APP_VERSION, datetime.now().isoformat())
    logger.info("Python: %s", sys.executable)
    logger.info("Log file: %s", log_file)
    logger.info("Config: %s", config.as_dict())
    logger.info("=" * 60)

    if not config.deepseek_api_key:
        logger.warning("DEEPSEEK_API_KEY not set, activity generation will fail")

    from lessoncraft.web.server import create_app
    app = create_app(config)
    app.run(host=config.host, port=config.port, threaded=True)
