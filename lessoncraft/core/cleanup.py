"""
Cleanup: remove per-request work directories.
"""

import shutil
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def remove_work_dir(work_dir: Path | None) -> bool:
    """
    Delete a work directory and everything in it.
    Best-effort: failures are logged, never raised. Returns True if the
    directory is gone afterwards.
    """
    if work_dir is None:
        return True
    if not work_dir.exists():
        return True

    try:
        shutil.rmtree(work_dir)
        logger.debug("Deleted: %s", work_dir)
    except OSError as e:
        logger.warning("Failed to delete %s: %s", work_dir, e)

    return not work_dir.exists()
