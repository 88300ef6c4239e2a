#!/usr/bin/env python3
"""
Lesson Craft video backend: run from a source checkout.
Installed copies use the lessoncraft-server console script instead.
"""

import sys
from pathlib import Path

# ── Determine project root ────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from lessoncraft.cli import main  # noqa: E402

if __name__ == "__main__":
    main()
