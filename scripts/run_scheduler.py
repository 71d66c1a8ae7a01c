from __future__ import annotations

import sys
from pathlib import Path

SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from attendance_engine.cli import run_scheduler


if __name__ == "__main__":
    run_scheduler(sys.argv[1:])
