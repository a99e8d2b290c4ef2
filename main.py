"""Run mcsync from a source checkout: `python main.py <command>`.

Installed copies use the `mcsync` console script instead.
"""

from __future__ import annotations

import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent / "src"

if __name__ == "__main__":
    sys.path.insert(0, str(SRC_DIR))
    from cli.main import run  # noqa: PLC0415

    run()
