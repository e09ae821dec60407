"""Tests for the ffplayoffs league backend."""

from __future__ import annotations

import sys
from pathlib import Path

# Put src/ on the path so a plain checkout runs the suite without an install.
SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if SRC_ROOT.exists() and str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))
