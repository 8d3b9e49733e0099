from __future__ import annotations

import sys
from pathlib import Path

import matplotlib

# Plots in tests go to files, never to a window.
matplotlib.use("Agg")

# Ensure repo root is importable when running pytest from any CWD.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))
