import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
if SRC.exists():
    sys.path.insert(0, str(SRC))

# Register shared Hypothesis profiles for deterministic CI runs and fast local loops.
from tests.util import hypothesis_profiles  # noqa: E402,F401  pylint: disable=unused-import

# Developer shells must not leak config overrides into the suite.
for _name in (
    "HASHLAB_CONFIG",
    "HASHLAB_BACKEND",
    "HASHLAB_INITIAL_CAPACITY",
    "HASHLAB_MAX_LOAD_FACTOR",
):
    os.environ.pop(_name, None)
