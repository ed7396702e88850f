from __future__ import annotations

import sys
from pathlib import Path


# Ensure the project root is on ``sys.path`` so tests can import ``initial_workflow``
# without requiring the package to be installed in the environment.
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))
