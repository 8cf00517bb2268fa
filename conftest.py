"""Configure pytest for the libraryview test suite."""

import sys
from pathlib import Path

root_dir = Path(__file__).parent

# src/ for the libraryview package, the root for tests.helpers.
for path in (str(root_dir / "src"), str(root_dir)):
    if path not in sys.path:
        sys.path.insert(0, path)
