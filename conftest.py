"""Pytest configuration.

Ensures that the repository root is importable so that the ``pushel``
package resolves when the tests run from a checkout without installing it.
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
