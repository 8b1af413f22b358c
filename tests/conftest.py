import os
import sys
from datetime import date
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Keep tests independent of a developer's local proxy settings.
os.environ.setdefault("NETWORK_PROXY_URL", "")
os.environ.setdefault("LOG_LEVEL", "WARNING")


@pytest.fixture
def today() -> date:
    return date(2024, 6, 10)
