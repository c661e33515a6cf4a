"""Root conftest — shared test configuration.

Invariants:
    - Tests never read the user's ~/.config/unitrack or a real Linear API key
    - get_settings() cache is cleared around every test
"""

import os
import tempfile

import pytest

_CONFIG_DIR = tempfile.mkdtemp(prefix="unitrack-tests-")
os.environ["UNITRACK_CONFIG_DIR"] = _CONFIG_DIR
os.environ["UNITRACK_CONFIG_FILE"] = os.path.join(_CONFIG_DIR, "absent.json")
os.environ["UNITRACK_API_KEY"] = ""

from unitrack.config import get_settings  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
