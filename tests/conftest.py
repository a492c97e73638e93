import os
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("SLATE_SYNC_THEMEKIT_BIN", "theme")
os.environ.setdefault("SHOPIFY_REQUEST_TIMEOUT_SECONDS", "5")
for _key in ("SLATE_STORE", "SLATE_PASSWORD", "SLATE_THEME_ID", "SLATE_IGNORE_FILES", "SLATE_TIMEOUT"):
    os.environ.pop(_key, None)

from slate_sync.slate_env import SlateEnvironment  # noqa: E402


@pytest.fixture
def make_environment():
    def _make(**overrides: str) -> SlateEnvironment:
        values = {
            "SLATE_STORE": "example.myshopify.com",
            "SLATE_PASSWORD": "shpat_token123",
            "SLATE_THEME_ID": "123456",
        }
        values.update(overrides)
        return SlateEnvironment(_env_file=None, **values)

    return _make
