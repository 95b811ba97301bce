"""Root test configuration: keep settings isolated from the caller's environment"""

import os

import pytest

from smartblocks.config import ENV_PREFIX


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Drop SMARTBLOCKS_* env vars and run from an empty directory (no config.yaml)."""
    for name in list(os.environ):
        if name.startswith(ENV_PREFIX):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
