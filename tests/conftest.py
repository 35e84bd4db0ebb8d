"""Shared test fixtures and configuration."""

import os
from pathlib import Path
import sys

import pytest


SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


ENV_PREFIX = "DIAGRAM_STORE_"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Drop store settings from the environment and reset cached settings."""
    from diagram_file_store.config import get_settings

    for key in list(os.environ):
        if key.upper().startswith(ENV_PREFIX):
            monkeypatch.delenv(key, raising=False)

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
