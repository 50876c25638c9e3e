"""
Test configuration - ensures repo root is in sys.path + settings isolation.

This allows tests to import from top-level packages (activity_engine, activity_api).
Tests never read the user's ~/.activity_engine config or ACTIVITY_* variables
from the environment; settings and the API's service are reset around every test.
"""

import sys
from pathlib import Path

import pytest

# Add repo root to sys.path so tests can import activity_engine.*, activity_api.*
REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from activity_engine import config as engine_config  # noqa: E402
from tests.fixtures import NOW, make_meeting, make_shooting, make_task, sources_payload  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Point config at an empty home and drop cached settings."""
    for env_key in engine_config.ENV_KEYS.values():
        monkeypatch.delenv(env_key, raising=False)
    monkeypatch.setenv("ACTIVITY_ENGINE_HOME", str(tmp_path / "home"))
    monkeypatch.delenv("ACTIVITY_ENGINE_CONFIG", raising=False)
    engine_config.reset_settings()
    yield
    engine_config.reset_settings()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def task_row():
    return make_task()


@pytest.fixture
def shooting_row():
    return make_shooting()


@pytest.fixture
def meeting_row():
    return make_meeting()


@pytest.fixture
def source_rows():
    return sources_payload()
