from __future__ import annotations

import os
from pathlib import Path

APP_ENV_HOME = "ACTIVITY_ENGINE_HOME"
APP_ENV_CONFIG = "ACTIVITY_ENGINE_CONFIG"


def project_root() -> Path:
    """
    Repository/project root directory.
    Contains activity_engine/, activity_api/, tests/.
    """
    return Path(__file__).parent.parent.resolve()


def app_home() -> Path:
    """
    User-writable home for the activity engine.
    Override with ACTIVITY_ENGINE_HOME.
    """
    if os.environ.get(APP_ENV_HOME):
        return Path(os.environ[APP_ENV_HOME]).expanduser().resolve()
    return (Path.home() / ".activity_engine").resolve()


def config_dir() -> Path:
    return app_home() / "config"


def config_path() -> Path:
    """
    Engine YAML config path.

    Resolution order:
    1. ACTIVITY_ENGINE_CONFIG env var (explicit override)
    2. ~/.activity_engine/config/engine.yaml (default, optional)
    """
    if os.environ.get(APP_ENV_CONFIG):
        return Path(os.environ[APP_ENV_CONFIG]).expanduser().resolve()
    return config_dir() / "engine.yaml"
