from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_config_dir as _uc, user_data_dir as _ud

APP_NAME = "settingsform"

# ---------------------------------------------------------------------------
# User directories
# ---------------------------------------------------------------------------

def _app_name(default: str) -> str:
    return os.getenv("SETTINGSFORM_APP_NAME", default)


def user_config_dir(app_name: str = APP_NAME) -> Path:
    return Path(_uc(appname=_app_name(app_name))).resolve()


def user_data_dir(app_name: str = APP_NAME) -> Path:
    return Path(_ud(appname=_app_name(app_name))).resolve()


def user_config_file() -> Path:
    return user_config_dir() / "settings.ini"


def project_config_file(start: Path | None = None) -> Path:
    return (start or Path.cwd()) / ".settingsform.ini"


def default_store_path() -> Path:
    """Location of the record store used when none is given."""
    env = os.getenv("SETTINGSFORM_STORE")
    if env:
        return Path(env).expanduser().resolve()
    return user_data_dir() / "options.json"
