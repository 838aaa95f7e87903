from __future__ import annotations

import os
from pathlib import Path

import platformdirs

APP_NAME = "pingwatch"
CONFIG_FILENAME = "config.toml"


def xdg_config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def default_config_path() -> Path:
    return xdg_config_home() / APP_NAME / CONFIG_FILENAME


def default_data_dir() -> Path:
    return Path(platformdirs.user_data_dir(APP_NAME))


def expand_path(value: str) -> Path:
    return Path(os.path.expandvars(os.path.expanduser(value)))
