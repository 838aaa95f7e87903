from __future__ import annotations

import json
import os
import re
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from pingwatch.errors import ConfigError

from .paths import default_config_path, default_data_dir, expand_path

CONFIG_ENV_VAR = "PINGWATCH_CONFIG"

DEFAULT_MAX_MISSED_PROBES = 3

_SERVER_ADDRESS = re.compile(
    r"^(?:https?://)?"
    r"((25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.){3}"
    r"(25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)"
    r":([0-9]{1,4}|[1-5][0-9]{4}|6[0-4][0-9]{3}|65[0-4][0-9]{2}|655[0-2][0-9]|6553[0-5])$"
)


class AppConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    server_address: str = "127.0.0.1:5000"
    mode: Literal["SWITCH", "ENCRYPTOR"] = "SWITCH"
    max_missed_probes: int = Field(default=DEFAULT_MAX_MISSED_PROBES, ge=1, le=10)

    @field_validator("server_address")
    @classmethod
    def _valid_server_address(cls, value: str) -> str:
        value = value.strip()
        if not _SERVER_ADDRESS.match(value):
            raise ValueError(
                "Invalid IP address and port format. "
                "Expected format: 'ip.address.here:port'"
            )
        return value

    @property
    def base_url(self) -> str:
        if self.server_address.startswith("http"):
            return self.server_address
        return f"http://{self.server_address}"


class StorageConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    path: str = Field(default_factory=lambda: str(default_data_dir()))


class ScheduleConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    probe_interval: float = Field(default=15.0, gt=0)
    resync_interval: float = Field(default=30.0, gt=0)
    config_refresh_interval: float = Field(default=60.0, gt=0)


class ProbingConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    timeout: float = Field(default=1.5, gt=0)
    visible_count: int = Field(default=4, ge=1, le=100)


class DirectoryConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    timeout: float = Field(default=5.0, gt=0)


class Settings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    app: AppConfig = Field(default_factory=AppConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    probing: ProbingConfig = Field(default_factory=ProbingConfig)
    directory: DirectoryConfig = Field(default_factory=DirectoryConfig)


def resolve_config_path(allow_missing: bool = False) -> tuple[Path, bool]:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = expand_path(env_path)
        if not allow_missing and not path.exists():
            raise FileNotFoundError(f"{CONFIG_ENV_VAR} points to missing file: {path}")
        return path, path.exists()

    path = default_config_path()
    return path, path.exists()


def load_settings(path: Path) -> Settings:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in config file: {path}\n{exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read config file: {path}\n{exc}") from exc

    try:
        return Settings.model_validate(data or {})
    except ValidationError as exc:
        raise ConfigError(f"Invalid config file: {path}\n{exc}") from exc


@lru_cache
def get_settings() -> Settings:
    path, exists = resolve_config_path(allow_missing=False)
    if exists:
        return load_settings(path)
    return Settings()


def data_dir_from_settings(settings: Settings) -> Path:
    return expand_path(settings.storage.path)


def _toml_string(value: str) -> str:
    return json.dumps(value)


def render_settings_toml(settings: Settings) -> str:
    lines = [
        "# pingwatch configuration",
        "",
        "[app]",
        f"server_address = {_toml_string(settings.app.server_address)}",
        f"mode = {_toml_string(settings.app.mode)}",
        f"max_missed_probes = {settings.app.max_missed_probes}",
        "",
        "[storage]",
        f"path = {_toml_string(settings.storage.path)}",
        "",
        "[schedule]",
        f"probe_interval = {settings.schedule.probe_interval}",
        f"resync_interval = {settings.schedule.resync_interval}",
        f"config_refresh_interval = {settings.schedule.config_refresh_interval}",
        "",
        "[probing]",
        f"timeout = {settings.probing.timeout}",
        f"visible_count = {settings.probing.visible_count}",
        "",
        "[directory]",
        f"timeout = {settings.directory.timeout}",
        "",
    ]
    return "\n".join(lines)


def write_settings(settings: Settings, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_settings_toml(settings))
