from __future__ import annotations

import getpass
import logging
import os
import sys
import tomllib
from pathlib import Path
from typing import Callable

import platformdirs
import tomlkit
from pydantic import BaseModel, Field, ValidationError

from mlbv.errors import ConfigError

logger = logging.getLogger(__name__)

APP_NAME = "mlbv"
ENV_PREFIX = "MLBV_"

CONFIG_TEMPLATE = """\
# mlbv configuration

[credentials]
username = ""
password = ""

[stream]
# Player executable looked up on PATH; the system default opener is used otherwise.
video_player = "mpv"
# Broadcast language to prefer ("en", "es"); leave empty to accept any.
language = "en"

[display]
scores = true
favorite_teams = []

[logging]
level = "WARNING"
"""


class Credentials(BaseModel):
    username: str = ""
    password: str = ""

    @property
    def complete(self) -> bool:
        return bool(self.username and self.password)


class StreamSettings(BaseModel):
    video_player: str | None = None
    language: str | None = "en"


class DisplaySettings(BaseModel):
    scores: bool = True
    favorite_teams: list[str] = Field(default_factory=list)


class LoggingSettings(BaseModel):
    level: str = "WARNING"


class AppConfig(BaseModel):
    credentials: Credentials = Field(default_factory=Credentials)
    stream: StreamSettings = Field(default_factory=StreamSettings)
    display: DisplaySettings = Field(default_factory=DisplaySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def home_override() -> Path | None:
    # MLBV_HOME puts config and token cache side by side in one directory.
    home = os.getenv(f"{ENV_PREFIX}HOME")
    return Path(home) if home else None


def config_path() -> Path:
    base = home_override() or Path(platformdirs.user_config_dir(APP_NAME))
    return base / "config.toml"


def token_cache_path() -> Path:
    base = home_override() or Path(platformdirs.user_cache_dir(APP_NAME))
    return base / "token.json"


def load_config(path: str | Path | None = None) -> AppConfig:
    """Read config.toml (if present) and apply MLBV_USERNAME / MLBV_PASSWORD overrides."""
    resolved = Path(path) if path else config_path()
    raw: dict = {}
    if resolved.exists():
        logger.debug("Loading config from %s", resolved)
        try:
            with open(resolved, "rb") as f:
                raw = tomllib.load(f) or {}
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file {resolved}: {e}") from e
    else:
        logger.debug("No config file at %s; using defaults", resolved)

    try:
        cfg = AppConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid config file {resolved}: {e}") from e

    username = os.getenv(f"{ENV_PREFIX}USERNAME")
    password = os.getenv(f"{ENV_PREFIX}PASSWORD")
    if username or password:
        cfg.credentials = Credentials(
            username=username or cfg.credentials.username,
            password=password or cfg.credentials.password,
        )
    return cfg


def prompt_credentials(
    ask: Callable[[str], str] = input,
    ask_secret: Callable[[str], str] = getpass.getpass,
) -> Credentials:
    if not sys.stdin.isatty():
        raise ConfigError(
            "mlb.tv credentials are missing and stdin is not interactive.\n"
            f"Run `mlbv --init` in a terminal, or create {config_path()}"
        )
    username = ask("Enter mlb.tv username: ").strip()
    password = ask_secret("Enter mlb.tv password: ").strip()
    return Credentials(username=username, password=password)


def ensure_credentials(cfg: AppConfig, **prompt_kwargs) -> Credentials:
    if cfg.credentials.complete:
        return cfg.credentials
    creds = prompt_credentials(**prompt_kwargs)
    if not creds.complete:
        raise ConfigError("mlb.tv username and password are both required")
    return creds


def write_config(path: Path, credentials: Credentials) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    doc = tomlkit.parse(CONFIG_TEMPLATE)
    doc["credentials"]["username"] = credentials.username
    doc["credentials"]["password"] = credentials.password
    path.write_text(tomlkit.dumps(doc), encoding="utf-8")
    os.chmod(path, 0o600)
    return path


def init_config(path: Path | None = None, **prompt_kwargs) -> Path:
    creds = prompt_credentials(**prompt_kwargs)
    return write_config(path or config_path(), creds)
