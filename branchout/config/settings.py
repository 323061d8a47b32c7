from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()

CONFIG_FILE = Path("branchout_config.json")

X_ENV_VARS = [
    "X_API_KEY",
    "X_API_SECRET",
    "X_ACCESS_TOKEN",
    "X_ACCESS_TOKEN_SECRET",
]

DEFAULT_CONFIG: dict[str, Any] = {
    "model": "claude-3-5-haiku-latest",
    "max_tokens": 1024,
    "remote_timeout_seconds": 30.0,
    "database_path": "branchout.db",
    "host": "127.0.0.1",
    "port": 3001,
    "cors_origins": ["http://localhost:3000"],
    "log_file": "branchout.log",
}


@dataclass
class Settings:
    """Holds all application configuration loaded from environment variables and config file."""

    anthropic_api_key: str | None = None
    x_credentials: dict[str, str] | None = None
    model: str = DEFAULT_CONFIG["model"]
    max_tokens: int = DEFAULT_CONFIG["max_tokens"]
    remote_timeout_seconds: float = DEFAULT_CONFIG["remote_timeout_seconds"]
    database_path: str = DEFAULT_CONFIG["database_path"]
    host: str = DEFAULT_CONFIG["host"]
    port: int = DEFAULT_CONFIG["port"]
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CONFIG["cors_origins"]))
    log_file: str = DEFAULT_CONFIG["log_file"]

    @property
    def remote_enabled(self) -> bool:
        return bool(self.anthropic_api_key)

    @property
    def publishing_enabled(self) -> bool:
        return self.x_credentials is not None


def _load_config_file(path: Path = CONFIG_FILE) -> dict[str, Any]:
    if path.exists():
        with open(path, encoding="utf-8") as f:
            user_config = json.load(f)
        merged = {**DEFAULT_CONFIG, **user_config}
        return merged
    return dict(DEFAULT_CONFIG)


def _read_x_credentials() -> dict[str, str] | None:
    """Return all four X credentials, or None when none are set.

    A partial set is a configuration mistake and fails loudly.
    """
    env_values: dict[str, str] = {}
    missing: list[str] = []
    for var in X_ENV_VARS:
        value = os.getenv(var)
        if not value:
            missing.append(var)
        else:
            env_values[var] = value
    if not env_values:
        return None
    if missing:
        raise EnvironmentError(
            f"Missing required environment variables: {', '.join(missing)}. "
            "Set all X credentials in your .env file or none of them."
        )
    return env_values


def load_settings(config_path: Path = CONFIG_FILE) -> Settings:
    config = _load_config_file(config_path)

    return Settings(
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
        x_credentials=_read_x_credentials(),
        model=config.get("model", DEFAULT_CONFIG["model"]),
        max_tokens=int(config.get("max_tokens", DEFAULT_CONFIG["max_tokens"])),
        remote_timeout_seconds=float(
            config.get("remote_timeout_seconds", DEFAULT_CONFIG["remote_timeout_seconds"])
        ),
        database_path=os.getenv("BRANCHOUT_DB_PATH")
        or config.get("database_path", DEFAULT_CONFIG["database_path"]),
        host=config.get("host", DEFAULT_CONFIG["host"]),
        port=int(os.getenv("PORT") or config.get("port", DEFAULT_CONFIG["port"])),
        cors_origins=config.get("cors_origins", DEFAULT_CONFIG["cors_origins"]),
        log_file=config.get("log_file", DEFAULT_CONFIG["log_file"]),
    )
