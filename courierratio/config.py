# file: courierratio/config.py
"""
Configuration loader.

- The bdcourier API key is a secret: keep it in `.env` or the environment,
  never in YAML committed to a repo.
- YAML holds non-secret defaults (server host/port, timeouts, logging).
- Everything is validated with pydantic.

Precedence (highest to lowest):
1. OS environment variables
2. `.env` values
3. YAML config file values
4. Code defaults
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values
from pydantic import BaseModel, Field
from pydantic import ConfigDict as PydanticConfigDict

from courierratio.gateway.client import BASE_URL
from courierratio.net.http import DEFAULT_USER_AGENT, HttpClientConfig


class CourierRatioSettings(BaseModel):
    model_config = PydanticConfigDict(extra="ignore", frozen=True)

    # Upstream
    api_key: str | None = Field(default=None, repr=False)
    base_url: str = BASE_URL

    # Logging
    log_level: str = "INFO"
    json_logging: bool = False

    # HTTP
    http_timeout_seconds: float = 10.0
    http_user_agent: str = DEFAULT_USER_AGENT

    # API server
    server_host: str = "127.0.0.1"
    server_port: int = 8000
    cors_origins: list[str] = Field(default_factory=list)

    def http_config(self) -> HttpClientConfig:
        return HttpClientConfig(
            timeout_seconds=self.http_timeout_seconds,
            user_agent=self.http_user_agent,
        )


_ENV_MAP: dict[str, str] = {
    "BDCOURIER_API_KEY": "api_key",
    "COURIERRATIO_BASE_URL": "base_url",
    "COURIERRATIO_LOG_LEVEL": "log_level",
    "COURIERRATIO_JSON_LOGGING": "json_logging",
    "COURIERRATIO_HTTP_TIMEOUT_SECONDS": "http_timeout_seconds",
    "COURIERRATIO_HTTP_USER_AGENT": "http_user_agent",
    "COURIERRATIO_SERVER_HOST": "server_host",
    "COURIERRATIO_SERVER_PORT": "server_port",
    # JSON array or comma-separated: ["http://localhost:3000"]
    "COURIERRATIO_CORS_ORIGINS": "cors_origins",
}


def _read_yaml(path: Path) -> dict[str, Any]:
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    return raw if isinstance(raw, dict) else {}


def _read_dotenv(path: Path) -> dict[str, str]:
    return {k: v for k, v in dotenv_values(path).items() if isinstance(v, str)}


def _parse_origins(raw: str) -> list[str]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return [o.strip() for o in raw.split(",") if o.strip()]
    if isinstance(parsed, list):
        return [str(o) for o in parsed]
    return []


def _overlay_env(target: dict[str, Any], env: dict[str, str]) -> None:
    for env_key, field_name in _ENV_MAP.items():
        if env_key not in env:
            continue
        raw = env[env_key]
        if field_name == "cors_origins":
            target[field_name] = _parse_origins(raw)
        elif field_name == "api_key":
            # An empty value means "not set", not an empty credential.
            target[field_name] = raw.strip() or None
        else:
            target[field_name] = raw


def load_settings(
    *, yaml_path: Path | None = None, env_path: Path | None = None
) -> CourierRatioSettings:
    """
    Load settings from YAML and .env, with OS env overrides.

    Args:
        yaml_path: Optional YAML config path (else `COURIERRATIO_CONFIG`).
        env_path: Optional .env path (default: `.env` if present).
    """

    data: dict[str, Any] = {}

    if env_path is None:
        maybe = Path(".env")
        env_path = maybe if maybe.exists() else None

    dotenv = _read_dotenv(env_path) if env_path is not None and env_path.exists() else {}

    if yaml_path is None:
        cfg = os.environ.get("COURIERRATIO_CONFIG") or dotenv.get("COURIERRATIO_CONFIG")
        if cfg:
            yaml_path = Path(cfg)

    if yaml_path is not None and yaml_path.exists():
        data.update(_read_yaml(yaml_path))

    if dotenv:
        _overlay_env(data, dotenv)

    os_env: dict[str, str] = {k: v for k, v in os.environ.items() if k in _ENV_MAP}
    _overlay_env(data, os_env)

    return CourierRatioSettings.model_validate(data)
