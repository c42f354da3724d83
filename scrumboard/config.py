"""Client configuration.

Resolved in three layers, later ones winning: dataclass defaults, an
optional YAML file, then ``SCRUMBOARD_*`` environment variables. The CLI
applies its own flags on top.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from .board.notifications import TOAST_TIMEOUT
from .exceptions import ConfigError

ENV_PREFIX = "SCRUMBOARD_"


@dataclass
class ClientConfig:
    """Connection and display settings for the board client."""

    base_url: str = "http://localhost:8080"
    session_cookie: str | None = None
    cookie_name: str = "JSESSIONID"
    request_timeout: float | None = None  # None keeps the httpx default
    toast_timeout: float = TOAST_TIMEOUT
    project_id: int | None = None


_FIELD_TYPES = {
    "request_timeout": float,
    "toast_timeout": float,
    "project_id": int,
}

_NULLABLE = {"session_cookie", "request_timeout", "project_id"}


def _coerce(name: str, value):
    if value is None or value == "":
        return None
    caster = _FIELD_TYPES.get(name)
    return caster(value) if caster else str(value)


def read_config_file(path: Path) -> dict:
    """Load a YAML mapping of ClientConfig fields."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(path, str(e)) from e

    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(path, f"not valid YAML ({e})") from e

    if not isinstance(data, dict):
        raise ConfigError(path, "top level must be a mapping")
    return data


def load_config(path: Path | None = None, environ: dict[str, str] | None = None) -> ClientConfig:
    environ = os.environ if environ is None else environ
    known = {f.name for f in dataclasses.fields(ClientConfig)}
    values: dict = {}

    if path is not None:
        for key, value in read_config_file(path).items():
            key = str(key).replace("-", "_")
            if key not in known:
                raise ConfigError(path, f"unknown setting '{key}'")
            values[key] = value

    for name in known:
        env_value = environ.get(ENV_PREFIX + name.upper())
        if env_value is not None:
            values[name] = env_value

    try:
        coerced = {k: _coerce(k, v) for k, v in values.items()}
    except (TypeError, ValueError) as e:
        raise ConfigError(path or "environment", str(e)) from e

    # Blank values fall back to defaults, except where None is meaningful
    coerced = {k: v for k, v in coerced.items() if v is not None or k in _NULLABLE}
    return ClientConfig(**coerced)
