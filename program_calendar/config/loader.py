"""Load the calendar engine settings from ``config/base.yaml`` plus an environment overlay.

The overlay is ``config/<APP_ENV>.yaml`` (``APP_ENV`` defaults to ``dev``, read after
``.env`` is loaded) and is deep-merged over the base file. Recognised sections:

* ``calendar``: display timezone, default view, agenda length.
* ``reminders``: enabled flag, lead times in hours, poll cadence in minutes.
* ``storage``: path of the JSON key-value file and the dedup expiry in hours.
* ``logging``: optional root log level.

Unknown environments fall back to the base file alone.
"""
from __future__ import annotations

import os
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_DIR = PROJECT_ROOT / "config"


class CalendarConfig(BaseModel):
    timezone: str = "local"
    agenda_days: int = Field(ge=1, default=14)
    agenda_step_days: int = Field(ge=1, default=7)
    default_view: Literal["month", "week", "day", "agenda"] = "month"


class ReminderConfig(BaseModel):
    enabled: bool = True
    poll_interval_minutes: float = Field(gt=0, default=5.0)
    lead_times_hours: List[int] = Field(default_factory=lambda: [24, 3])

    @field_validator("lead_times_hours")
    @classmethod
    def _positive_unique(cls, value: List[int]) -> List[int]:
        if not value:
            raise ValueError("at least one lead time is required")
        if any(hours <= 0 for hours in value):
            raise ValueError("lead times must be positive")
        return sorted(set(value), reverse=True)

    @property
    def poll_interval(self) -> timedelta:
        return timedelta(minutes=self.poll_interval_minutes)


class StorageConfig(BaseModel):
    path: Path = Path("data/calendar_state.json")
    dedup_expiry_hours: int = Field(ge=1, default=48)

    def resolved_path(self) -> Path:
        if self.path.is_absolute():
            return self.path
        return PROJECT_ROOT / self.path


class LoggingConfig(BaseModel):
    level: str = "INFO"


class AppConfig(BaseModel):
    calendar: CalendarConfig = Field(default_factory=CalendarConfig)
    reminders: ReminderConfig = Field(default_factory=ReminderConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig | None = None
    mode: str = "dev"


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, Mapping):
        raise ValueError(f"{path.name} must contain a mapping of sections, got {type(data).__name__}")
    return dict(data)


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = dict(base)
    for key, value in override.items():
        base_value = merged.get(key)
        if isinstance(base_value, Mapping) and isinstance(value, Mapping):
            merged[key] = _deep_merge(base_value, value)
        else:
            merged[key] = value
    return merged


def load_config(app_env: str | None = None, *, config_dir: Path | None = None) -> AppConfig:
    """Load configuration for the provided environment (defaults to APP_ENV)."""

    load_dotenv()
    config_path = config_dir or DEFAULT_CONFIG_DIR
    env_name = app_env or os.getenv("APP_ENV", "dev")

    base_config = _load_yaml(config_path / "base.yaml")
    env_file = config_path / f"{env_name}.yaml"
    env_config: Dict[str, Any] = {}
    if env_file.exists():
        env_config = _load_yaml(env_file)

    merged = _deep_merge(base_config, env_config)
    merged.setdefault("mode", env_name)

    return AppConfig.model_validate(merged)


__all__ = [
    "CalendarConfig",
    "ReminderConfig",
    "StorageConfig",
    "LoggingConfig",
    "AppConfig",
    "load_config",
]
