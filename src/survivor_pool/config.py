"""survivor_pool configuration helpers."""

from __future__ import annotations

import dataclasses
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from survivor_pool.classes.hedging import HedgeSchedule
from survivor_pool.paths import DATA_DIR_ENV, repo_file

logger = logging.getLogger(__name__)

DEFAULT_CONTEST_ENV = "SURVIVOR_DEFAULT_CONTEST"
OVERRIDE_TTL_ENV = "ROOTING_OVERRIDE_TTL_HOURS"
LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    data_dir: str | None = None
    default_contest: str = "circa"
    override_ttl_hours: float = 72.0
    special_week_threshold: float = 0.4
    hedge_schedule: HedgeSchedule = field(default_factory=HedgeSchedule)
    log_level: str = "INFO"
    logger_levels: dict[str, str] = field(default_factory=dict)


def load_json_config(path: Path) -> dict[str, Any]:
    if not path.is_file():
        logger.debug("No config file at %s, using defaults", path)
        return {}
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")
    return data


def _coerce_float(value: Any, fallback: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return fallback


def _resolve_hedge_schedule(raw: Any) -> HedgeSchedule:
    if not isinstance(raw, dict):
        return HedgeSchedule()
    known = {f.name for f in dataclasses.fields(HedgeSchedule)}
    unknown = sorted(set(raw) - known)
    if unknown:
        logger.warning("Ignoring unknown hedge_schedule keys: %s", ", ".join(unknown))
    defaults = HedgeSchedule()
    values = {name: _coerce_float(raw[name], getattr(defaults, name)) for name in known if name in raw}
    return dataclasses.replace(defaults, **values)


def _resolve_logger_levels(raw: Any) -> dict[str, str]:
    if not isinstance(raw, dict):
        return {}
    return {str(name): str(level).upper() for name, level in raw.items()}


def resolve_settings(config_data: dict[str, Any]) -> Settings:
    defaults = Settings()
    data_dir = os.getenv(DATA_DIR_ENV) or config_data.get("data_dir") or None
    default_contest = os.getenv(DEFAULT_CONTEST_ENV) or config_data.get("default_contest") or defaults.default_contest
    ttl_raw = os.getenv(OVERRIDE_TTL_ENV) or config_data.get("override_ttl_hours")
    return Settings(
        data_dir=str(data_dir) if data_dir else None,
        default_contest=str(default_contest).strip().lower(),
        override_ttl_hours=_coerce_float(ttl_raw, defaults.override_ttl_hours),
        special_week_threshold=_coerce_float(
            config_data.get("special_week_threshold"), defaults.special_week_threshold
        ),
        hedge_schedule=_resolve_hedge_schedule(config_data.get("hedge_schedule")),
        log_level=str(os.getenv(LOG_LEVEL_ENV) or config_data.get("log_level") or defaults.log_level).upper(),
        logger_levels=_resolve_logger_levels(config_data.get("logger_levels")),
    )


def load_settings() -> Settings:
    config_data = load_json_config(repo_file("config.json"))
    return resolve_settings(config_data)


def apply_environment_defaults(settings: Settings) -> None:
    if settings.data_dir and not os.getenv(DATA_DIR_ENV):
        os.environ[DATA_DIR_ENV] = settings.data_dir
    if not os.getenv(DEFAULT_CONTEST_ENV):
        os.environ[DEFAULT_CONTEST_ENV] = settings.default_contest
    if not os.getenv(OVERRIDE_TTL_ENV):
        os.environ[OVERRIDE_TTL_ENV] = str(settings.override_ttl_hours)
    if not os.getenv(LOG_LEVEL_ENV):
        os.environ[LOG_LEVEL_ENV] = settings.log_level


def load_and_apply_settings() -> Settings:
    settings = load_settings()
    apply_environment_defaults(settings)
    return settings
