import json
import logging

import pytest

from survivor_pool import config
from survivor_pool.classes.hedging import HedgeSchedule


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    for name in (config.DATA_DIR_ENV, config.DEFAULT_CONTEST_ENV, config.OVERRIDE_TTL_ENV, config.LOG_LEVEL_ENV):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_load_json_config_missing_file_is_empty(tmp_path):
    assert config.load_json_config(tmp_path / "config.json") == {}


def test_load_json_config_rejects_non_object(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        config.load_json_config(path)


def test_resolve_settings_defaults():
    settings = config.resolve_settings({})
    assert settings.data_dir is None
    assert settings.default_contest == "circa"
    assert settings.override_ttl_hours == 72.0
    assert settings.special_week_threshold == 0.4
    assert settings.hedge_schedule == HedgeSchedule()
    assert settings.log_level == "INFO"
    assert settings.logger_levels == {}


def test_resolve_settings_env_overrides_file(monkeypatch):
    monkeypatch.setenv(config.DEFAULT_CONTEST_ENV, "SCS")
    monkeypatch.setenv(config.OVERRIDE_TTL_ENV, "12")
    settings = config.resolve_settings({"default_contest": "circa", "override_ttl_hours": 48, "data_dir": "/srv/pool"})
    assert settings.default_contest == "scs"
    assert settings.override_ttl_hours == 12.0
    assert settings.data_dir == "/srv/pool"


def test_resolve_settings_bad_ttl_falls_back():
    settings = config.resolve_settings({"override_ttl_hours": "soon"})
    assert settings.override_ttl_hours == 72.0


def test_hedge_schedule_overrides_and_unknown_keys(caplog):
    with caplog.at_level(logging.WARNING):
        settings = config.resolve_settings({"hedge_schedule": {"mid_floor_fraction": 0.5, "bogus": 1}})
    assert settings.hedge_schedule.mid_floor_fraction == 0.5
    assert settings.hedge_schedule.late_floor_fraction == HedgeSchedule().late_floor_fraction
    assert "bogus" in caplog.text


def test_load_settings_reads_repo_config(monkeypatch, tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"special_week_threshold": 0.5}), encoding="utf-8")
    monkeypatch.setattr(config, "repo_file", lambda *_parts: path)
    assert config.load_settings().special_week_threshold == 0.5


def test_apply_environment_defaults_does_not_clobber(monkeypatch):
    monkeypatch.setenv(config.DEFAULT_CONTEST_ENV, "scs")
    settings = config.Settings(data_dir="/srv/pool", default_contest="circa", override_ttl_hours=24)
    config.apply_environment_defaults(settings)
    assert config.os.environ[config.DEFAULT_CONTEST_ENV] == "scs"
    assert config.os.environ[config.DATA_DIR_ENV] == "/srv/pool"
    assert config.os.environ[config.OVERRIDE_TTL_ENV] == "24"


def test_log_levels_from_file_and_environment(monkeypatch):
    data = {"log_level": "warning", "logger_levels": {"survivor_pool.classes.pick_ingest": "error"}}
    settings = config.resolve_settings(data)
    assert settings.log_level == "WARNING"
    assert settings.logger_levels == {"survivor_pool.classes.pick_ingest": "ERROR"}

    monkeypatch.setenv(config.LOG_LEVEL_ENV, "debug")
    assert config.resolve_settings(data).log_level == "DEBUG"


def test_apply_environment_defaults_seeds_log_level():
    config.apply_environment_defaults(config.Settings(log_level="WARNING"))
    assert config.os.environ[config.LOG_LEVEL_ENV] == "WARNING"
