import logging

import pytest

import survivor_pool.logging as app_logging

INGEST_LOGGER = "survivor_pool.classes.pick_ingest"


@pytest.fixture(autouse=True)
def _restore_logging_state():
    root = logging.getLogger()
    original_root_level = root.level
    original_handlers = list(root.handlers)
    original_ingest_level = logging.getLogger(INGEST_LOGGER).level
    yield
    for handler in list(root.handlers):
        if handler not in original_handlers:
            root.removeHandler(handler)
            handler.close()
    root.handlers.clear()
    for handler in original_handlers:
        root.addHandler(handler)
    root.setLevel(original_root_level)
    logging.getLogger(INGEST_LOGGER).setLevel(original_ingest_level)


def test_configure_logging_uses_file_config_when_present(monkeypatch, tmp_path):
    config_path = tmp_path / "logging.ini"
    config_path.write_text("[loggers]\nkeys=root\n", encoding="utf-8")

    calls = {"file_config": 0}

    monkeypatch.setattr(app_logging, "repo_file", lambda *_parts: config_path)
    monkeypatch.setattr(
        app_logging.logging.config,
        "fileConfig",
        lambda *_a, **_k: calls.__setitem__("file_config", calls["file_config"] + 1),
    )
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    logger = app_logging.configure_logging({INGEST_LOGGER: "error"})

    assert calls["file_config"] == 1
    assert logger is logging.getLogger()
    assert logger.level == logging.DEBUG
    assert logging.getLogger(INGEST_LOGGER).level == logging.ERROR


def test_configure_logging_installs_stream_handler_without_file_config(monkeypatch, tmp_path):
    monkeypatch.setattr(app_logging, "repo_file", lambda *_parts: tmp_path / "missing.ini")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    logger = app_logging.configure_logging()

    assert logger is root
    assert logger.level == logging.WARNING
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0], logging.StreamHandler)


def test_configure_logging_defaults_to_info(monkeypatch, tmp_path):
    monkeypatch.setattr(app_logging, "repo_file", lambda *_parts: tmp_path / "missing.ini")
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    assert app_logging.configure_logging().level == logging.INFO

    monkeypatch.setenv("LOG_LEVEL", "chatty")
    assert app_logging.configure_logging().level == logging.INFO


def test_unknown_logger_level_is_skipped_with_warning(monkeypatch, tmp_path, caplog):
    monkeypatch.setattr(app_logging, "repo_file", lambda *_parts: tmp_path / "missing.ini")
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    logging.getLogger(INGEST_LOGGER).setLevel(logging.DEBUG)

    with caplog.at_level(logging.WARNING):
        app_logging.configure_logging({INGEST_LOGGER: "loud"})

    assert logging.getLogger(INGEST_LOGGER).level == logging.DEBUG
    assert "Ignoring unknown level 'loud'" in caplog.text
