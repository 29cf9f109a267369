import logging
from pathlib import Path

from app.config import Settings
from app.log import LabeledFormatter, setup_logging


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("DEAL_FEED_SOURCE_PATH", "/data/sales.csv")
    monkeypatch.setenv("DEAL_FEED_CORS_ORIGINS", '["https://example.github.io"]')
    monkeypatch.setenv("DEAL_FEED_LOG_LEVEL", "debug")

    settings = Settings()
    assert settings.source_path == Path("/data/sales.csv")
    assert settings.cors_origins == ["https://example.github.io"]
    assert settings.log_level == "debug"


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("DEAL_FEED_SOURCE_PATH", raising=False)
    settings = Settings(_env_file=None)
    assert settings.source_path == Path("deals.xlsx")
    assert settings.cors_origins == ["*"]


def test_setup_logging_is_idempotent():
    logger = setup_logging("debug")
    setup_logging("info")
    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO
    assert logger.propagate is False


def test_labeled_format():
    record = logging.LogRecord("app.normalize", logging.WARNING, __file__, 1, "row %d skipped", (3,), None)
    assert LabeledFormatter().format(record) == "WARN row 3 skipped"
