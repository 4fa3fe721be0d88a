from loguru import logger

from progress_engine.config import Settings, settings
from progress_engine.logging_setup import setup_logging


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("PROGRESS_ENGINE_DEFAULT_PERMISSION", raising=False)
    defaults = Settings(_env_file=None)
    assert defaults.default_permission == "employee"
    assert defaults.default_currency == "BRL"
    assert defaults.log_path is None


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("PROGRESS_ENGINE_DEFAULT_PERMISSION", "admin")
    monkeypatch.setenv("PROGRESS_ENGINE_LOG_LEVEL", "DEBUG")
    configured = Settings(_env_file=None)
    assert configured.default_permission == "admin"
    assert configured.log_level == "DEBUG"


def test_setup_logging_writes_file_sink(tmp_path, monkeypatch):
    log_path = tmp_path / "logs" / "engine.log"
    monkeypatch.setattr(settings, "log_path", str(log_path))
    setup_logging()
    logger.info("dashboard ready")
    logger.remove()

    assert "dashboard ready" in log_path.read_text(encoding="utf-8")
