import logging

from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer

from core import logging_config
from core.config import settings


def test_resolve_level_prefers_explicit_name(monkeypatch):
    monkeypatch.setattr(settings, "LOG_LEVEL", "ERROR")
    assert logging_config.resolve_level("warning") == logging.WARNING
    assert logging_config.resolve_level() == logging.ERROR


def test_resolve_level_falls_back_to_debug_flag(monkeypatch):
    monkeypatch.setattr(settings, "LOG_LEVEL", "not-a-level")
    monkeypatch.setattr(settings, "DEBUG", False)
    assert logging_config.resolve_level() == logging.INFO
    monkeypatch.setattr(settings, "DEBUG", True)
    assert logging_config.resolve_level() == logging.DEBUG


def test_app_context_does_not_override_explicit_values():
    event = logging_config.add_app_context(None, "info", {"event": "x", "env": "test"})
    assert event["service"] == settings.PROJECT_NAME
    assert event["env"] == "test"


def test_renderer_selection():
    assert isinstance(logging_config.get_renderer(json_output=True), JSONRenderer)
    assert isinstance(logging_config.get_renderer(json_output=False), ConsoleRenderer)


def test_configure_logging_sets_root_and_mutes_access_log():
    logging_config.configure_logging(level_name="WARNING", json_output=True)

    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert len(root.handlers) == 1
    assert logging.getLogger("uvicorn.access").propagate is False
