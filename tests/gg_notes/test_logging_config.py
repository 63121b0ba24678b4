import json
import logging

import pytest
from pythonjsonlogger import jsonlogger

from gg_notes.logging_config import configure_logging


@pytest.fixture
def restore_root_logger(monkeypatch):
    monkeypatch.delenv("GG_NOTES_LOG_FORMAT", raising=False)
    monkeypatch.delenv("GG_NOTES_LOG_LEVEL", raising=False)
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    werkzeug_level = logging.getLogger("werkzeug").level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("werkzeug").setLevel(werkzeug_level)


def test_json_is_the_default(restore_root_logger):
    handler = configure_logging()

    assert restore_root_logger.handlers == [handler]
    assert isinstance(handler.formatter, jsonlogger.JsonFormatter)
    assert restore_root_logger.level == logging.INFO
    assert logging.getLogger("werkzeug").level == logging.WARNING


def test_json_records_carry_extra_fields(restore_root_logger):
    handler = configure_logging()
    record = logging.LogRecord("gg_notes.test", logging.INFO, __file__, 1, "chunk_done", None, None)
    record.example_id = "qplot_scatter"

    payload = json.loads(handler.format(record))

    assert payload["level"] == "INFO"
    assert payload["message"] == "chunk_done"
    assert payload["example_id"] == "qplot_scatter"


def test_env_vars_select_plain_and_level(restore_root_logger, monkeypatch):
    monkeypatch.setenv("GG_NOTES_LOG_FORMAT", "PLAIN")
    monkeypatch.setenv("GG_NOTES_LOG_LEVEL", "debug")

    handler = configure_logging()

    assert not isinstance(handler.formatter, jsonlogger.JsonFormatter)
    assert restore_root_logger.level == logging.DEBUG


def test_arguments_override_env(restore_root_logger, monkeypatch):
    monkeypatch.setenv("GG_NOTES_LOG_FORMAT", "plain")
    monkeypatch.setenv("GG_NOTES_LOG_LEVEL", "DEBUG")

    handler = configure_logging(level=logging.WARNING, force_format="json")

    assert isinstance(handler.formatter, jsonlogger.JsonFormatter)
    assert restore_root_logger.level == logging.WARNING


@pytest.mark.parametrize("kwargs", [{"force_format": "xml"}, {"level": "LOUD"}])
def test_unknown_format_or_level_raises(restore_root_logger, kwargs):
    with pytest.raises(ValueError):
        configure_logging(**kwargs)
