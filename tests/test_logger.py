"""Tests for loguru configuration and registry diagnostics routing."""

from __future__ import annotations

from pathlib import Path

import pytest
from loguru import logger

from paramparser.logger import ParserLogger, create_module_logger
from paramparser.registry import ParameterRegistry
from paramparser.settings import ParserSettings


@pytest.fixture
def parser_logger():
    instance = ParserLogger()
    yield instance
    instance.reset()


def test_configure_logging_installs_file_handler(parser_logger: ParserLogger, tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "paramparser.log"
    parser_logger.configure_logging(ParserSettings(log_level="debug", log_file=log_file))
    assert parser_logger.is_configured
    assert parser_logger.log_file_path == log_file

    create_module_logger("tests").info("hello from tests")
    parser_logger.reset()
    assert "hello from tests" in log_file.read_text(encoding="utf-8")


def test_reconfigure_replaces_handlers(parser_logger: ParserLogger, tmp_path: Path) -> None:
    parser_logger.configure_logging(ParserSettings(log_file=tmp_path / "a.log"))
    parser_logger.configure_logging(ParserSettings())
    assert parser_logger.log_file_path is None
    assert len(parser_logger._handler_ids) == 1


def test_registry_defaults_to_loguru(tmp_path: Path) -> None:
    messages: list[str] = []
    handler_id = logger.add(messages.append, level="WARNING", format="{message}")
    try:
        registry = ParameterRegistry()
        registry.register("known")
        config = tmp_path / "p.cfg"
        config.write_text("known 1\nstranger 2\n", encoding="utf-8")
        registry.load_from_file(config)
    finally:
        logger.remove(handler_id)
    assert len(messages) == 1
    assert "registry.load.unknown_parameter" in messages[0]
    assert "stranger" in messages[0]
