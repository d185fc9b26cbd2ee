# tests/test_logging_utils.py
"""Tests for the shared logger setup used by every module."""

import logging

import pytest

from blocks_world_env.utils.logging_utils import (
    DEFAULT_LEVEL,
    get_level_from_string,
    set_logger_level,
    setup_logger,
)


class TestSetupLogger:

    def test_repeated_setup_keeps_one_handler(self):
        setup_logger("blocks_world_env.tests.repeat", level=logging.ERROR)
        logger = setup_logger("blocks_world_env.tests.repeat", level=logging.ERROR)
        assert len(logger.handlers) == 1
        assert logger.level == logging.ERROR

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "world.log"
        logger = setup_logger("blocks_world_env.tests.file", level=logging.INFO, log_file=str(log_file))
        logger.info("snapshot applied")
        for h in logger.handlers:
            h.flush()
        assert len(logger.handlers) == 2
        assert "snapshot applied" in log_file.read_text()

    def test_set_logger_level_updates_handlers(self):
        logger = setup_logger("blocks_world_env.tests.level", level=logging.ERROR)
        set_logger_level(logger, logging.DEBUG)
        assert logger.level == logging.DEBUG
        assert all(h.level == logging.DEBUG for h in logger.handlers)


class TestLevelFromString:

    @pytest.mark.parametrize("name, level", [
        ("debug", logging.DEBUG),
        ("WARNING", logging.WARNING),
        ("Error", logging.ERROR),
    ])
    def test_known_levels(self, name, level):
        assert get_level_from_string(name) == level

    def test_unknown_level_falls_back_to_default(self):
        assert get_level_from_string("chatty") == DEFAULT_LEVEL
