"""Tests for logging setup."""

import logging

import pytest

from vcrbpkg.logging_config import ColoredFormatter, get_logger, normalize_level, setup_logging


class TestNormalizeLevel:

    @pytest.mark.parametrize("value,expected", [
        ("debug", "DEBUG"),
        (" info ", "INFO"),
        ("warn", "WARNING"),
        ("fatal", "CRITICAL"),
    ])
    def test_names_and_aliases(self, value, expected):
        assert normalize_level(value) == expected

    @pytest.mark.parametrize("value", ["chatty", "", 10, None])
    def test_rejected(self, value):
        with pytest.raises(ValueError):
            normalize_level(value)


class TestColoredFormatter:

    def _record(self):
        return logging.LogRecord('vcrbpkg.test', logging.WARNING, __file__, 1, "careful", None, None)

    def test_colors_level_and_restores_record(self):
        record = self._record()

        output = ColoredFormatter('%(levelname)s - %(message)s').format(record)

        assert output.startswith('\033[33mWARNING\033[0m')
        assert record.levelname == 'WARNING'

    def test_plain_without_color(self):
        output = ColoredFormatter('%(levelname)s - %(message)s', use_color=False).format(self._record())

        assert output == 'WARNING - careful'


class TestSetupLogging:

    def test_console_level_and_file(self, tmp_path):
        log_file = tmp_path / 'run.log'

        logger = setup_logging('warn', str(log_file))
        get_logger('packager').debug("only in the file")

        assert logger.level == logging.DEBUG
        console, file_handler = logger.handlers
        assert console.level == logging.WARNING
        assert file_handler.level == logging.DEBUG
        file_handler.flush()
        assert "only in the file" in log_file.read_text(encoding='utf-8')
        file_handler.close()

    def test_level_without_file(self):
        logger = setup_logging('error')

        assert logger.level == logging.ERROR
        assert len(logger.handlers) == 1
