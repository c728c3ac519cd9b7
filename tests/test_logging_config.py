"""
Tests for logging setup and formatters.
"""

import json
import logging

import pytest

from civars.logging_config import (
    HumanReadableFormatter,
    StructuredFormatter,
    parse_log_level,
    setup_logging,
)


def make_record(message, level=logging.INFO):
    return logging.LogRecord("civars.test", level, __file__, 12, message, None, None)


class TestParseLogLevel:
    """Tests for level name mapping."""

    @pytest.mark.parametrize("name,level", [
        ("DEBUG", logging.DEBUG),
        ("info", logging.INFO),
        ("WARN", logging.WARNING),
        ("ERROR", logging.ERROR),
    ])
    def test_known_levels(self, name, level):
        assert parse_log_level(name) == level

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            parse_log_level("TRACE")


class TestFormatters:
    """Tests for the console and JSON formatters."""

    def test_human_readable_masks_tokens(self):
        formatter = HumanReadableFormatter(use_colors=False)

        line = formatter.format(make_record("token glpat-abcdef123456"))

        assert "glpat-****" in line
        assert "abcdef123456" not in line
        assert "INFO" in line

    def test_human_readable_reports_caller(self):
        formatter = HumanReadableFormatter(use_colors=False, report_caller=True)

        line = formatter.format(make_record("hello"))

        assert ":12]" in line

    def test_structured_is_json(self):
        formatter = StructuredFormatter(extra_fields={"service": "civars"})

        data = json.loads(formatter.format(make_record("Wrote key: A", logging.WARNING)))

        assert data["level"] == "WARNING"
        assert data["message"] == "Wrote key: A"
        assert data["service"] == "civars"


def test_setup_logging_configures_package_logger():
    logger = setup_logging(level=logging.DEBUG)

    assert logger.name == "civars"
    assert logger.level == logging.DEBUG
    handlers = logging.getLogger().handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0].formatter, HumanReadableFormatter)
    assert handlers[0].formatter.report_caller is True
