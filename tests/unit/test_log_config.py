"""Tests for structlog configuration."""

import logging

import pytest
import structlog

from pairswap.log_config import configure_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    """configure_logging picks the renderer and the minimum level."""

    def test_console_renderer(self):
        configure_logging("INFO")
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_json_renderer(self):
        configure_logging("DEBUG", json_output=True)
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_level(self):
        configure_logging("warning")
        assert structlog.get_config()["wrapper_class"] is structlog.make_filtering_bound_logger(
            logging.WARNING
        )

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            configure_logging("LOUD")
