"""Tests for utils logging functionality."""

import io
import logging

from cycle_arbitrage.utils import get_logger


def test_get_logger_basic():
    """Test basic get_logger functionality."""
    logger = get_logger(__name__)
    assert isinstance(logger, logging.Logger)
    assert logger.name == __name__


def test_get_logger_default_level_is_info():
    logger = get_logger(__name__ + ".default_level")
    assert logger.level == logging.INFO


def test_get_logger_with_level():
    """Test get_logger with custom level."""
    logger = get_logger(__name__ + ".test1", level=logging.DEBUG)
    assert logger.level == logging.DEBUG


def test_get_logger_keeps_existing_level():
    name = __name__ + ".preset"
    logging.getLogger(name).setLevel(logging.ERROR)
    logger = get_logger(name, level=logging.DEBUG)
    assert logger.level == logging.ERROR


def test_get_logger_with_extra():
    """Test get_logger with extra context."""
    logger = get_logger(__name__ + ".test2", extra={"pool": "MOE-WMNT"})

    # Should return a LoggerAdapter when extra is provided
    assert isinstance(logger, logging.LoggerAdapter)
    assert logger.extra == {"extra_pool": "MOE-WMNT"}


def test_get_logger_structured_format():
    """Test that get_logger produces structured log format."""
    logger_name = __name__ + ".test3"
    logger = get_logger(logger_name, level=logging.INFO)

    captured_output = io.StringIO()
    handler = logger.handlers[0]
    original_stream = handler.stream
    handler.stream = captured_output
    try:
        logger.info("Test message")
    finally:
        handler.stream = original_stream

    log_output = captured_output.getvalue()
    assert "INFO" in log_output
    assert logger_name in log_output
    assert "Test message" in log_output
    assert "|" in log_output


def test_get_logger_minimal_format():
    logger = get_logger(__name__ + ".minimal", minimal=True)
    format_str = logger.handlers[0].formatter._fmt
    assert format_str == "%(asctime)s | %(message)s"


def test_get_logger_no_duplicate_handlers():
    """Test that get_logger doesn't add duplicate handlers."""
    logger_name = __name__ + ".test4"

    logger1 = get_logger(logger_name)
    logger2 = get_logger(logger_name)

    assert logger1 is logger2
    assert len(logger2.handlers) == 1


def test_get_logger_existing_logger_with_handlers():
    """Test behavior when logger already has handlers."""
    logger_name = __name__ + ".test8"

    existing_logger = logging.getLogger(logger_name)
    existing_handler = logging.StreamHandler()
    existing_logger.addHandler(existing_handler)

    new_logger = get_logger(logger_name)
    assert len(new_logger.handlers) == 1
    assert new_logger.handlers[0] is existing_handler
