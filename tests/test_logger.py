import logging

import pytest

from wumiibo import logger


@pytest.fixture(autouse=True)
def _restore_logging():
    previous = logger.is_log_enabled()
    yield
    logger.set_log_enabled(previous)


def test_enable_and_disable():
    logger.set_log_enabled(True)
    assert logger.is_log_enabled() is True
    logger.set_log_enabled(False)
    assert logger.is_log_enabled() is False


def test_log_str_disabled_writes_nothing(caplog):
    caplog.set_level(logging.INFO, logger="wumiibo")
    logger.set_log_enabled(False)
    assert logger.log_str("hidden") is False
    assert caplog.records == []


def test_log_str_enabled_writes_message(caplog):
    caplog.set_level(logging.INFO, logger="wumiibo")
    logger.set_log_enabled(True)
    assert logger.log_str("visible") is True
    assert [r.getMessage() for r in caplog.records] == ["visible"]


def test_log_printf_formats(caplog):
    caplog.set_level(logging.INFO, logger="wumiibo")
    logger.set_log_enabled(True)
    logger.log_printf("cmdbuf[%d]:%X", 1, 255)
    assert caplog.records[0].getMessage() == "cmdbuf[1]:FF"


def test_log_printf_truncates_long_messages(caplog):
    caplog.set_level(logging.INFO, logger="wumiibo")
    logger.set_log_enabled(True)
    logger.log_printf("%s", "x" * 5000)
    assert len(caplog.records[0].getMessage()) < 1500


def test_format_buffer_short():
    assert logger.format_buffer("p", b"\x01\xab") == "p hex: 01 ab \n"


def test_format_buffer_breaks_line_at_twelfth():
    text = logger.format_buffer("data", bytes(range(13)))
    assert text.startswith("data hex: 00 01 ")
    assert text.endswith("0c\n\n")


def test_format_buffer_empty():
    assert logger.format_buffer("x", b"") == "x hex: \n"