"""Tests for module-bound loggers."""

from loguru import logger

from remitbot.utils.logger import ERROR_LOG_FILE, get_logger


def _capture(*emit):
    records = []
    sink_id = logger.add(lambda message: records.append(message.record), level="INFO")
    try:
        for fn in emit:
            fn()
    finally:
        logger.remove(sink_id)
    return records


def test_module_name_is_bound():
    records = _capture(lambda: get_logger("wise_service").info("quote created"))

    assert records[0]["extra"]["name"] == "wise_service"


def test_unbound_records_use_package_name():
    records = _capture(lambda: logger.info("plain"))

    assert records[0]["extra"]["name"] == "remitbot"


def test_error_log_sits_beside_main_log():
    assert ERROR_LOG_FILE.endswith("error.log")
