# File: tests/test_logger.py
import logging
from logging.handlers import RotatingFileHandler

import pytest

from csp_scout.logger import configure, init_logging


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    configure()


def test_init_logging_replaces_handlers_and_writes_file(tmp_path):
    log_file = tmp_path / "scan.log"
    lg = init_logging(level="DEBUG", log_file=log_file, log_format="%(levelname)s:%(message)s")

    assert lg.name == "CspScout"
    assert lg.level == logging.DEBUG
    assert not lg.propagate
    assert len(lg.handlers) == 2
    assert isinstance(lg.handlers[1], RotatingFileHandler)

    lg.debug("hello")
    lg.handlers[1].flush()
    assert log_file.read_text(encoding="utf-8").strip() == "DEBUG:hello"

    lg = init_logging()
    assert len(lg.handlers) == 1


def test_configure_can_append_handlers():
    configure()
    lg = configure(replace_handlers=False)
    assert len(lg.handlers) == 2
