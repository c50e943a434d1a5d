import logging

import pytest

from pacing.functools import make_debounced
from pacing.logging import setup_logging


@pytest.fixture(autouse=True)
def _reset_loggers():
    yield
    for name in ("pacing", "pacing.scheduler"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.setLevel(logging.NOTSET)
        logger.propagate = True


def test_writes_wrapper_activity_to_file(tmp_path, clock):
    log_file = tmp_path / "pacing.log"
    setup_logging(str(log_file))

    d = make_debounced(lambda value: value, 100, leading=True, scheduler=clock)
    d("a")
    clock.advance(100)

    text = log_file.read_text()
    assert "pacing.functools" in text
    assert "firing leading call" in text
    assert "window closed" in text


def test_defaults_to_stderr_with_overrides():
    setup_logging(loggers={"pacing.scheduler": "WARNING"}, level="INFO")

    logger = logging.getLogger("pacing")
    assert logger.level == logging.INFO
    assert isinstance(logger.handlers[0], logging.StreamHandler)
    assert logging.getLogger("pacing.scheduler").level == logging.WARNING


def test_pacing_records_do_not_reach_root(tmp_path):
    setup_logging(str(tmp_path / "pacing.log"))

    assert logging.getLogger("pacing").propagate is False
