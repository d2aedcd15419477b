#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Test netbootlite.logging module."""
import logging
import logging.handlers

import pytest

import netbootlite.logging
from netbootlite.cli.config import Config
from netbootlite.vars import LOGFILE_NAME

pytestmark = pytest.mark.usefixtures("do_log_teardown")


def test_value_error_raised_if_file_path_not_given_for_setup():
    """Test `ValueError` raised if `file_path` is not given with `use_file`."""

    with pytest.raises(ValueError):
        netbootlite.logging.setup(use_file=True, file_path=None)

    with pytest.raises(ValueError):
        netbootlite.logging.setup(use_file=True, file_path=1)  # type: ignore

    netbootlite.logging.setup(use_file=False, file_path=None)


def test_get_gets_a_child_of_the_base_logger():
    """Test that `get` returns a child of the base logger."""

    netbootlite.logging.setup(use_stream=True)
    logger = netbootlite.logging.get("test")

    assert logger.name == netbootlite.logging.BASENAME + ".test"
    assert logger.hasHandlers()


def test_file_handler_writes_to_given_path(tmp_path):
    """Test logs reach the file given to `setup`."""

    log_file = tmp_path / "netbootlite.log"
    netbootlite.logging.setup(
        verbose=True,
        use_file=True,
        file_path=str(log_file),
        use_stream=False,
    )
    netbootlite.logging.get("test").debug("hello from the test")
    netbootlite.logging.teardown()

    content = log_file.read_text("utf-8")
    assert "DEBUG - netbootlite.test :: hello from the test" in content


def test_teardown_removes_handlers():
    """Test teardown removes the handlers attached by setup."""

    netbootlite.logging.setup(use_stream=True)
    added = list(logging.getLogger(netbootlite.logging.BASENAME).handlers)
    netbootlite.logging.teardown()

    remaining = logging.getLogger(netbootlite.logging.BASENAME).handlers
    assert added
    assert not [h for h in added if h in remaining]


def test_teardown_restores_propagation():
    """Test teardown lets the base logger propagate to root again."""

    base_logger = logging.getLogger(netbootlite.logging.BASENAME)
    netbootlite.logging.setup(use_stream=True)
    assert not base_logger.propagate

    netbootlite.logging.teardown()
    assert base_logger.propagate
    assert base_logger.level == logging.NOTSET


def test_teardown_keeps_foreign_handlers():
    """Test handlers not attached by setup survive teardown."""

    base_logger = logging.getLogger(netbootlite.logging.BASENAME)
    foreign = logging.NullHandler()
    base_logger.addHandler(foreign)
    try:
        netbootlite.logging.setup(use_stream=True)
        netbootlite.logging.teardown()
        assert foreign in base_logger.handlers
    finally:
        base_logger.removeHandler(foreign)


def test_dumb_logger_is_disabled():
    """Test the default logger used by helpers drops everything."""

    assert netbootlite.logging.DUMB_LOGGER.disabled


def test_setup_from_config_honors_quiet_and_persist(tmp_path):
    """Test the server's logging follows quiet and persist_log."""

    base_logger = logging.getLogger(netbootlite.logging.BASENAME)
    before = list(base_logger.handlers)
    netbootlite.logging.setup_from_config(
        Config(quiet=True, persist_log=True, log_dir=str(tmp_path))
    )
    added = [h for h in base_logger.handlers if h not in before]
    assert [type(h) for h in added] == [
        logging.handlers.RotatingFileHandler
    ]
    assert (tmp_path / LOGFILE_NAME).exists()


def test_setup_after_teardown_starts_clean(tmp_path):
    """Test setup after an earlier setup and teardown adds only its own."""

    base_logger = logging.getLogger(netbootlite.logging.BASENAME)
    netbootlite.logging.setup(verbose=True, use_stream=True)
    netbootlite.logging.teardown()

    before = list(base_logger.handlers)
    netbootlite.logging.setup_from_config(
        Config(quiet=True, persist_log=True, log_dir=str(tmp_path))
    )
    added = [h for h in base_logger.handlers if h not in before]
    assert [type(h) for h in added] == [
        logging.handlers.RotatingFileHandler
    ]
    assert not [
        h
        for h in base_logger.handlers
        if type(h) is logging.StreamHandler  # pylint: disable=C0123
    ]


class TestGunicornLogconfig:
    """Test netbootlite.logging.gunicorn_logconfig"""

    @staticmethod
    def test_console_only_by_default(tmp_path):
        """Test gunicorn logs only go to the screen by default."""

        logconfig = netbootlite.logging.gunicorn_logconfig(Config(), tmp_path)
        assert list(logconfig["handlers"]) == ["console"]
        for name in ("gunicorn.access", "gunicorn.error"):
            assert logconfig["loggers"][name] == {
                "level": "INFO",
                "handlers": ["console"],
            }

    @staticmethod
    def test_files_when_persisting(tmp_path):
        """Test persist_log adds rotating files in the log directory."""

        logconfig = netbootlite.logging.gunicorn_logconfig(
            Config(verbose=True, persist_log=True, output_gunicorn_logs=False),
            tmp_path,
        )
        assert logconfig["loggers"]["gunicorn.access"] == {
            "level": "DEBUG",
            "handlers": ["access_file"],
        }
        assert logconfig["handlers"]["error_file"]["filename"] == str(
            tmp_path / netbootlite.logging.GUNICORN_ERROR_LOG
        )
