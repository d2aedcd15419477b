#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Logging for netbootlite.

Everything logs below the `BASENAME` logger, see `get`. The server
configures it once from its Config with `setup_from_config`, while
gunicorn's own access and error loggers are configured through the dict
built by `gunicorn_logconfig`, so both end up in the same places with
the same format.
"""
import logging
import logging.handlers
import os
import typing as t
from pathlib import Path

from netbootlite.cli.config import Config
from netbootlite.vars import LOGFILE_NAME

BASENAME = "netbootlite"
FORMAT = "%(asctime)s - %(levelname)s - %(name)s :: %(message)s"
ROTATING_FILE_HANDLER_OPTS: t.Dict[str, t.Any] = {
    "mode": "a",
    "maxBytes": 500 * (10 ** 6),  # 500 MB
    "backupCount": 5,
}
GUNICORN_ACCESS_LOG = "gunicorn.access.log"
GUNICORN_ERROR_LOG = "gunicorn.error.log"

# Disabled logger, used as the default for optional logger parameters
DUMB_LOGGER = logging.getLogger("_dumb_logger")
DUMB_LOGGER.disabled = True

# Handlers attached by `setup`, only these are removed by `teardown`
_HANDLERS: t.List[logging.Handler] = []


def get_stream_handler(
    formatter: logging.Formatter, level: int
) -> logging.StreamHandler:
    """Create a stream handler writing to stderr."""

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    handler.setLevel(level)
    return handler


def get_file_handler(
    formatter: logging.Formatter, level: int, file_path: str
) -> logging.handlers.RotatingFileHandler:
    """
    Create a handler appending to the given file.

    The file is rotated according to `ROTATING_FILE_HANDLER_OPTS`, with
    rotated files kept next to it.
    """

    handler = logging.handlers.RotatingFileHandler(
        file_path, **ROTATING_FILE_HANDLER_OPTS
    )
    handler.setFormatter(formatter)
    handler.setLevel(level)
    return handler


def setup(
    verbose: bool = False,
    use_file: bool = False,
    file_path: t.Optional[str] = None,
    use_stream: bool = True,
):
    """
    Attach handlers to the base logger.

    Parameters
    ----------
    verbose : bool
        Log at DEBUG instead of INFO.
    use_file : bool
        Also log to `file_path`, see `get_file_handler`.
    file_path : str, optional
        Log file, only used and then required with `use_file`.
    use_stream : bool
        Also log to stderr.

    Raises
    ------
    ValueError
        If `use_file` is given without a `file_path` string.
    """

    level = logging.DEBUG if verbose else logging.INFO
    formatter = logging.Formatter(FORMAT)
    handlers: t.List[logging.Handler] = []

    if use_file:
        if not isinstance(file_path, str):
            raise ValueError(
                "A file path is needed to log to a file, got "
                f"{type(file_path)}"
            )
        handlers.append(get_file_handler(formatter, level, file_path))
    if use_stream:
        handlers.append(get_stream_handler(formatter, level))

    logger = logging.getLogger(BASENAME)
    logger.propagate = False
    logger.setLevel(level)
    for handler in handlers:
        logger.addHandler(handler)
    _HANDLERS.extend(handlers)


def setup_from_config(config: Config):
    """
    Set up logging for the server from the given Config.

    Logs go to the screen unless quiet is given, and to `LOGFILE_NAME`
    inside the log directory if persist_log is given.
    """

    setup(
        verbose=config.verbose,
        use_file=config.persist_log,
        file_path=os.path.join(config.log_dir, LOGFILE_NAME),
        use_stream=not config.quiet,
    )


def gunicorn_logconfig(
    config: Config, log_dir: t.Union[str, Path]
) -> t.Dict[str, t.Any]:
    """
    Build gunicorn's logconfig_dict setting from the given Config.

    Access and error logs are printed to stdout if output_gunicorn_logs
    is given and written to rotating files in log_dir if persist_log is
    given.
    """

    handlers: t.Dict[str, t.Dict[str, t.Any]] = {}
    access: t.List[str] = []
    error: t.List[str] = []

    if config.output_gunicorn_logs:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "formatter": "generic",
            "stream": "ext://sys.stdout",
        }
        access.append("console")
        error.append("console")

    if config.persist_log:
        for name, filename, names in (
            ("access_file", GUNICORN_ACCESS_LOG, access),
            ("error_file", GUNICORN_ERROR_LOG, error),
        ):
            handlers[name] = {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "generic",
                "filename": os.path.join(log_dir, filename),
                **ROTATING_FILE_HANDLER_OPTS,
            }
            names.append(name)

    level = "DEBUG" if config.verbose else "INFO"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "loggers": {
            "gunicorn.access": {"level": level, "handlers": access},
            "gunicorn.error": {"level": level, "handlers": error},
        },
        "handlers": handlers,
        "formatters": {
            "generic": {"format": FORMAT, "class": "logging.Formatter"}
        },
    }


def teardown():
    """
    Undo `setup`.

    Handlers attached by `setup` are closed and removed, and the base
    logger propagates to the root logger again. Handlers added by anyone
    else are left alone.
    """

    logger = logging.getLogger(BASENAME)
    while _HANDLERS:
        handler = _HANDLERS.pop()
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def get(name: str) -> logging.Logger:
    """Return the logger called `name` below the base logger."""

    return logging.getLogger(BASENAME).getChild(name)
