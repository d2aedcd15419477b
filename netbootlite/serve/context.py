#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Set variables needed for the app at runtime."""
import logging
import os
import typing as t
from dataclasses import dataclass
from pathlib import Path

from flask import current_app

from netbootlite.actions import ActionExecutor
from netbootlite.cli.config import Config
from netbootlite.coordinator import Coordinator
from netbootlite.logging import BASENAME, DUMB_LOGGER
from netbootlite.logging import get as get_logger
from netbootlite.registry import Registry
from netbootlite.vars import DATA_DIR, EXEC_DIR


@dataclass
class ServeContext:
    """
    Set variables needed at runtime for running web-stuffs.

    Assumes logging has already been setup. A ServeContext is attached to
    the flask app it serves (see `netbootlite.serve.app.create_app`) and
    retrieved by request handlers with `get_context`.
    """

    config: Config
    config_dir: Path
    data_dir: Path
    exec_dir: Path
    log_dir: Path
    registry: Registry
    coordinator: Coordinator

    @staticmethod
    def get_dirs(
        config: Config, logger: logging.Logger = DUMB_LOGGER
    ) -> t.Tuple[Path, Path, Path, Path]:
        """
        Return config, data, exec and log directories.

        The data directory is optional. The log directory is only needed
        when logs are persisted.

        Raises
        ------
        ValueError
            If a needed directory does not exist.
        """

        config_dir = Path(config.config_dir).absolute()
        data_dir = config_dir / DATA_DIR
        exec_dir = config_dir / EXEC_DIR
        log_dir = Path(config.log_dir).absolute()

        needed = [("config", config_dir), ("exec", exec_dir)]
        if config.persist_log:
            needed.append(("log", log_dir))
        for name, directory in needed:
            if not os.path.isdir(directory):
                raise ValueError(
                    f"The {name} directory {directory} does not exist"
                )

        logger.info(
            "Using config directory %s (data: %s, exec: %s), log directory %s",
            config_dir,
            DATA_DIR,
            EXEC_DIR,
            log_dir,
        )

        return config_dir, data_dir, exec_dir, log_dir

    @staticmethod
    def get_registry(
        config_dir: Path, logger: logging.Logger = DUMB_LOGGER
    ) -> Registry:
        """Load the Registry from the given configuration directory."""

        return Registry.from_dir(config_dir, logger=logger)

    @staticmethod
    def get_coordinator(
        registry: Registry, executor: t.Optional[ActionExecutor] = None
    ) -> Coordinator:
        """Build the Coordinator serving requests for the given registry."""

        return Coordinator(registry, executor=executor)

    @classmethod
    def from_config(
        cls, config: Config, executor: t.Optional[ActionExecutor] = None
    ) -> "ServeContext":
        """Create ServeContext using the given Config instance."""

        logger = get_logger("ServeContext")
        config_dir, data_dir, exec_dir, log_dir = cls.get_dirs(config, logger)
        registry = cls.get_registry(config_dir, logger)
        if executor is None:
            executor = ActionExecutor(ipmitool=config.ipmitool)
        return cls(
            config=config,
            config_dir=config_dir,
            data_dir=data_dir,
            exec_dir=exec_dir,
            log_dir=log_dir,
            registry=registry,
            coordinator=cls.get_coordinator(registry, executor=executor),
        )

    def start(self):
        """Run one-time startup tasks."""

        get_logger("ServeContext").info(
            "Serving boots for %s", repr(self.registry)
        )

    def stop(self):
        """Run one-time teardown tasks."""

        armed = self.coordinator.armed()
        if len(armed) > 0:
            get_logger("ServeContext").warning(
                "Shutting down with %d armed machines, their arming is lost: "
                "%s",
                len(armed),
                ", ".join(sorted(armed)),
            )


def get_context() -> ServeContext:
    """Return the ServeContext of the flask app handling the request."""

    return current_app.extensions[BASENAME]
