#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Describe configuration variables for runtime."""
from dataclasses import dataclass

from netbootlite.vars import IPMITOOL_EXEC


@dataclass
class Config:
    """Define config variables and help text."""

    verbose: bool = False
    verbose_help: str = "Enable verbose logging"
    quiet: bool = False
    quiet_help: str = "Disable printing logs to screen"
    log_dir: str = "/var/log/netbootlite"
    log_dir_help: str = "Provide path to log directory. File rotation is used."
    persist_log: bool = False
    persist_log_help: str = "Persist logs to disk at given log dir."
    config_dir: str = "/etc/netbootlite"
    config_dir_help: str = (
        "Path to configuration directory holding machine and payload "
        "definitions."
    )
    output_gunicorn_logs: bool = True
    output_gunicorn_logs_help: str = "Print gunicorn logs to the screen"
    gunicorn_layer_default: bool = True
    gunicorn_layer_default_help: str = (
        "Layer gunicorn config on top of "
        "the default gunicorn config. This lets user configurations use "
        "and override variables in the gunicorn config."
    )
    ipmitool: str = IPMITOOL_EXEC
    ipmitool_help: str = "ipmitool executable used for ipmi pre-boot actions."
    threads: int = 8
    threads_help: str = (
        "Number of threads serving requests. Boot arming state lives in "
        "memory, so a single gunicorn worker process is always used."
    )

    def __hash__(self):
        return hash(repr(self))


DEFAULT_CONFIG = Config()
