#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Start command group."""
import os
import sys

import click

from netbootlite.cli.config import Config
from netbootlite.logging import setup_from_config
from netbootlite.serve.app import create_app, start
from netbootlite.serve.context import ServeContext


@click.command()
@click.pass_context
def cli(ctx):
    """
    Start the netbootlite server.

    Machines and payloads are loaded from the configuration directory
    once, restart the server to pick up changes. Armed boots are lost on
    restart.
    """

    config: Config = ctx.obj
    setup_from_config(config)
    if config.quiet:
        devnull = open(  # pylint: disable=consider-using-with
            os.devnull, "w", encoding="utf-8"
        )
        sys.stderr = devnull
        sys.stdout = devnull
    start(create_app(ServeContext.from_config(config)))
