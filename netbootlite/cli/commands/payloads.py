#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Payloads command group"""
import click
from prettytable import PrettyTable

from netbootlite.cli.cli import command_logger
from netbootlite.cli.config import Config
from netbootlite.serve.context import ServeContext


def print_payloads(config: Config):
    """Print all payloads in the registry given the Config instance."""

    logger = command_logger(config, "payloads")
    config_dir = ServeContext.get_dirs(config, logger=logger)[0]
    registry = ServeContext.get_registry(config_dir, logger=logger)

    table = PrettyTable()
    table.field_names = [
        "Name",
        "Kernel",
        "Initrds",
        "Cmdline",
        "Message",
    ]
    for payload in registry.payloads:
        table.add_row(
            [
                payload.name,
                payload.kernel,
                "\n".join(payload.initrds),
                payload.cmdline,
                payload.message,
            ]
        )

    click.echo(table)


@click.command()
@click.pass_context
def cli(ctx):
    """
    Print all known payloads and exit.

    If verbose is given, debug logs will be printed to the screen.
    """

    config: Config = ctx.obj
    print_payloads(config)
