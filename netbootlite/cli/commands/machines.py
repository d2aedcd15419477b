#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Machines command group"""
import click
from prettytable import PrettyTable

from netbootlite.cli.cli import command_logger
from netbootlite.cli.config import Config
from netbootlite.serve.context import ServeContext


def print_machines(config: Config):
    """Print all machines in the registry given the Config instance."""

    logger = command_logger(config, "machines")
    config_dir = ServeContext.get_dirs(config, logger=logger)[0]
    registry = ServeContext.get_registry(config_dir, logger=logger)

    table = PrettyTable()
    table.field_names = [
        "id",
        "mac",
        "management",
        "actions",
    ]
    for machine in registry.machines:
        table.add_row(
            [
                machine.id,
                machine.mac,
                ""
                if machine.management is None
                else machine.management.address,
                "\n".join(
                    f"{i}: {action.describe()}"
                    for i, action in enumerate(machine.actions)
                ),
            ]
        )

    click.echo(table)


@click.command()
@click.pass_context
def cli(ctx):
    """
    Print information regarding known machines and exit.

    If verbose is given, debug logs will be printed to the screen.
    """

    config: Config = ctx.obj
    print_machines(config)
