#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Command line interface of netbootlite.

Global options are generated from the fields of `Config` and may also be
read from a configuration file (see `click_config_file`). Subcommands
live one per file in `COMMAND_FOLDER` and are only loaded once invoked,
each file exposing its command as `cli`. The parsed Config is handed to
subcommands as the click context object.
"""
import logging
import os
import typing as t
from dataclasses import fields
from functools import cache, reduce

import click
import click_config_file
from click import Context

from netbootlite.cli.config import DEFAULT_CONFIG, Config
from netbootlite.logging import DUMB_LOGGER
from netbootlite.logging import get as get_logger
from netbootlite.logging import setup as setup_logging

COMMAND_FOLDER = os.path.join(os.path.dirname(__file__), "commands")


class NetbootliteCLI(click.Group):
    """Group whose subcommands are the python files in `COMMAND_FOLDER`."""

    @staticmethod
    def list_commands(_: Context) -> t.List[str]:
        """Return the sorted names of the available subcommands."""

        return sorted(
            filename.removesuffix(".py")
            for filename in os.listdir(COMMAND_FOLDER)
            if filename.endswith(".py") and filename != "__init__.py"
        )

    @staticmethod
    def get_command(_: Context, cmd_name: str) -> t.Optional[click.Command]:
        """
        Load the subcommand with the given name.

        Returns
        -------
        click.Command or None
            The `cli` object defined in `COMMAND_FOLDER/<cmd_name>.py`,
            None if there is no such file.
        """

        filename = os.path.join(COMMAND_FOLDER, cmd_name + ".py")
        if not os.path.exists(filename):
            return None

        namespace: t.Dict[str, t.Any] = {}
        with open(filename, encoding="utf-8") as pyfile:
            code = compile(pyfile.read(), filename, "exec")
            eval(code, namespace, namespace)
        return namespace["cli"]


@cache
def config_to_click(config: Config):
    """
    Build a decorator adding a click option for each field of config.

    Field `foo_bar` becomes `--foo-bar` (`--foo-bar/--no-foo-bar` for
    booleans), defaulting to the field's value in config and documented
    by the `foo_bar_help` field.
    """

    decs: t.List[t.Callable] = []
    for field in fields(config):
        if field.name.endswith("_help"):
            continue

        flag = "--" + field.name.replace("_", "-")
        if field.type == bool:
            flag += f"/--no-{flag[2:]}"

        decs.append(
            click.option(
                flag,
                default=getattr(config, field.name),
                show_default=True,
                help=getattr(config, field.name + "_help", ""),
            )
        )

    def wrapper(func):
        # First field ends up as the outermost decorator
        return reduce(lambda wrapped, dec: dec(wrapped), reversed(decs), func)

    return wrapper


def command_logger(config: Config, name: str) -> logging.Logger:
    """
    Return the logger a listing command should use.

    Commands other than start stay silent unless verbose is given, in
    which case debug logs go to the screen.
    """

    if config.verbose:
        setup_logging(verbose=True, use_file=False, use_stream=True)
        return get_logger(name)
    return DUMB_LOGGER


@click.command(cls=NetbootliteCLI)
@config_to_click(DEFAULT_CONFIG)
@click_config_file.configuration_option()
@click.pass_context
def cli(ctx, **kwargs):
    """Arm machines to netboot a payload and serve it to them."""

    ctx.obj = Config(**kwargs)


def run():
    """Entrypoint of the netbootlite script."""

    cli()  # pylint: disable=no-value-for-parameter


if __name__ == "__main__":
    run()
