#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Read definitions and templates out of the configuration directory.

Everything read here is operator-provided, so files are validated
before being read and every failure surfaces as a ValueError (or an
OSError from the filesystem itself).
"""
import logging
import os
import typing as t
from pathlib import Path

import orjson
from jinja2 import Environment, StrictUndefined, TemplateError

from netbootlite.logging import DUMB_LOGGER
from netbootlite.logging import get as get_logger

# Boot scripts are plain text, nothing should be html-escaped. Undefined
# variables raise instead of silently rendering empty kernel lines.
TEMPLATE_ENV = Environment(autoescape=False, undefined=StrictUndefined)


class DataFile:
    """
    A file inside the configuration directory.

    Parameters
    ----------
    path : Path
        Absolute path of the file.
    """

    __slots__ = ("path",)

    def __init__(self, path: Path):
        self.path: Path = path

    def validate(self):
        """
        Make sure the file can be read safely.

        The path has to be absolute and point to a readable regular file
        which is not a symlink.

        Raises
        ------
        ValueError
            Naming the first check the path failed.
        """

        checks = (
            (Path.is_absolute, "Path is relative"),
            (Path.exists, "Path does not exist"),
            (Path.is_file, "Path is not a file"),
            (lambda p: not p.is_symlink(), "Path is a symlink"),
            (lambda p: os.access(p, os.R_OK), "Path is not readable"),
        )
        for check, msg in checks:
            if not check(self.path):
                raise ValueError(f"{msg}: {self.path}")

    def read(self) -> bytes:
        """Validate, then return the content of the file."""

        self.validate()
        return self.path.read_bytes()

    def read_json(self) -> t.Any:
        """
        Validate, then decode the file as json.

        Raises
        ------
        ValueError
            If the file fails validation or is not valid json
            (orjson.JSONDecodeError is a ValueError).
        """

        return orjson.loads(self.read())


def render_template_source(
    source: str, environment: Environment = TEMPLATE_ENV, **context: t.Any
) -> str:
    """
    Render the given jinja2 template source with kwargs as variables.

    Raises
    ------
    ValueError
        If the template is invalid or uses an undefined variable.
    """

    try:
        return environment.from_string(source).render(**context)
    except TemplateError as err:
        raise ValueError(f"Unable to render template: {err}") from err


class DataJinjaTemplate(DataFile):
    """
    A jinja2 template inside the configuration directory.

    Parameters
    ----------
    path : Path
        Absolute path of the template.
    environment : jinja2.Environment, optional
        Environment to render with, `TEMPLATE_ENV` by default.
    """

    __slots__ = ("environment",)

    def __init__(
        self, path: Path, environment: t.Optional[Environment] = None
    ):
        super().__init__(path)
        self.environment = TEMPLATE_ENV if environment is None else environment

    def render(self, **context: t.Any) -> bytes:
        """
        Read the template and render it with kwargs as variables.

        Raises
        ------
        ValueError
            If the file fails validation or cannot be rendered.
        """

        get_logger("DataJinjaTemplate").debug(
            "Rendering %s with %s", self.path, context
        )
        source = self.read().decode("utf-8")
        return render_template_source(
            source, self.environment, **context
        ).encode("utf-8")


def find_json_files(
    root_dir: Path, logger: logging.Logger = DUMB_LOGGER
) -> t.List[Path]:
    """
    Recursively collect json files underneath the given directory.

    Unreadable sub-directories are logged and skipped. Results are sorted
    so that definitions load in a stable order.
    """

    found: t.List[Path] = []

    def on_error(err: OSError):
        logger.warning("Error occurred while looking for json files: %s", err)

    logger.info("Looking for json files in %s", root_dir)
    for (path, _, files) in os.walk(root_dir, onerror=on_error):
        found.extend(
            Path(path) / file for file in files if file.endswith(".json")
        )

    return sorted(found)
