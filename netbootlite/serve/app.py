#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Build the flask app and serve it with gunicorn."""
import os
import typing as t
from pathlib import Path

import gunicorn.app.base
from flask import Flask
from flask_restx import Api

from netbootlite.logging import BASENAME
from netbootlite.logging import get as get_logger
from netbootlite.serve.context import ServeContext
from netbootlite.serve.routes import register_routes
from netbootlite.vars import (
    GUNICORN_CONFIG,
    GUNICORN_DEFAULT_CONFIG,
    GUNICORN_REQUIRED_CONFIG,
    VERSION,
)

_logger = get_logger("app")


def create_app(ctx: ServeContext) -> Flask:
    """
    Create the flask app answering requests with the given context.

    Request handlers find the context with
    `netbootlite.serve.context.get_context`.
    """

    # Not BASENAME itself, flask would otherwise take over our base logger
    app = Flask(BASENAME + "_app")
    api = Api(title=BASENAME + "_api", version=VERSION)
    register_routes(api)
    api.init_app(app)
    app.extensions[BASENAME] = ctx

    return app


class NetbootliteGunicornApp(gunicorn.app.base.BaseApplication):
    """
    Gunicorn application serving a netbootlite flask app.

    Settings come from python config files, evaluated in order with the
    ServeContext available to them as the global `ctx`. See
    https://docs.gunicorn.org/en/stable/custom.html.
    """

    def __init__(
        self, app: Flask, config_files: t.List[Path], ctx: ServeContext
    ):
        self.app = app
        self.config_files = config_files
        self.ctx = ctx
        super().__init__()

    def load_config(self):
        """
        Apply every gunicorn setting defined by the config files.

        Armed boots only live in the memory of the serving process, so the
        worker count is reset to one whatever the files say.
        """

        namespace: t.Dict[str, t.Any] = {"ctx": self.ctx}
        for config_file in self.config_files:
            with config_file.open(encoding="utf-8") as config_file_handler:
                code = compile(config_file_handler.read(), config_file, "exec")
                eval(code, namespace, namespace)
        for key, value in namespace.items():
            if key in self.cfg.settings and value is not None:
                self.cfg.set(key.lower(), value)

        if self.cfg.workers != 1:
            _logger.warning(
                "Ignoring gunicorn workers=%s, netbootlite must run in a "
                "single worker process",
                self.cfg.workers,
            )
            self.cfg.set("workers", 1)

    def load(self):
        """Return the flask app to serve."""

        return self.app


def get_config_files(ctx: ServeContext) -> t.List[Path]:
    """
    Return the gunicorn config files to load from the exec directory.

    In order: the required config, then the default config if
    gunicorn_layer_default is set, then the user config. Without a user
    config the default config is used in its place.

    Raises
    ------
    ValueError
        If the required config cannot be read, or if the default config
        is needed but cannot be read.
    """

    readable = lambda p: p.exists() and os.access(p, os.R_OK)
    required = ctx.exec_dir / GUNICORN_REQUIRED_CONFIG
    default = ctx.exec_dir / GUNICORN_DEFAULT_CONFIG
    user = ctx.exec_dir / GUNICORN_CONFIG

    if not readable(required):
        raise ValueError(
            f"Required gunicorn config {required} is missing or unreadable"
        )
    configs = [required]

    use_default = ctx.config.gunicorn_layer_default or not readable(user)
    if use_default:
        if not readable(default):
            raise ValueError(
                f"Default gunicorn config {default} is missing or "
                "unreadable, it is needed since "
                + (
                    "gunicorn_layer_default is set"
                    if ctx.config.gunicorn_layer_default
                    else f"there is no user config at {user}"
                )
            )
        configs.append(default)

    if readable(user):
        configs.append(user)
    else:
        _logger.warning(
            "No gunicorn config found at %s, using defaults from %s",
            user,
            default,
        )

    return configs


def start(app: Flask):
    """Serve the given app with gunicorn, blocking until it exits."""

    ctx: ServeContext = app.extensions[BASENAME]
    configs = get_config_files(ctx)
    _logger.info(
        "Using gunicorn config files at %s",
        ", ".join(str(c) for c in configs),
    )

    NetbootliteGunicornApp(app=app, config_files=configs, ctx=ctx).run()
