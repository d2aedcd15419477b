#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# pylint: disable=all
"""
Required configuration of gunicorn for netbootlite.

Armed boots are only held in the memory of the serving process, so
requests are always served by threads of one worker process. Load this
before any other gunicorn configuration.

For more information, see netbootlite.serve.context and
netbootlite.serve.app
"""
from gunicorn.arbiter import Arbiter
from gunicorn.workers.base import Worker

from netbootlite.logging import gunicorn_logconfig
from netbootlite.serve.context import ServeContext

# --- Preflight check for needed context variable
_ctx: ServeContext = globals().get("ctx", None)
if _ctx is None:
    raise ValueError("Unable to get current application context.")

# --- Workers ---
workers = 1
worker_class = "gthread"
threads = _ctx.config.threads

# --- Logging ---
logconfig_dict = gunicorn_logconfig(_ctx.config, _ctx.log_dir)


def post_fork(server: Arbiter, worker: Worker):
    """
    Announce the registry being served once the worker is up.

    See https://docs.gunicorn.org/en/stable/settings.html#post-fork
    """

    _ctx.start()


def worker_exit(server: Arbiter, worker: Worker):
    """
    Report armed boots which are lost as the worker exits.

    See https://docs.gunicorn.org/en/stable/settings.html#worker-exit
    """

    _ctx.stop()
