#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Module containing flask routes to load on start."""
import typing as t

from flask_restx import Api, Namespace

from netbootlite.serve.routes import boot, claim, ipxe, machines, payloads

namespaces: t.Tuple[Namespace, ...] = (
    boot.ns,
    claim.ns,
    ipxe.ns,
    machines.ns,
    payloads.ns,
)


def register_routes(api: Api):
    """Register all of the routes within the routes module."""

    for namespace in namespaces:
        api.add_namespace(namespace)
