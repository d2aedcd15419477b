#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Endpoint used by netboot loaders to claim their armed payload."""
from flask import request
from flask_restx import Namespace, Resource

from netbootlite.logging import get as get_logger
from netbootlite.serve.context import get_context
from netbootlite.serve.util import make_json_response, resolve_payload

ns: Namespace = Namespace(
    "claim", description="Get the payload armed for a mac address."
)
_logger = get_logger("claim")


@ns.route("/<string:mac>", endpoint="claim")
@ns.param("mac", "Mac address the loader booted from")
class Claim(Resource):
    """Resource representing the payload armed for a mac."""

    @staticmethod
    def get(mac: str):
        """
        Get the payload armed for the given mac.

        Claiming does not disarm the mac, repeated claims return the
        same payload.
        """

        payload, error_resp = resolve_payload(
            get_context(), mac, request, _logger
        )
        if error_resp is not None:
            return error_resp

        return make_json_response(payload.model_dump(mode="json"), 200)
