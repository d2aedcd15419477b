#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Endpoint listing the payloads known to netbootlite."""
from flask_restx import Namespace, Resource

from netbootlite.serve.context import get_context
from netbootlite.serve.util import make_json_response, make_message_response

ns: Namespace = Namespace(
    "payloads", description="Work with payloads known to netbootlite."
)


@ns.route("/", endpoint="list_payloads")
class ListPayloads(Resource):
    """Resource representing all known payloads."""

    @staticmethod
    def get():
        """List all payloads, sorted by name."""

        return make_json_response(
            [
                payload.model_dump(mode="json")
                for payload in get_context().registry.payloads
            ],
            200,
        )


@ns.route("/<string:name>", endpoint="get_payload")
@ns.param("name", "Name of the payload")
class GetPayload(Resource):
    """Resource representing a single payload."""

    @staticmethod
    def get(name: str):
        """Get the given payload."""

        payload = get_context().registry.payload(name)
        if payload is None:
            return make_message_response(
                "not_found", f"Unknown payload: {name}", 404
            )
        return make_json_response(payload.model_dump(mode="json"), 200)
