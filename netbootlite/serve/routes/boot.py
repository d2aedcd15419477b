#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Endpoint used by operators to arm and release machines.

Arming responds with one of three outcomes:

* 200 ``armed``: the payload is configured and every pre-boot action ran.
* 404 ``rejected``: unknown machine or payload, nothing was changed.
* 500 ``armed_action_failed``: the payload is configured but a pre-boot
  action failed, so the machine has to be brought to netboot by hand.
"""
from dataclasses import asdict

from flask import request
from flask_restx import Namespace, Resource

from netbootlite.errors import ActionFailed, UnknownMachine, UnknownPayload
from netbootlite.logging import get as get_logger
from netbootlite.serve.context import get_context
from netbootlite.serve.util import (
    arm_parser,
    make_json_response,
    make_message_response,
    release_parser,
    repr_request,
)

ns: Namespace = Namespace(
    "boot", description="Arm machines to netboot a payload."
)
_logger = get_logger("boot")


@ns.route("/arm", endpoint="arm")
class Arm(Resource):
    """Resource representing the arming of a machine."""

    @staticmethod
    @ns.doc(parser=arm_parser)
    def post():
        """
        Arm the given machine with the given payload.

        Pre-boot actions of the machine run before the response is sent.
        """

        args = arm_parser.parse_args(req=request)
        _logger.info(
            "Received request to arm machine %s with payload %s: %s",
            args["machine"],
            args["payload"],
            repr_request(request),
        )
        context = get_context()
        try:
            ack = context.coordinator.trigger_boot(
                args["machine"], args["payload"]
            )
        except (UnknownMachine, UnknownPayload) as err:
            return make_message_response("rejected", str(err), 404)
        except ActionFailed as err:
            return make_json_response(
                {
                    "status": "armed_action_failed",
                    "message": str(err),
                    "machine_id": err.machine_id,
                    "payload_name": err.payload_name,
                    "index": err.index,
                    "reason": err.reason,
                },
                500,
            )

        return make_json_response({"status": "armed", **asdict(ack)}, 200)

    @staticmethod
    @ns.doc(parser=release_parser)
    def delete():
        """Release the given machine so it no longer receives a payload."""

        args = release_parser.parse_args(req=request)
        _logger.info(
            "Received request to release machine %s: %s",
            args["machine"],
            repr_request(request),
        )
        context = get_context()
        try:
            released = context.coordinator.release_boot(args["machine"])
        except UnknownMachine as err:
            return make_message_response("rejected", str(err), 404)

        return make_json_response(
            {
                "status": "not_armed" if released is None else "released",
                "machine_id": args["machine"],
                "payload_name": released,
            },
            200,
        )
