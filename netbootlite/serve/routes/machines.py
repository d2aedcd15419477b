#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Endpoint listing the machines known to netbootlite and their arming.

Has essentially the same structure as the CLI command "machines", with
the addition of live arming state. Management credentials are never
included.
"""
import typing as t

from flask_restx import Namespace, Resource

from netbootlite.coordinator import MachineStatus
from netbootlite.machine import Machine
from netbootlite.serve.context import get_context
from netbootlite.serve.util import make_json_response, make_message_response

ns: Namespace = Namespace(
    "machines", description="Work with machines known to netbootlite."
)


def _describe(machine: Machine, status: MachineStatus) -> t.Dict[str, t.Any]:
    """Build the json description of a machine and its arming."""

    return {
        "id": machine.id,
        "mac": machine.mac,
        "management": (
            None
            if machine.management is None
            else machine.management.address
        ),
        "actions": [action.describe() for action in machine.actions],
        "armed_payload": status.armed_payload,
    }


@ns.route("/", endpoint="list_machines")
class ListMachines(Resource):
    """Resource representing all known machines."""

    @staticmethod
    def get():
        """List all machines, sorted by id, with their armed payload."""

        context = get_context()
        return make_json_response(
            [
                _describe(context.registry.machine(status.machine_id), status)
                for status in context.coordinator.status()
            ],
            200,
        )


@ns.route("/<string:machine_id>", endpoint="get_machine")
@ns.param("machine_id", "Id of the machine")
class GetMachine(Resource):
    """Resource representing a single machine."""

    @staticmethod
    def get(machine_id: str):
        """Get the given machine and its armed payload."""

        context = get_context()
        machine = context.registry.machine(machine_id)
        if machine is None:
            return make_message_response(
                "not_found", f"Unknown machine: {machine_id}", 404
            )
        status = MachineStatus(
            machine_id=machine.id,
            mac=machine.mac,
            armed_payload=context.coordinator.table.claim(machine.mac),
        )
        return make_json_response(_describe(machine, status), 200)
