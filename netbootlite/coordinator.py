# -*- coding: utf-8 -*-
"""
Coordinate arming machines for netboot and answering loader claims.

Operators arm a machine with `Coordinator.trigger_boot`, which records
the payload for the machine's mac and then runs the machine's pre-boot
actions. The netboot loader asks for the payload with
`Coordinator.resolve_boot`, passing only the mac it booted from.

The arming record is always written before any action runs and is never
rolled back when an action fails: a machine which reaches netboot by
other means (a manual power cycle, for instance) should still receive the
payload the operator asked for.
"""
import typing as t
from dataclasses import dataclass

from netbootlite.actions import ActionExecutor
from netbootlite.arming import BootArmingTable
from netbootlite.errors import (
    ActionError,
    ActionFailed,
    ConfigurationInconsistency,
    NotArmed,
    UnknownMachine,
    UnknownPayload,
)
from netbootlite.logging import get as get_logger
from netbootlite.machine import Mac, Machine, Payload, normalize_mac
from netbootlite.registry import Registry


@dataclass(frozen=True)
class BootAck:
    """Acknowledgement of a fully successful `trigger_boot` call."""

    machine_id: str
    mac: Mac
    payload_name: str
    actions_run: int


@dataclass(frozen=True)
class MachineStatus:
    """Arming state of a single registry machine."""

    machine_id: str
    mac: Mac
    armed_payload: t.Optional[str]


class Coordinator:
    """
    Arm machines and resolve their payloads.

    One instance is built per process and handed to every request
    handler. The registry is read-only and shared without locking; the
    arming table guards itself.

    Parameters
    ----------
    registry : Registry
    executor : ActionExecutor, optional
        Used to run pre-boot actions. A default executor running real
        commands is created if omitted.
    table : BootArmingTable, optional
        Arming table to use, a new empty one is created if omitted.
    """

    def __init__(
        self,
        registry: Registry,
        executor: t.Optional[ActionExecutor] = None,
        table: t.Optional[BootArmingTable] = None,
    ):
        self.registry = registry
        self.executor = ActionExecutor() if executor is None else executor
        self.table = BootArmingTable() if table is None else table
        self.logger = get_logger("Coordinator")

    def _get_machine(self, machine_id: str) -> Machine:
        machine = self.registry.machine(machine_id)
        if machine is None:
            self.logger.warning("Request for unknown machine %s", machine_id)
            raise UnknownMachine(machine_id)
        return machine

    def trigger_boot(self, machine_id: str, payload_name: str) -> BootAck:
        """
        Arm the given machine with the given payload and run its actions.

        Actions run in declared order. The first failing action stops the
        sequence, the remaining ones are not attempted.

        Raises
        ------
        UnknownPayload
            If the payload is not in the registry. Nothing is changed.
        UnknownMachine
            If the machine is not in the registry. Nothing is changed.
        ActionFailed
            If a pre-boot action failed. The machine stays armed.
        """

        payload = self.registry.payload(payload_name)
        if payload is None:
            self.logger.warning("Request for unknown payload %s", payload_name)
            raise UnknownPayload(payload_name)
        machine = self._get_machine(machine_id)

        self.table.arm(machine.mac, payload.name)

        for index, action in enumerate(machine.actions):
            try:
                self.executor.execute(action, machine)
            except ActionError as err:
                self.logger.error(
                    "Pre-boot action %d (%s) failed for machine %s, which "
                    "stays armed with %s: %s",
                    index,
                    action.describe(),
                    machine.id,
                    payload.name,
                    err.reason,
                )
                raise ActionFailed(
                    index, err.reason, machine.id, payload.name
                ) from err

        self.logger.info(
            "Machine %s armed with %s, %d pre-boot actions completed",
            machine.id,
            payload.name,
            len(machine.actions),
        )
        return BootAck(
            machine_id=machine.id,
            mac=machine.mac,
            payload_name=payload.name,
            actions_run=len(machine.actions),
        )

    def resolve_boot(self, mac: str) -> Payload:
        """
        Return the payload armed for the given mac.

        Resolving does not disarm the mac; asking again returns the same
        payload until the machine is re-armed or released.

        Raises
        ------
        ValueError
            If the given mac is not a valid mac address.
        NotArmed
            If nothing is armed for the mac, including unknown macs.
        ConfigurationInconsistency
            If the armed payload is missing from the registry.
        """

        normalized = normalize_mac(mac)
        payload_name = self.table.claim(normalized)
        if payload_name is None:
            self.logger.info("Claim from %s, which is not armed", normalized)
            raise NotArmed(normalized)

        payload = self.registry.payload(payload_name)
        if payload is None:
            self.logger.error(
                "Mac %s is armed with missing payload %s",
                normalized,
                payload_name,
            )
            raise ConfigurationInconsistency(normalized, payload_name)

        machine = self.registry.machine_by_mac(normalized)
        self.logger.info(
            "Claim from %s (machine %s) resolved to %s",
            normalized,
            machine.id if machine is not None else "unknown",
            payload.name,
        )
        return payload

    def release_boot(self, machine_id: str) -> t.Optional[str]:
        """
        Disarm the given machine.

        Returns
        -------
        str or None
            Name of the payload the machine was armed with, or None if it
            was not armed.

        Raises
        ------
        UnknownMachine
            If the machine is not in the registry.
        """

        machine = self._get_machine(machine_id)
        return self.table.release(machine.mac)

    def armed(self) -> t.Dict[Mac, str]:
        """Return a snapshot of the armed macs and their payload names."""

        return self.table.snapshot()

    def status(self) -> t.List[MachineStatus]:
        """Return the arming state of every registry machine."""

        armed = self.armed()
        return [
            MachineStatus(
                machine_id=machine.id,
                mac=machine.mac,
                armed_payload=armed.get(machine.mac),
            )
            for machine in self.registry.machines
        ]
