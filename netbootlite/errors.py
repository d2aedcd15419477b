# -*- coding: utf-8 -*-
"""Errors raised while arming and resolving netboots."""
import typing as t


class NetbootError(Exception):
    """Base class for errors reported back to netbootlite clients."""


class UnknownMachine(NetbootError):
    """The requested machine id is not in the registry."""

    def __init__(self, machine_id: str):
        self.machine_id = machine_id
        super().__init__(f"Unknown machine: {machine_id}")


class UnknownPayload(NetbootError):
    """The requested payload name is not in the registry."""

    def __init__(self, payload_name: str, message: t.Optional[str] = None):
        self.payload_name = payload_name
        super().__init__(message or f"Unknown payload: {payload_name}")


class ConfigurationInconsistency(UnknownPayload):
    """A mac is armed with a payload the registry no longer knows about."""

    def __init__(self, mac: str, payload_name: str):
        self.mac = mac
        super().__init__(
            payload_name,
            f"Machine with mac {mac} is armed with payload {payload_name}, "
            "which is missing from the registry",
        )


class NotArmed(NetbootError):
    """No payload is armed for the given mac."""

    def __init__(self, mac: str):
        self.mac = mac
        super().__init__(f"No payload armed for mac {mac}")


class ActionError(NetbootError):
    """A single pre-boot action could not be completed."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class ActionFailed(NetbootError):
    """
    A pre-boot action failed after the machine was armed.

    The arming is kept, so the machine still receives its payload if it
    is brought to netboot by other means.

    Attributes
    ----------
    index : int
        Position of the failed action in the machine's action list.
    reason : str
        Why the action failed.
    machine_id : str
    payload_name : str
    """

    def __init__(
        self, index: int, reason: str, machine_id: str, payload_name: str
    ):
        self.index = index
        self.reason = reason
        self.machine_id = machine_id
        self.payload_name = payload_name
        super().__init__(
            f"Machine {machine_id} is armed to boot payload {payload_name}, "
            f"but pre-boot action {index} failed: {reason}. Manual "
            "intervention is needed to bring the machine to netboot."
        )
