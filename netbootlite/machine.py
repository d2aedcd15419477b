# -*- coding: utf-8 -*-
"""Representation of machines, payloads and pre-boot actions."""
import re
import typing as t
from enum import Enum

import orjson
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)

Mac = t.NewType("Mac", str)
MachineId = t.NewType("MachineId", str)

_MAC_SEPARATED = re.compile(
    r"^[0-9a-f]{2}([:-])(?:[0-9a-f]{2}\1){4}[0-9a-f]{2}$"
)
_MAC_BARE = re.compile(r"^[0-9a-f]{12}$")


def normalize_mac(value: str) -> Mac:
    """
    Return the canonical form of the given mac address.

    Canonical form is lower-case hex pairs separated by colons, for
    instance ``aa:bb:cc:dd:ee:ff``. Pairs may be given separated by
    colons or hyphens (iPXE's ``hexhyp`` format), or not separated at all.

    Raises
    ------
    ValueError
        If the given value does not look like a mac address.
    """

    if not isinstance(value, str):
        raise ValueError(f"Expected mac address string, got {type(value)}")

    candidate = value.strip().lower()
    if _MAC_SEPARATED.match(candidate):
        candidate = candidate.replace("-", ":")
    elif _MAC_BARE.match(candidate):
        candidate = ":".join(
            candidate[i : i + 2] for i in range(0, len(candidate), 2)
        )
    else:
        raise ValueError(f"Invalid mac address: {repr(value)}")

    return Mac(candidate)


def _validate_str_not_empty(value: str):
    """Pydantic validator to ensure a string is not empty."""

    if isinstance(value, str) and len(value) == 0:
        raise ValueError("String must contain at least one character.")
    return value


class _NetbootBaseModel(BaseModel):
    """Pydantic BaseModel for everything loaded into the registry."""

    # Registry contents are shared between request threads without
    # locking, so nothing may change after load.
    model_config = ConfigDict(frozen=True, extra="forbid")

    def to_json(self) -> str:
        """Serialize the model to a json string using orjson."""

        return orjson.dumps(self.model_dump(mode="json")).decode()

    @classmethod
    def from_json(cls, raw: t.Union[str, bytes]):
        """Parse a model from the given json string using orjson."""

        return cls.model_validate(orjson.loads(raw))


class RunCommand(_NetbootBaseModel):
    """
    Pre-boot action which runs an external program.

    Attributes
    ----------
    program : str
        Program to execute. Looked up on PATH if not absolute.
    args : tuple of str
        Arguments given to the program, in order.
    """

    type: t.Literal["command"] = "command"
    program: str
    args: t.Tuple[str, ...] = ()

    @field_validator("program")
    @classmethod
    def validate_program_not_empty(cls, value: str):
        """Validate program attribute is not an empty string."""

        return _validate_str_not_empty(value)

    def describe(self) -> str:
        """Return a short human readable description of the action."""

        return " ".join([self.program, *self.args])


class IpmiCommand(str, Enum):
    """Power commands which can be sent to a machine's BMC."""

    bootdev_pxe = "bootdev_pxe"  # pylint: disable=invalid-name
    power_cycle = "power_cycle"  # pylint: disable=invalid-name
    power_reset = "power_reset"  # pylint: disable=invalid-name
    power_on = "power_on"  # pylint: disable=invalid-name
    power_off = "power_off"  # pylint: disable=invalid-name


# ipmitool subcommands for each IpmiCommand
IPMI_SUBCOMMANDS: t.Dict[IpmiCommand, t.Tuple[str, ...]] = {
    IpmiCommand.bootdev_pxe: ("chassis", "bootdev", "pxe"),
    IpmiCommand.power_cycle: ("power", "cycle"),
    IpmiCommand.power_reset: ("power", "reset"),
    IpmiCommand.power_on: ("power", "on"),
    IpmiCommand.power_off: ("power", "off"),
}


class IpmiPower(_NetbootBaseModel):
    """
    Pre-boot action which sends a power command to the machine's BMC.

    Uses the management endpoint of the machine the action belongs to.
    """

    type: t.Literal["ipmi"] = "ipmi"
    command: IpmiCommand

    def describe(self) -> str:
        """Return a short human readable description of the action."""

        return f"ipmi {self.command.value}"


Action = t.Annotated[
    t.Union[RunCommand, IpmiPower], Field(discriminator="type")
]


class ManagementEndpoint(_NetbootBaseModel):
    """
    Credentialed address of a machine's BMC.

    Attributes
    ----------
    address : str
        Hostname or ip of the BMC.
    username : str
    password : SecretStr
        Masked whenever the model is printed or serialized.
    interface : str, optional
        ipmitool interface to use, defaults to lanplus.
    """

    address: str
    username: str
    password: SecretStr
    interface: str = "lanplus"

    @field_validator("address", "interface")
    @classmethod
    def validate_not_empty(cls, value: str):
        """Validate address and interface are not empty strings."""

        return _validate_str_not_empty(value)


class Machine(_NetbootBaseModel):
    """
    Represent a bare-metal machine which can be netbooted.

    Attributes
    ----------
    id : MachineId
        Operator chosen identifier of the machine, unique in the registry.
    mac : Mac
        Mac address the netboot loader will report for the machine.
        Normalized with `normalize_mac`.
    management : ManagementEndpoint, optional
        BMC used by ipmi actions.
    actions : tuple of Action
        Ordered pre-boot actions to run whenever the machine is armed.
    """

    id: MachineId
    mac: Mac
    management: t.Optional[ManagementEndpoint] = None
    actions: t.Tuple[Action, ...] = ()

    @field_validator("id")
    @classmethod
    def validate_id_not_empty(cls, value: str):
        """Validate id attribute is not an empty string."""

        return _validate_str_not_empty(value)

    @field_validator("mac", mode="before")
    @classmethod
    def validate_mac(cls, value: str) -> Mac:
        """Normalize the given mac address."""

        return normalize_mac(value)

    @model_validator(mode="after")
    def ipmi_actions_need_management(self) -> "Machine":
        """Assert a management endpoint is given when ipmi actions are."""

        if self.management is None and any(
            isinstance(action, IpmiPower) for action in self.actions
        ):
            raise ValueError(
                f"Machine {self.id} declares ipmi actions but has no "
                "management endpoint"
            )
        return self


class Payload(_NetbootBaseModel):
    """
    Represent what a machine executes once it reaches netboot.

    Attributes
    ----------
    name : str
        Unique name of the payload.
    kernel : str
        Kernel reference (url or path understood by the loader).
    initrds : tuple of str
        Ordered initrd references.
    cmdline : str
        Kernel command line.
    message : str
        Message shown by the loader before booting.
    """

    name: str
    kernel: str
    initrds: t.Tuple[str, ...] = ()
    cmdline: str = ""
    message: str = ""

    @field_validator("name", "kernel")
    @classmethod
    def validate_not_empty(cls, value: str):
        """Validate name and kernel are not empty strings."""

        return _validate_str_not_empty(value)

    @field_validator("name", "kernel", "initrds", "cmdline", "message")
    @classmethod
    def validate_single_line(cls, value):
        """
        Validate fields rendered into loader scripts hold no line breaks.

        iPXE scripts are line oriented, a line break in any of these
        would add commands to the script.
        """

        for item in value if isinstance(value, tuple) else (value,):
            if "\n" in item or "\r" in item:
                raise ValueError(f"Line breaks are not allowed: {item!r}")
        return value
