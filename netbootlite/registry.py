# -*- coding: utf-8 -*-
"""Read-only registry of known machines and payloads."""
import logging
import typing as t
from pathlib import Path
from types import MappingProxyType

from pydantic import BaseModel, ValidationError

from netbootlite.fsdata import DataFile, find_json_files
from netbootlite.logging import DUMB_LOGGER
from netbootlite.machine import Mac, Machine, MachineId, Payload
from netbootlite.vars import MACHINES_DIR, PAYLOADS_DIR

_M = t.TypeVar("_M", bound=BaseModel)


class Registry:
    """
    Immutable mapping of machine ids to machines and names to payloads.

    Built once at startup and shared between request threads without
    any locking.

    Parameters
    ----------
    machines : iterable of Machine
    payloads : iterable of Payload

    Raises
    ------
    ValueError
        If two machines share an id or a mac, or two payloads share a name.
    """

    __slots__ = ("_machines", "_by_mac", "_payloads")

    def __init__(
        self,
        machines: t.Iterable[Machine] = (),
        payloads: t.Iterable[Payload] = (),
    ):
        by_id: t.Dict[MachineId, Machine] = {}
        by_mac: t.Dict[Mac, Machine] = {}
        by_name: t.Dict[str, Payload] = {}

        for machine in machines:
            if machine.id in by_id:
                raise ValueError(f"Duplicate machine id: {machine.id}")
            if machine.mac in by_mac:
                raise ValueError(
                    f"Machines {by_mac[machine.mac].id} and {machine.id} "
                    f"share mac {machine.mac}"
                )
            by_id[machine.id] = machine
            by_mac[machine.mac] = machine

        for payload in payloads:
            if payload.name in by_name:
                raise ValueError(f"Duplicate payload name: {payload.name}")
            by_name[payload.name] = payload

        self._machines = MappingProxyType(by_id)
        self._by_mac = MappingProxyType(by_mac)
        self._payloads = MappingProxyType(by_name)

    def machine(self, machine_id: str) -> t.Optional[Machine]:
        """Return the machine with the given id, if known."""

        return self._machines.get(MachineId(machine_id))

    def machine_by_mac(self, mac: Mac) -> t.Optional[Machine]:
        """Return the machine with the given normalized mac, if known."""

        return self._by_mac.get(mac)

    def payload(self, name: str) -> t.Optional[Payload]:
        """Return the payload with the given name, if known."""

        return self._payloads.get(name)

    @property
    def machines(self) -> t.List[Machine]:
        """All known machines, sorted by id."""

        return sorted(self._machines.values(), key=lambda m: m.id)

    @property
    def payloads(self) -> t.List[Payload]:
        """All known payloads, sorted by name."""

        return sorted(self._payloads.values(), key=lambda p: p.name)

    def __repr__(self) -> str:
        return (
            f"Registry(machines={len(self._machines)}, "
            f"payloads={len(self._payloads)})"
        )

    @classmethod
    def from_dir(
        cls, config_dir: Path, logger: logging.Logger = DUMB_LOGGER
    ) -> "Registry":
        """
        Load the registry from json files in the configuration directory.

        Machines are read from `MACHINES_DIR` and payloads from
        `PAYLOADS_DIR` (both searched recursively). Each json file holds
        either a single definition or a list of definitions.

        Raises
        ------
        OSError
            If a definition file cannot be read.
        ValueError
            If a definition file is invalid or the definitions conflict.
        """

        config_dir = Path(config_dir).resolve()
        machines = load_definitions(config_dir / MACHINES_DIR, Machine, logger)
        payloads = load_definitions(config_dir / PAYLOADS_DIR, Payload, logger)
        try:
            registry = cls(machines=machines, payloads=payloads)
        except ValueError as err:
            logger.error("Conflicting definitions in %s: %s", config_dir, err)
            raise err

        logger.info(
            "Loaded %d machines and %d payloads from %s",
            len(machines),
            len(payloads),
            config_dir,
        )
        return registry


def load_definitions(
    directory: Path, model: t.Type[_M], logger: logging.Logger = DUMB_LOGGER
) -> t.List[_M]:
    """
    Parse every json file in the given directory into the given model.

    Parameters
    ----------
    directory : Path
    model : pydantic model class
        Model each definition is validated against.
    logger : logging.Logger, optional

    Raises
    ------
    OSError
        If a file cannot be read.
    ValueError
        If a file does not contain valid definitions. Pydantic's
        ValidationError is a subclass of ValueError.
    """

    if not directory.is_dir():
        logger.warning("Definition directory %s does not exist", directory)
        return []

    result: t.List[_M] = []
    for path in find_json_files(directory, logger):
        try:
            content = DataFile(path).read_json()
            if not isinstance(content, list):
                content = [content]
            result.extend(model.model_validate(item) for item in content)
        except (OSError, ValueError, ValidationError) as err:
            logger.error(
                "Unable to parse %s file %s: %s", model.__name__, path, err
            )
            raise err

    return result
