#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# pylint: disable=unused-argument, redefined-outer-name
"""Test functionality in netbootlite.registry module."""
import json
import typing as t

import pytest
from hypothesis import given
from hypothesis import strategies as st

from netbootlite.machine import Machine, Payload
from netbootlite.registry import Registry
from netbootlite.vars import MACHINES_DIR, PAYLOADS_DIR

from .conftest import (
    MACHINE_DEFS,
    PAYLOAD_DEFS,
    machine_strategy,
    write_config_dir,
)

pytestmark = pytest.mark.usefixtures("logfix")


class TestRegistry:
    """Test functionality of netbootlite.registry.Registry"""

    @staticmethod
    @given(
        machines=st.lists(
            machine_strategy(),
            unique_by=(lambda m: m.id, lambda m: m.mac),
            max_size=10,
        )
    )
    def test_registry_finds_machines_by_id_and_mac(
        machines: t.List[Machine],
    ):
        """Test every machine can be looked up by its id and its mac."""

        registry = Registry(machines=machines)
        for machine in machines:
            assert registry.machine(machine.id) is machine
            assert registry.machine_by_mac(machine.mac) is machine
        assert registry.machines == sorted(machines, key=lambda m: m.id)

    @staticmethod
    def test_registry_returns_none_for_unknown_entries():
        """Test lookups of unknown machines and payloads return None."""

        registry = Registry()
        assert registry.machine("node1") is None
        assert registry.machine_by_mac("aa:bb:cc:dd:ee:ff") is None
        assert registry.payload("ubuntu-installer") is None

    @staticmethod
    def test_registry_rejects_duplicate_machine_ids():
        """Test two machines with the same id cannot be registered."""

        with pytest.raises(ValueError):
            Registry(
                machines=[
                    Machine(id="node1", mac="aa:bb:cc:dd:ee:01"),
                    Machine(id="node1", mac="aa:bb:cc:dd:ee:02"),
                ]
            )

    @staticmethod
    def test_registry_rejects_shared_macs():
        """Test two machines with the same mac cannot be registered."""

        with pytest.raises(ValueError):
            Registry(
                machines=[
                    Machine(id="node1", mac="aa:bb:cc:dd:ee:01"),
                    Machine(id="node2", mac="AA-BB-CC-DD-EE-01"),
                ]
            )

    @staticmethod
    def test_registry_rejects_duplicate_payload_names():
        """Test two payloads with the same name cannot be registered."""

        with pytest.raises(ValueError):
            Registry(
                payloads=[
                    Payload(name="ubuntu", kernel="a"),
                    Payload(name="ubuntu", kernel="b"),
                ]
            )


class TestRegistryFromDir:
    """Test netbootlite.registry.Registry.from_dir"""

    @staticmethod
    def test_from_dir_loads_lists_and_single_definitions(tmp_path):
        """Test files holding a list or a single definition both load."""

        config_dir = write_config_dir(tmp_path)
        nested = tmp_path / PAYLOADS_DIR / "nested"
        nested.mkdir()
        (nested / "single.json").write_text(
            json.dumps({"name": "single", "kernel": "k"})
        )
        (tmp_path / PAYLOADS_DIR / "README.md").write_text("not json")

        registry = Registry.from_dir(config_dir)
        assert {m.id for m in registry.machines} == {
            m["id"] for m in MACHINE_DEFS
        }
        assert {p.name for p in registry.payloads} == {
            *[p["name"] for p in PAYLOAD_DEFS],
            "single",
        }

    @staticmethod
    def test_from_dir_handles_missing_directories(tmp_path):
        """Test a config dir without definitions gives an empty registry."""

        registry = Registry.from_dir(tmp_path)
        assert registry.machines == []
        assert registry.payloads == []

    @staticmethod
    def test_from_dir_raises_on_invalid_json(tmp_path):
        """Test ValueError is raised when a file is not valid json."""

        write_config_dir(tmp_path)
        (tmp_path / MACHINES_DIR / "bad.json").write_text("{nope")
        with pytest.raises(ValueError):
            Registry.from_dir(tmp_path)

    @staticmethod
    def test_from_dir_raises_on_invalid_definition(tmp_path):
        """Test ValueError is raised when a definition fails validation."""

        write_config_dir(
            tmp_path, machines=[{"id": "node1", "mac": "not a mac"}]
        )
        with pytest.raises(ValueError):
            Registry.from_dir(tmp_path)

    @staticmethod
    def test_from_dir_raises_on_conflicts_across_files(tmp_path):
        """Test duplicate definitions split over two files are refused."""

        write_config_dir(tmp_path)
        (tmp_path / MACHINES_DIR / "again.json").write_text(
            json.dumps(MACHINE_DEFS[0])
        )
        with pytest.raises(ValueError):
            Registry.from_dir(tmp_path)
