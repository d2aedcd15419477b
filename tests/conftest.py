#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# pylint: disable=redefined-outer-name
"""Store shared fixtures for netbootlite tests."""
import json
import re
import subprocess
import threading
import typing as t
from pathlib import Path

import pytest
from hypothesis import HealthCheck, settings
from hypothesis import strategies as st

import netbootlite.logging
from netbootlite.actions import ActionExecutor
from netbootlite.cli.config import Config
from netbootlite.coordinator import Coordinator
from netbootlite.machine import Machine, Payload
from netbootlite.registry import Registry
from netbootlite.serve.app import create_app
from netbootlite.serve.context import ServeContext
from netbootlite.vars import DATA_DIR, EXEC_DIR, MACHINES_DIR, PAYLOADS_DIR

settings.register_profile(
    "suppress_too_slow",
    suppress_health_check=(
        HealthCheck.too_slow,
        HealthCheck.function_scoped_fixture,
    ),
    deadline=None,
    max_examples=25,
)
settings.load_profile("suppress_too_slow")

# Machines and payloads shared by most tests.
# node1/ubuntu-installer is the canonical happy path, "chain" has several
# commands so ordering and early stops can be checked, and "broken" has a
# command which always fails.
MACHINE_DEFS: t.List[t.Dict[str, t.Any]] = [
    {"id": "node1", "mac": "aa:bb:cc:dd:ee:ff"},
    {
        "id": "chain",
        "mac": "02:00:00:00:00:01",
        "actions": [
            {"type": "command", "program": "step0"},
            {"type": "command", "program": "step1", "args": ["--now"]},
            {"type": "command", "program": "step2"},
            {"type": "command", "program": "step3"},
        ],
    },
    {
        "id": "broken",
        "mac": "02:00:00:00:00:02",
        "actions": [{"type": "command", "program": "fail"}],
    },
    {
        "id": "bmc",
        "mac": "02:00:00:00:00:03",
        "management": {
            "address": "10.0.0.3",
            "username": "admin",
            "password": "hunter2",
        },
        "actions": [
            {"type": "ipmi", "command": "bootdev_pxe"},
            {"type": "ipmi", "command": "power_cycle"},
        ],
    },
]
PAYLOAD_DEFS: t.List[t.Dict[str, t.Any]] = [
    {"name": "ubuntu-installer", "kernel": "vmlinuz", "cmdline": "quiet"},
    {
        "name": "rescue",
        "kernel": "http://boot/rescue/vmlinuz",
        "initrds": ["http://boot/rescue/initrd", "http://boot/rescue/fw"],
        "cmdline": "console=ttyS0",
        "message": "Rescue time",
    },
]


class RecordingRunner:
    """
    Command runner which records calls instead of spawning processes.

    Parameters
    ----------
    fail_programs : iterable of str
        Programs which fail with exit status 1 when run.
    """

    def __init__(self, fail_programs: t.Iterable[str] = ("fail",)):
        self.fail_programs = set(fail_programs)
        self.calls: t.List[t.Tuple[t.List[str], t.Optional[t.Mapping]]] = []
        self._lock = threading.Lock()

    @property
    def programs(self) -> t.List[str]:
        """Programs run so far, in order."""

        return [argv[0] for argv, _ in self.calls]

    def __call__(self, argv, env=None):
        with self._lock:
            self.calls.append((list(argv), env))
        if argv[0] in self.fail_programs:
            raise subprocess.CalledProcessError(
                1, list(argv), output=b"", stderr=b"it broke"
            )
        return subprocess.CompletedProcess(list(argv), 0, b"", b"")


@st.composite
def mac_strategy(draw):
    """Hypothesis strategy to generate mac addresses in any accepted form."""

    octets = draw(st.lists(st.integers(0, 255), min_size=6, max_size=6))
    separator = draw(st.sampled_from([":", "-", ""]))
    mac = separator.join(f"{octet:02x}" for octet in octets)
    return mac.upper() if draw(st.booleans()) else mac


@st.composite
def machine_strategy(draw):
    """Hypothesis strategy to generate Machine instances without actions."""

    return Machine(
        id=draw(st.text(min_size=1)),
        mac=draw(mac_strategy()),
    )


@st.composite
def payload_strategy(draw):
    """Hypothesis strategy to generate Payload instances."""

    line = st.characters(exclude_characters="\r\n")
    return draw(
        st.builds(
            Payload,
            name=st.text(line, min_size=1),
            kernel=st.text(line, min_size=1),
            initrds=st.lists(st.text(line, min_size=1), max_size=3).map(
                tuple
            ),
            cmdline=st.text(line),
            message=st.text(line),
        )
    )


CANONICAL_MAC = re.compile(r"^([0-9a-f]{2}:){5}[0-9a-f]{2}$")


@pytest.fixture()
def logfix():
    """Setup and teardown logging for each test."""

    netbootlite.logging.setup(verbose=True, use_stream=True)
    yield
    netbootlite.logging.teardown()


@pytest.fixture
def do_log_teardown():
    """
    Same as logfix, except we only perform the teardown step.

    Used when a test sets up its own logging.
    """

    yield
    netbootlite.logging.teardown()


@pytest.fixture()
def registry() -> Registry:
    """Registry holding the shared machine and payload definitions."""

    return Registry(
        machines=[Machine.model_validate(m) for m in MACHINE_DEFS],
        payloads=[Payload.model_validate(p) for p in PAYLOAD_DEFS],
    )


@pytest.fixture()
def runner() -> RecordingRunner:
    """Command runner recording calls, failing on the 'fail' program."""

    return RecordingRunner()


@pytest.fixture()
def coordinator(registry, runner) -> Coordinator:
    """Coordinator over the shared registry with a recording runner."""

    return Coordinator(registry, executor=ActionExecutor(runner=runner))


def write_config_dir(
    config_dir: Path,
    machines: t.Any = None,
    payloads: t.Any = None,
) -> Path:
    """Populate a configuration directory with the given definitions."""

    for directory in (MACHINES_DIR, PAYLOADS_DIR, EXEC_DIR, DATA_DIR):
        (config_dir / directory).mkdir(parents=True, exist_ok=True)
    (config_dir / MACHINES_DIR / "machines.json").write_text(
        json.dumps(MACHINE_DEFS if machines is None else machines)
    )
    (config_dir / PAYLOADS_DIR / "payloads.json").write_text(
        json.dumps(PAYLOAD_DEFS if payloads is None else payloads)
    )
    return config_dir


@pytest.fixture()
def config_dir(tmp_path) -> Path:
    """Configuration directory holding the shared definitions."""

    return write_config_dir(tmp_path / "config")


@pytest.fixture()
def serve_context(config_dir, runner) -> ServeContext:
    """ServeContext built from the shared configuration directory."""

    return ServeContext.from_config(
        Config(config_dir=str(config_dir)),
        executor=ActionExecutor(runner=runner),
    )


@pytest.fixture()
def client(serve_context):
    """Flask test client for an app serving the shared definitions."""

    app = create_app(serve_context)
    app.config["TESTING"] = True
    with app.test_client() as test_client:
        yield test_client
