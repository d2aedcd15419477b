# -*- coding: utf-8 -*-
"""Track which machines are armed to netboot which payload."""
import threading
import typing as t
from contextlib import contextmanager

from netbootlite.logging import get as get_logger
from netbootlite.machine import Mac


class ReadWriteLock:
    """
    Lock admitting either many readers or a single writer.

    Writers waiting for the lock block new readers from entering, so a
    steady stream of readers cannot starve a writer.
    """

    __slots__ = ("_cond", "_readers", "_writer", "_writers_waiting")

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self):
        """Block until shared access is granted."""

        with self._cond:
            while self._writer or self._writers_waiting > 0:
                self._cond.wait()
            self._readers += 1

    def release_read(self):
        """Give up shared access."""

        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self):
        """Block until exclusive access is granted."""

        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers > 0:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self):
        """Give up exclusive access."""

        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> t.Iterator[None]:
        """Hold shared access for the duration of the with block."""

        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> t.Iterator[None]:
        """Hold exclusive access for the duration of the with block."""

        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


class BootArmingTable:
    """
    Mapping of mac address to the name of the payload it is armed with.

    A mac is present if and only if the machine is armed. Claims are
    non-destructive: the entry stays until it is re-armed or released, as
    loaders may query several times during a single boot attempt.
    """

    __slots__ = ("_entries", "_lock", "logger")

    def __init__(self):
        self._entries: t.Dict[Mac, str] = {}
        self._lock = ReadWriteLock()
        self.logger = get_logger("BootArmingTable")

    def arm(self, mac: Mac, payload_name: str):
        """Arm the given mac with the payload, replacing any previous one."""

        with self._lock.write_locked():
            previous = self._entries.get(mac)
            self._entries[mac] = payload_name

        if previous is not None and previous != payload_name:
            self.logger.info(
                "Re-armed %s with payload %s (was %s)",
                mac,
                payload_name,
                previous,
            )
        else:
            self.logger.info("Armed %s with payload %s", mac, payload_name)

    def claim(self, mac: Mac) -> t.Optional[str]:
        """Return the payload armed for the given mac, if any."""

        with self._lock.read_locked():
            return self._entries.get(mac)

    def release(self, mac: Mac) -> t.Optional[str]:
        """Disarm the given mac, returning the payload it was armed with."""

        with self._lock.write_locked():
            released = self._entries.pop(mac, None)

        if released is not None:
            self.logger.info("Released %s (was armed with %s)", mac, released)
        return released

    def snapshot(self) -> t.Dict[Mac, str]:
        """Return a copy of the current arming entries."""

        with self._lock.read_locked():
            return dict(self._entries)

    def __contains__(self, mac: object) -> bool:
        with self._lock.read_locked():
            return mac in self._entries

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._entries)
