"""Block device interface: 512-byte sector access to a host image file."""

from __future__ import annotations

import logging
import os
from typing import BinaryIO

log = logging.getLogger(__name__)

SECTOR_SIZE = 512
_CMD_READ = 2
_CMD_WRITE = 3


class BlockDeviceInterface:
    """Emulated BDI hardware backed by an image file; only unit 1 is supported."""

    def __init__(self, path: str | os.PathLike | None = None) -> None:
        self.path = os.fspath(path) if path else ""
        self._files: dict[int, BinaryIO] = {}
        self.address = 0
        self._counter = 0
        self._unit = 0
        self._buffer = bytearray(SECTOR_SIZE)

    def __enter__(self) -> "BlockDeviceInterface":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def unit(self) -> int:
        return self._unit

    def _current(self) -> BinaryIO | None:
        handle = self._files.get(self._unit)
        if handle is None:
            log.debug("BDI: file not open")
        return handle

    def select(self, unit: int) -> None:
        """Select a unit; unit 0 closes the currently selected one."""
        if unit == 1 and unit not in self._files:
            log.debug("BDI: opening %s", self.path)
            if self.path:
                try:
                    self._files[unit] = open(self.path, "r+b")
                except OSError as exc:
                    log.error("BDI: error opening %s: %s", self.path, exc)
        if unit == 0:
            handle = self._files.pop(self._unit, None)
            if handle is not None:
                handle.close()
        self._unit = unit

    def command(self, command: int) -> None:
        """Start a read (2) or write (3) transfer; other commands are ignored."""
        if command in (_CMD_READ, _CMD_WRITE):
            self._counter = 0
        else:
            log.debug("BDI: unknown command 0x%02x", command)

    def status(self) -> int:
        """1 if the selected unit has no open image, otherwise 0."""
        return 0 if self._current() is not None else 1

    def read_data(self) -> int:
        """Return the next byte of the addressed sector, or 0 when exhausted."""
        handle = self._current()
        if handle is None:
            return 0
        if self._counter == 0:
            handle.seek(self.address * SECTOR_SIZE)
            try:
                data = handle.read(SECTOR_SIZE)
            except OSError as exc:
                log.error("BDI read: %s", exc)
            else:
                self._buffer[:len(data)] = data
        if self._counter < SECTOR_SIZE:
            value = self._buffer[self._counter]
            self._counter += 1
            return value
        return 0

    def write_data(self, value: int) -> None:
        """Store a byte; a full sector is written to the image once collected."""
        handle = self._current()
        if handle is None:
            return
        if self._counter == 0:
            handle.seek(self.address * SECTOR_SIZE)
        log.debug("BDI: write %d", self._counter)
        if self._counter < SECTOR_SIZE:
            self._buffer[self._counter] = value & 0xFF
            self._counter += 1
        if self._counter == SECTOR_SIZE:
            try:
                handle.write(self._buffer)
                handle.flush()
                os.fsync(handle.fileno())
            except OSError as exc:
                log.error("BDI write: %s", exc)

    def set_address_high(self, value: int) -> None:
        self.address = (self.address & 0x0000FFFF) | ((value & 0xFFFF) << 16)

    def set_address_low(self, value: int) -> None:
        self.address = (self.address & 0xFFFF0000) | (value & 0xFFFF)

    def _sectors(self) -> int | None:
        handle = self._current()
        if handle is None:
            return None
        return os.fstat(handle.fileno()).st_size // SECTOR_SIZE

    def size_high(self) -> int:
        """High word of the sector count, narrowed to 16 bits before the shift."""
        sectors = self._sectors()
        if sectors is None:
            return 0
        return (sectors & 0xFFFF) >> 16

    def size_low(self) -> int:
        """Low word of the image size in sectors."""
        sectors = self._sectors()
        if sectors is None:
            return 0
        return sectors & 0xFFFF

    def close(self) -> None:
        """Close every open image."""
        for handle in self._files.values():
            handle.close()
        self._files.clear()