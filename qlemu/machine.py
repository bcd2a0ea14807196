"""Machine set-up: memory size, ROM loading and screen memory layout."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

log = logging.getLogger(__name__)

KB = 1024
SCREEN_BASE = 128 * KB
DEFAULT_SCREEN_LEN = 0x8000
_MIN_QDOS_RAM = 256 * KB
_MINERVA_MAX = 16384 * KB
_OTHER_MAX = 4096 * KB


@dataclass(frozen=True)
class ScreenGeometry:
    """Screen size and where its memory lies, with the resulting top of RAM."""

    xres: int
    yres: int
    linel: int
    qm_lo: int
    qm_hi: int
    qm_len: int
    rtop: int


def resolve_rom_path(rom_dir: str, rom_name: str, home: str = "") -> str:
    """Path of a ROM: a name with a slash is used as is, else it lives in ``rom_dir``.

    A ``rom_dir`` starting with ``~`` is taken relative to ``home``.
    """
    if "/" in rom_name:
        return rom_name
    if rom_dir.startswith("~"):
        return f"{home}/{rom_dir[1:]}/{rom_name}"
    return f"{rom_dir}/{rom_name}"


def load_rom(memory: bytearray, rom_dir: str, rom_name: str, address: int,
             home: str = "") -> int:
    """Copy a ROM image into ``memory`` at ``address``; return the bytes loaded.

    Raises ``OSError`` if the file cannot be read and ``ValueError`` if it
    does not fit in memory.
    """
    path = resolve_rom_path(rom_dir, rom_name, home)
    with open(path, "rb") as handle:
        data = handle.read()
    expected = os.path.getsize(path)
    if len(data) != expected:
        log.error("partial read of %s", path)
    if address < 0 or address + len(data) > len(memory):
        raise ValueError(f"ROM {path} does not fit at 0x{address:x}")
    memory[address:address + len(data)] = data
    return len(data)


def memory_top(ramsize: int, ramtop: int, nextp8: bool = True) -> int:
    """Top of the memory space in bytes from the ``ramsize`` and ``ramtop`` options.

    On a QL ``ramsize`` counts RAM above the first 128K, and less than 128K
    of RAM raises ``ValueError``.
    """
    if ramsize:
        rtop = ramsize * KB if nextp8 else (128 + ramsize) * KB
    else:
        rtop = ramtop * KB
    if not nextp8 and rtop < _MIN_QDOS_RAM:
        raise ValueError(f"not enough ram defined for QDOS {rtop // KB - 128}K")
    return rtop


def _default_screen(rtop: int) -> ScreenGeometry:
    return ScreenGeometry(512, 256, 128, SCREEN_BASE,
                          SCREEN_BASE + 32 * KB, DEFAULT_SCREEN_LEN, rtop)


def screen_layout(xres: int, yres: int, rtop: int, minerva: bool,
                  nextp8: bool = True) -> ScreenGeometry:
    """Lay out screen memory for the requested resolution.

    Only Minerva supports other sizes than 512x256; a large screen is moved
    to the top of RAM, lowering the RAM top.  The memory limit of the ROM in
    use is applied first.
    """
    rtop = min(rtop, _MINERVA_MAX if minerva else _OTHER_MAX)
    geometry = _default_screen(rtop)
    if minerva:
        xres &= ~7
        linel = xres // 4
        qm_len = linel * yres
        geometry = ScreenGeometry(xres, yres, linel, SCREEN_BASE,
                                  SCREEN_BASE + qm_len, qm_len, rtop)
        if qm_len > DEFAULT_SCREEN_LEN:
            if rtop - qm_len < _MIN_QDOS_RAM + 8192:
                log.warning("not enough RAM for such a big screen")
                geometry = _default_screen(rtop)
            else:
                qm_lo = ((rtop - qm_len) >> 15) << 15
                geometry = ScreenGeometry(xres, yres, linel, qm_lo,
                                          qm_lo + qm_len, qm_len, qm_lo)
    if nextp8:
        geometry = ScreenGeometry(128, 128, 128, 0, 0x2000, 0x2000, geometry.rtop)
    return geometry