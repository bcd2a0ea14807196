"""Emulator options from the command line and an ini file, plus the device table."""

from __future__ import annotations

import argparse
import logging
import os
import re
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Sequence

log = logging.getLogger(__name__)

DRIVES_PER_DEVICE = 8
DEFAULT_MAX_DEVICES = 16
DEFAULT_CONFIG = "sqlux.ini"
DEFAULT_VERSION = "v0.0.0-unknown"
_HELP_COLUMN = 30


class OptionError(ValueError):
    """Raised when the command line cannot be parsed."""


class OptionType(Enum):
    """How an option's value is stored."""

    INT = "int"
    CHAR = "char"
    DEV = "dev"


@dataclass
class OptionSpec:
    """One known option, with its current (default or ini) value."""

    name: str
    alias: str
    help: str
    type: OptionType
    int_value: int = 0
    char_value: str | None = None


_BOTH, _QL, _P8 = "both", "ql", "p8"
_I, _C, _D = OptionType.INT, OptionType.CHAR, OptionType.DEV

_SPEC_TABLE = (
    (_QL, "bdi1", "", "file exposed by the BDI interface", _C, 0, None),
    (_QL, "boot_cmd", "b", "command to run on boot (executed in basic)", _C, 0, None),
    (_QL, "boot_device", "d", "device to load BOOT file from", _C, 0, "mdv1"),
    (_BOTH, "cart", "", "p8 cart", _C, 0, None),
    (_QL, "cpu_hog", "", "1 = use all cpu, 0 = sleep when idle", _I, 1, None),
    (_QL, "device", "", "QDOS_name,path,flags (may be used multiple times", _D, 0, None),
    (_QL, "fast_startup", "", "1 = skip ram test (does not affect Minerva)", _I, 0, None),
    (_BOTH, "filter", "", "enable bilinear filter when zooming", _I, 0, None),
    (_QL, "fixaspect", "",
     "0 = 1:1 pixel mapping, 1 = 2:3 non square pixels, 2 = BBQL aspect non square pixels",
     _I, 0, None),
    (_QL, "iorom1", "", "rom in 1st IO area (Minerva only 0x10000 address)", _C, 0, None),
    (_QL, "iorom2", "", "rom in 2nd IO area (Minerva only 0x14000 address)", _C, 0, None),
    (_BOTH, "joy1", "", "1-8 SDL2 joystick index", _I, 0, None),
    (_BOTH, "joy2", "", "1-8 SDL2 joystick index", _I, 0, None),
    (_BOTH, "kbd", "", "keyboard language DE, GB, ES, IT, US", _C, 0, "US"),
    (_QL, "no_patch", "n", "disable patching the rom", _I, 1, None),
    (_QL, "palette", "",
     "0 = Full colour, 1 = Unsaturated colours (slightly more CRT like), "
     "2 =  Enable grayscale display", _I, 0, None),
    (_QL, "print", "", "command to use for print jobs", _C, 0, "lpr"),
    (_P8, "ramtop", "r", "The memory space top (not valid if ramsize set)", _I, 4096, None),
    (_QL, "ramtop", "r", "The memory space top (128K + QL ram, not valid if ramsize set)",
     _I, 4096, None),
    (_BOTH, "ramsize", "", "The size of ram", _I, 0, None),
    (_BOTH, "resolution", "g", "resolution of screen in mode 4", _C, 0, "512x256"),
    (_P8, "rom1", "", "rom 1", _C, 0, "rom.bin"),
    (_P8, "rom2", "", "rom 2", _C, 0, ""),
    (_BOTH, "romdir", "", "path to the roms", _C, 0, "roms"),
    (_QL, "romport", "", "rom in QL rom port (0xC000 address)", _C, 0, None),
    (_QL, "romim", "", "rom in QL rom port (0xC000 address, legacy alias for romport)",
     _C, 0, None),
    (_QL, "ser1", "", "device for ser1", _C, 0, None),
    (_QL, "ser2", "", "device for ser2", _C, 0, None),
    (_QL, "ser3", "", "device for ser3", _C, 0, None),
    (_QL, "ser4", "", "device for ser4", _C, 0, None),
    (_BOTH, "shader", "", "0 = Disabled, 1 = Use flat shader, 2 = Use curved shader",
     _I, 0, None),
    (_BOTH, "shader_file", "", "Path to shader file to use if SHADER is 1 or 2",
     _C, 0, "shader.glsl"),
    (_QL, "skip_boot", "", "1 = skip f1/f2 screen, 0 = show f1/f2 screen", _I, 1, None),
    (_BOTH, "sound", "", "volume in range 1-8, 0 to disable", _I, 8, None),
    (_BOTH, "speed", "", "speed in factor of BBQL speed, 0.0 for full speed", _C, 0, "0.0"),
    (_BOTH, "strict_lock", "", "enable strict file locking", _I, 0, None),
    (_QL, "sysrom", "", "system rom", _C, 0, "MIN198.rom"),
    (_BOTH, "win_size", "w", "window size 1x, 2x, 3x, max, full", _C, 0, "1x"),
    (_BOTH, "verbose", "v", "verbosity level 0-3", _I, 1, None),
)


def _default_specs(nextp8: bool) -> list[OptionSpec]:
    wanted = {_BOTH, _P8 if nextp8 else _QL}
    return [
        OptionSpec(name, alias, text, kind, int_value, char_value)
        for variant, name, alias, text, kind, int_value, char_value in _SPEC_TABLE
        if variant in wanted
    ]


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def replace_pid(path: str, pid: int) -> str:
    """Replace a ``%x`` in ``path`` with ``pid`` in hexadecimal."""
    if "%x" not in path:
        return path
    parts = path.split("%x")
    if len(parts) > 2:
        log.warning("Only one %%x allowed")
    return f"{parts[0]}{pid:x}{parts[1]}"


@dataclass
class DeviceEntry:
    """A directory device such as WIN or RAM with up to eight drives."""

    qname: str
    mount_points: list[str | None] = field(default_factory=lambda: [None] * DRIVES_PER_DEVICE)
    present: list[bool] = field(default_factory=lambda: [False] * DRIVES_PER_DEVICE)
    where: list[int] = field(default_factory=lambda: [0] * DRIVES_PER_DEVICE)
    clean: list[bool] = field(default_factory=lambda: [False] * DRIVES_PER_DEVICE)


class DeviceTable:
    """Fixed-size table of directory devices."""

    def __init__(self, max_devices: int = DEFAULT_MAX_DEVICES, home: str = "") -> None:
        self.slots: list[DeviceEntry | None] = [None] * max_devices
        self.home = home

    def __iter__(self) -> Iterator[DeviceEntry]:
        return (entry for entry in self.slots if entry is not None)

    def find(self, name: str) -> DeviceEntry | None:
        """Look up a device by name, ignoring case."""
        return next((e for e in self if e.qname.lower() == name.lower()), None)

    def install(self, fields: Sequence[str]) -> DeviceEntry | None:
        """Apply a ``NAMEn,path,flags...`` definition, already split at commas.

        Drive number 0 on an existing device removes it.  Returns the entry
        that was changed, or ``None`` if it was removed or the table is full.
        """
        fields = list(fields)
        if not fields or not fields[0]:
            raise ValueError("empty device definition")
        name = fields[0]
        drive = -1
        if name[-1] in "0123456789":
            drive = int(name[-1])
            name = name[:-1]

        index: int | None = None
        free: int | None = None
        for i, slot in enumerate(self.slots):
            if slot is not None and slot.qname.lower() == name.lower():
                index = i
                break
            if slot is None and free is None:
                free = i

        if index is None and free is None:
            log.error("no more free entries in the directory device table")
            return None
        if index is not None and drive == 0:
            self.slots[index] = None
            return None
        if free is not None:
            index = free
            self.slots[index] = DeviceEntry(name.upper())
        entry = self.slots[index]
        assert entry is not None

        if not 1 <= drive <= DRIVES_PER_DEVICE:
            return entry
        slot = drive - 1

        if len(fields) > 1:
            path = fields[1]
            if path.startswith("~"):
                path = f"{self.home}/{path[1:]}"
            path = replace_pid(path, os.getpid())
            is_ram = entry.qname.lower() == "ram"
            if not is_ram and not os.path.exists(path):
                log.warning("Mountpoint %s for device %s%d_ may not be accessible",
                            path, name, drive)
            if os.path.isdir(path) and not path.endswith("/"):
                path += "/"
            if is_ram and not path.endswith("/"):
                path += "/"
            entry.mount_points[slot] = path
            entry.present[slot] = True
        else:
            entry.present[slot] = False

        if len(fields) > 2:
            flag_set = False
            for flag in fields[2:]:
                if "native" in flag or "qdos-fs" in flag:
                    entry.where[slot] = 1
                    flag_set = True
                elif "qdos-like" in flag:
                    entry.where[slot] = 2
                    flag_set = True
                if "clean" in flag:
                    entry.clean[slot] = True
                    flag_set = True
            if not flag_set:
                log.warning("flags %s in definition of %s%d_ not recognised",
                            ",".join(fields[2:]), name, drive)
        return entry


def _strip_inline_comment(text: str) -> str:
    return re.split(r"\s;", text, maxsplit=1)[0].rstrip()


def _read_ini(path: str | os.PathLike) -> Iterator[tuple[str, str, str]]:
    section = ""
    with open(path, encoding="utf-8-sig", errors="replace") as handle:
        for raw in handle:
            line = raw.strip()
            if not line or line[0] in ";#":
                continue
            if line.startswith("["):
                end = line.find("]")
                if end > 0:
                    section = line[1:end].strip()
                continue
            line = _strip_inline_comment(line)
            match = re.search(r"[=:]", line)
            if not match:
                continue
            yield section, line[:match.start()].strip(), line[match.end():].strip()


class _Parser(argparse.ArgumentParser):
    def error(self, message: str):  # type: ignore[override]
        raise OptionError(message)


def _int_arg(text: str) -> int:
    try:
        return int(text, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {text!r}") from None


class EmulatorOptions:
    """Option store: command-line values win over ini values, which win over defaults."""

    def __init__(self, nextp8: bool = True, version: str = DEFAULT_VERSION,
                 home: str = "", max_devices: int = DEFAULT_MAX_DEVICES) -> None:
        self.nextp8 = nextp8
        self.version = version
        self.specs = _default_specs(nextp8)
        self.devices = DeviceTable(max_devices, home)
        self.arguments: list[str] = []
        self.config_file = DEFAULT_CONFIG
        self._given: dict[str, list[object]] = {}

    def help_text(self) -> str:
        """The usage text, listing every option with its current default."""
        parts = ["\nUsage: sqlux [OPTIONS] [args...]\n\nnextp8 software model\n\n"]
        if not self.nextp8:
            parts.append("Positionals:\n  args                        Arguments passed to QDOS\n\n")
        parts.append("Options:\n"
                     "  -h,--help                   Print this help message and exit\n"
                     "  -f,--config [sqlux.ini]     Read an ini file\n")
        for spec in self.specs:
            item = f"  -{spec.alias}," if spec.alias else "  "
            item += f"--{spec.name}"
            if spec.type is OptionType.INT:
                item += f" [{spec.int_value}]"
            elif spec.type is OptionType.CHAR and spec.char_value is not None:
                item += f" [{spec.char_value}]"
            parts.append(f"{item.ljust(_HELP_COLUMN)}{spec.help}\n")
        parts.append("  --version                   version number\n")
        return "".join(parts)

    def _build_parser(self) -> argparse.ArgumentParser:
        parser = _Parser(prog="sqlux", add_help=False, allow_abbrev=False)
        parser.add_argument("-h", "--help", action="store_true")
        parser.add_argument("--version", action="store_true")
        parser.add_argument("-f", "--config", default=DEFAULT_CONFIG)
        for spec in self.specs:
            flags = [f"--{spec.name}"] + ([f"-{spec.alias}"] if spec.alias else [])
            kind = _int_arg if spec.type is OptionType.INT else str
            parser.add_argument(*flags, dest=spec.name, action="append", type=kind)
        parser.add_argument("args", nargs="*")
        return parser

    def parse(self, argv: Iterable[str] | None = None) -> bool:
        """Parse the command line, install devices and read the config file.

        Returns False if the config file could not be read.  ``--help`` and
        ``--version`` print and raise ``SystemExit(0)``.
        """
        args = sys.argv[1:] if argv is None else list(argv)
        namespace = self._build_parser().parse_args(args)
        if namespace.help:
            sys.stdout.write(self.help_text())
            raise SystemExit(0)
        if namespace.version:
            print(self.version)
            raise SystemExit(0)

        self.arguments = list(namespace.args)
        self._given = {
            spec.name: getattr(namespace, spec.name)
            for spec in self.specs
            if getattr(namespace, spec.name)
        }
        if not self.nextp8:
            for definition in self._given.get("device", []):
                self.devices.install(str(definition).split(","))

        self.config_file = namespace.config
        try:
            self.load_ini(self.config_file)
        except OSError:
            log.error("Can't load '%s'", self.config_file)
            return False
        return True

    def load_ini(self, path: str | os.PathLike) -> None:
        """Apply every ``name = value`` line of an ini file; unknown names are ignored."""
        for _section, name, value in _read_ini(path):
            self._apply(name, value)

    def _apply(self, name: str, value: str) -> None:
        if name.lower() == "device":
            self.devices.install(value.split(","))
            return
        for spec in self.specs:
            if spec.name.lower() == name.lower():
                if spec.type is OptionType.CHAR:
                    spec.char_value = value
                elif spec.type is OptionType.INT:
                    spec.int_value = _atoi(value)
                return

    def string(self, name: str) -> str:
        """Current value of a text option, or an empty string."""
        if name in self._given:
            return str(self._given[name][-1])
        for spec in self.specs:
            if (spec.name == name and spec.type is OptionType.CHAR
                    and spec.char_value is not None):
                return spec.char_value
        return ""

    def integer(self, name: str) -> int:
        """Current value of a numeric option, or 0."""
        if name in self._given:
            value = self._given[name][-1]
            return value if isinstance(value, int) else _atoi(str(value))
        for spec in self.specs:
            if spec.name == name:
                return spec.int_value
        return 0