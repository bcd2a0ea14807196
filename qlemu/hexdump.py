"""Classic hex/ASCII dump of a byte buffer, sixteen bytes per line."""

from __future__ import annotations

import sys
from typing import TextIO

_LINE_WIDTH = 16
_HALF_WIDTH = 8


def _printable(byte: int) -> str:
    return chr(byte) if 0x20 <= byte <= 0x7E else "."


def _format_line(chunk: bytes) -> str:
    first, second = chunk[:_HALF_WIDTH], chunk[_HALF_WIDTH:]
    text = "".join(f"{b:02X} " for b in first) + " "
    if second:
        text += "".join(f"{b:02X} " for b in second) + " "
    if len(chunk) < _LINE_WIDTH:
        if len(chunk) <= _HALF_WIDTH:
            text += " "
        text += "   " * (_LINE_WIDTH - len(chunk))
    ascii_part = "".join(_printable(b) for b in chunk)
    return f"{text}|  {ascii_part} \n"


def hexdump(data: bytes | bytearray | memoryview) -> str:
    """Return the dump of ``data`` as text; empty input gives an empty string."""
    raw = bytes(data)
    return "".join(
        _format_line(raw[offset:offset + _LINE_WIDTH])
        for offset in range(0, len(raw), _LINE_WIDTH)
    )


def print_hexdump(data: bytes | bytearray | memoryview, file: TextIO | None = None) -> None:
    """Write the dump of ``data`` to ``file`` (standard output by default)."""
    (file if file is not None else sys.stdout).write(hexdump(data))