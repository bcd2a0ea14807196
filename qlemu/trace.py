"""Execution trace ranges and a ring buffer of control-flow events."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable

BACKTRACE_SIZE = 100


class BacktraceEvent(IntEnum):
    """Recorded control-flow events; negative values are negated exception numbers."""

    RTS = 1
    RTE = 2
    RTR = 3
    JSR = 4
    BSR = 5


@dataclass(frozen=True)
class TraceRange:
    """An address range to trace, with a label."""

    low: int
    high: int
    comment: str


DEFAULT_RANGES: tuple[TraceRange, ...] = (
    TraceRange(0, 16384 * 3, "ROM"),
    TraceRange(0x28000, 0xFFFFF, "RAM"),
)

_EXCEPTIONS = {
    2: "bus error",
    3: "address error",
    4: "Illegal code",
    5: "divide by zero",
    6: "CHK instruction",
    7: "TRAPV instruction",
    8: "privilege violation",
    9: "trace xc",
    10: "Axxx instruction code",
    11: "Fxxx instruction code",
}


def exception_name(xc: int) -> str:
    """Label shown for exception vector ``xc`` in a backtrace."""
    if 32 <= xc <= 32 + 15:
        return f"\tTRAP #{xc - 32}\t"
    if 24 <= xc <= 24 + 7:
        return f"\tInterrupt #{xc - 24}\t"
    return f"\tException {_EXCEPTIONS.get(xc, '')} \t"


@dataclass(frozen=True)
class _Entry:
    where: int
    to: int
    what: int


class Tracer:
    """Chooses the trace range for a program counter and records events."""

    def __init__(self, ranges: Iterable[TraceRange] = DEFAULT_RANGES) -> None:
        self.ranges = tuple(ranges)
        self.current: TraceRange | None = None
        self._events: deque[_Entry] = deque(maxlen=BACKTRACE_SIZE)
        self._unchanged = True

    def find_range(self, pc: int) -> TraceRange | None:
        """The range containing ``pc`` or, failing that, the nearest one above it."""
        current: TraceRange | None = None
        for candidate in self.ranges:
            inside = candidate.low <= pc <= candidate.high
            above = candidate.low >= pc and (
                current is None or candidate.low <= current.low)
            if inside or above:
                current = candidate
        self.current = current
        return current

    def add_event(self, where: int, to: int, what: int) -> None:
        """Record an event; the oldest is dropped once the buffer is full."""
        self._events.append(_Entry(where, to, what))
        self._unchanged = False

    def backtrace(self, depth: int) -> list[str]:
        """Lines describing up to ``depth`` events, most recent first.

        If nothing was recorded since the last call the report says so.
        """
        lines = ["BackTrace:"]
        if self._unchanged:
            lines.append("\tunchanged")
            return lines
        self._unchanged = True
        depth = min(depth, BACKTRACE_SIZE)
        for entry, _ in zip(reversed(self._events), range(depth)):
            if entry.what > 0:
                try:
                    name = BacktraceEvent(entry.what).name
                except ValueError:
                    name = "unknown"
                label = f"\t {name}\t"
            else:
                label = exception_name(-entry.what)
            lines.append(f"{label}at PC={entry.where:x}, new pc={entry.to:x}")
        return lines