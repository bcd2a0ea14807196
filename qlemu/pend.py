"""Non-blocking readiness check on a file descriptor."""

from __future__ import annotations

import select
from enum import IntEnum
from typing import Any


class PendMode(IntEnum):
    """Which kind of readiness to test for."""

    READ = 0
    WRITE = 1
    ERR = 2


def check_pending(fd: Any, mode: int) -> bool:
    """Return True if ``fd`` is ready for ``mode`` right now, without waiting.

    A descriptor that cannot be polled counts as not ready.  An unknown mode
    raises ``ValueError``.
    """
    pend_mode = PendMode(mode)
    watched = [fd]
    sets = (
        watched if pend_mode is PendMode.READ else [],
        watched if pend_mode is PendMode.WRITE else [],
        watched if pend_mode is PendMode.ERR else [],
    )
    try:
        readable, writable, errored = select.select(*sets, 0)
    except (OSError, ValueError):
        return False
    return bool(readable or writable or errored)