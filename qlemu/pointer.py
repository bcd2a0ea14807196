"""Mouse position mapping and joystick emulation through the keyboard matrix."""

from __future__ import annotations

from dataclasses import dataclass, field

from qlemu.keyboard import KeyRows

# Key codes sent for left, right, up, down and fire, one row per joystick.
JOY_CHARS: tuple[tuple[int, int, int, int, int], ...] = (
    (49, 52, 50, 55, 54),
    (57, 60, 56, 59, 61),
)

AXIS_HORIZONTAL = 0
AXIS_VERTICAL = 2
_FIRE = 4
_DEAD_ZONE = 10000


@dataclass
class Rect:
    """A rectangle on the host window, in host pixels."""

    x: int
    y: int
    w: int
    h: int


def _map_axis(pos: int, start: int, extent: int, res: int) -> int:
    if pos < start:
        return 0
    if pos > extent + start:
        return res - 1
    ratio = extent / res
    return int((pos - start) / ratio)


def map_mouse(x: int, y: int, dest_rect: Rect, xres: int, yres: int,
              highdpi: bool = False) -> tuple[int, int]:
    """Convert a host mouse position into QL screen coordinates.

    Positions before the display area map to 0, positions past it to the
    last pixel.  On high-DPI windows the host coordinates are doubled first.
    """
    if highdpi:
        x *= 2
        y *= 2
    return (_map_axis(x, dest_rect.x, dest_rect.w, xres),
            _map_axis(y, dest_rect.y, dest_rect.h, yres))


@dataclass
class JoystickState:
    """Turns joystick axis and button events into key presses."""

    rows: KeyRows = field(default_factory=KeyRows)
    queued: list[tuple[int, int]] = field(default_factory=list)

    @staticmethod
    def _chars(index: int) -> tuple[int, int, int, int, int]:
        if index not in (0, 1):
            raise ValueError(f"joystick index must be 0 or 1, not {index}")
        return JOY_CHARS[index]

    def axis(self, index: int, offset: int, value: int) -> tuple[int, int] | None:
        """Handle movement on an axis; ``offset`` is 0 for left/right, 2 for up/down.

        Returns the ``(modifiers, code)`` queued, if any.
        """
        chars = self._chars(index)
        if offset not in (AXIS_HORIZONTAL, AXIS_VERTICAL):
            raise ValueError(f"axis offset must be 0 or 2, not {offset}")
        low, high = chars[offset], chars[offset + 1]
        if value < -_DEAD_ZONE:
            entry = (0, low)
            self.queued.append(entry)
            self.rows.change(low, True)
            self.rows.change(high, False)
            return entry
        if value > _DEAD_ZONE:
            entry = (0, high)
            self.queued.append(entry)
            self.rows.change(high, True)
            self.rows.change(low, False)
            return entry
        self.rows.change(low, False)
        self.rows.change(high, False)
        return None

    def button(self, index: int, pressed: bool) -> tuple[int, int] | None:
        """Any button acts as fire; returns the entry queued on a press."""
        fire = self._chars(index)[_FIRE]
        entry = None
        if pressed:
            entry = (0, fire)
            self.queued.append(entry)
        self.rows.change(fire, pressed)
        return entry