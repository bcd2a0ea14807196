"""Translation of host key events into QL key queue entries and keyboard rows."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

# Host key symbols (SDL keycodes).
_SCANCODE_FLAG = 1 << 30


def _scan(code: int) -> int:
    return code | _SCANCODE_FLAG


SDLK_BACKSPACE = 8
SDLK_TAB = 9
SDLK_RETURN = 13
SDLK_ESCAPE = 27
SDLK_DELETE = 127
SDLK_F11 = _scan(68)
SDLK_INSERT = _scan(73)
SDLK_HOME = _scan(74)
SDLK_PAGEUP = _scan(75)
SDLK_END = _scan(77)
SDLK_PAGEDOWN = _scan(78)
SDLK_RIGHT = _scan(79)
SDLK_LEFT = _scan(80)
SDLK_DOWN = _scan(81)
SDLK_UP = _scan(82)
SDLK_KP_1 = _scan(89)
SDLK_KP_2 = _scan(90)
SDLK_KP_3 = _scan(91)
SDLK_KP_4 = _scan(92)
SDLK_KP_5 = _scan(93)
SDLK_KP_6 = _scan(94)
SDLK_KP_7 = _scan(95)
SDLK_KP_8 = _scan(96)
SDLK_KP_9 = _scan(97)
SDLK_KP_0 = _scan(98)
SDLK_KP_PERIOD = _scan(99)
SDLK_LCTRL = _scan(224)
SDLK_LSHIFT = _scan(225)
SDLK_LALT = _scan(226)
SDLK_RCTRL = _scan(228)
SDLK_RSHIFT = _scan(229)
SDLK_RALT = _scan(230)

MOD_ALT = 1 << 0
MOD_CTRL = 1 << 1
MOD_SHIFT = 1 << 2

_NEXTP8_ROWS = 32
_QL_ROWS = 8


class KeyboardType(Enum):
    """Host keyboard layout."""

    US = "US"
    GB = "GB"
    DE = "DE"
    DE_CH = "DE_ch"
    ES = "ES"
    IT = "IT"

    @property
    def uses_altgr(self) -> bool:
        """Whether right Alt acts as a separate AltGr modifier."""
        return self in (KeyboardType.ES, KeyboardType.IT)


_LAYOUT_PREFIXES = (
    ("de_ch", KeyboardType.DE_CH),
    ("de", KeyboardType.DE),
    ("gb", KeyboardType.GB),
    ("es", KeyboardType.ES),
    ("it", KeyboardType.IT),
    ("us", KeyboardType.US),
)


def keyboard_layout(name: str) -> KeyboardType:
    """Pick the layout whose code ``name`` starts with (any case); default US."""
    lowered = name.lower()
    for prefix, layout in _LAYOUT_PREFIXES:
        if lowered.startswith(prefix):
            return layout
    return KeyboardType.US


@dataclass
class KeyRows:
    """The bitmap of keys currently held down, as the keyboard matrix reports it."""

    nextp8: bool = True
    rows: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.rows:
            self.rows = [0] * (_NEXTP8_ROWS if self.nextp8 else _QL_ROWS)

    def __getitem__(self, index: int) -> int:
        return self.rows[index]

    def _position(self, code: int) -> tuple[int, int]:
        code &= 0xFF
        row = code // 8 if self.nextp8 else 7 - code // 8
        return row, 1 << (code % 8)

    def change(self, code: int, press: bool) -> None:
        """Set or clear the bit for ``code``."""
        row, col = self._position(code)
        if press:
            self.rows[row] |= col
        else:
            self.rows[row] &= ~col

    def is_pressed(self, code: int) -> bool:
        row, col = self._position(code)
        return bool(self.rows[row] & col)


_DEFAULT_MAP: dict[int, int] = {
    SDLK_LEFT: 235,
    SDLK_UP: 245,
    SDLK_RIGHT: 244,
    SDLK_DOWN: 242,
    SDLK_TAB: 13,
    SDLK_LSHIFT: 18,
    ord("a"): 28, ord("b"): 50, ord("c"): 33, ord("d"): 35,
    ord("e"): 36, ord("f"): 43, ord("g"): 52, ord("h"): 51,
    ord("i"): 67, ord("j"): 59, ord("k"): 66, ord("l"): 75,
    ord("m"): 58, ord("n"): 49, ord("o"): 68, ord("p"): 77,
    ord("q"): 21, ord("r"): 45, ord("s"): 27, ord("t"): 44,
    ord("u"): 60, ord("v"): 42, ord("w"): 29, ord("x"): 34,
    ord("y"): 53, ord("z"): 26,
    SDLK_RETURN: 0x5A,
    SDLK_ESCAPE: 0x76,
}

# Keypad keys when num lock is off; None means the key is ignored.
_KEYPAD_NAVIGATION: dict[int, int | None] = {
    SDLK_KP_1: SDLK_END,
    SDLK_KP_2: SDLK_DOWN,
    SDLK_KP_3: SDLK_PAGEDOWN,
    SDLK_KP_4: SDLK_LEFT,
    SDLK_KP_5: None,
    SDLK_KP_6: SDLK_RIGHT,
    SDLK_KP_7: SDLK_HOME,
    SDLK_KP_8: SDLK_UP,
    SDLK_KP_9: SDLK_PAGEUP,
    SDLK_KP_0: SDLK_INSERT,
    SDLK_KP_PERIOD: SDLK_DELETE,
}

# Editing keys sent as modified cursor/function keys.
_EXTENDED_KEYS: dict[int, tuple[int, int]] = {
    SDLK_BACKSPACE: (MOD_CTRL, 49),
    SDLK_DELETE: (MOD_CTRL, 52),
    SDLK_HOME: (MOD_ALT, 49),
    SDLK_END: (MOD_ALT, 52),
    SDLK_INSERT: (MOD_SHIFT, 56),
    SDLK_PAGEUP: (MOD_SHIFT, 50),
    SDLK_PAGEDOWN: (MOD_SHIFT, 55),
}


class KeyTranslator:
    """Tracks modifier state and turns host key events into QL key presses."""

    def __init__(self, layout: str = "US",
                 on_fullscreen: Callable[[bool], None] | None = None,
                 rows: KeyRows | None = None) -> None:
        self.keyboard = keyboard_layout(layout)
        self.rows = rows if rows is not None else KeyRows()
        self.queued: list[tuple[int, int]] = []
        self.on_fullscreen = on_fullscreen
        self.fullscreen = False
        self.numlock = False
        self.shift = False
        self.ctrl = False
        self.alt = False
        self.altgr = False

    def _queue(self, mod: int, code: int) -> tuple[int, int]:
        entry = (mod, code)
        self.queued.append(entry)
        return entry

    def _modifier(self, sym: int, pressed: bool) -> bool:
        if sym in (SDLK_LSHIFT, SDLK_RSHIFT):
            self.shift = pressed
        elif sym in (SDLK_LCTRL, SDLK_RCTRL):
            self.ctrl = pressed
        elif sym == SDLK_RALT and self.keyboard.uses_altgr:
            self.altgr = pressed
        elif sym in (SDLK_RALT, SDLK_LALT):
            self.alt = pressed
        elif sym == SDLK_F11:
            if pressed:
                self.fullscreen = not self.fullscreen
                if self.on_fullscreen is not None:
                    self.on_fullscreen(self.fullscreen)
        else:
            return False
        return True

    def process_key(self, sym: int, pressed: bool) -> tuple[int, int] | None:
        """Handle one key event; return the ``(modifiers, code)`` queued, if any."""
        if pressed and not self.numlock and sym in _KEYPAD_NAVIGATION:
            replacement = _KEYPAD_NAVIGATION[sym]
            if replacement is None:
                return None
            sym = replacement

        if pressed and sym in _EXTENDED_KEYS:
            return self._queue(*_EXTENDED_KEYS[sym])

        if self._modifier(sym, pressed):
            return None

        code = _DEFAULT_MAP.get(sym)
        if code is None:
            return None
        mod = (MOD_ALT if (self.alt or self.altgr) else 0)
        mod |= MOD_CTRL if self.ctrl else 0
        mod |= MOD_SHIFT if self.shift else 0
        entry = self._queue(mod, code) if pressed else None
        self.rows.change(code, pressed)
        return entry