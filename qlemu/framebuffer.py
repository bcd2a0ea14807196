"""Decoding of emulated screen memory into rows of RGB pixels."""

from __future__ import annotations

from typing import Sequence

RGB = tuple[int, int, int]

QL_COLORS: tuple[RGB, ...] = (
    (0x00, 0x00, 0x00), (0x00, 0x00, 0xFF), (0xFF, 0x00, 0x00),
    (0xFF, 0x00, 0xFF), (0x00, 0xFF, 0x00), (0x00, 0xFF, 0xFF),
    (0xFF, 0xFF, 0x00), (0xFF, 0xFF, 0xFF), (0x3F, 0x3F, 0x3F),
    (0x00, 0x00, 0x7F), (0x7F, 0x00, 0x00), (0x7F, 0x00, 0x7F),
    (0x00, 0x7F, 0x00), (0x00, 0x7F, 0x7F), (0x7F, 0x7F, 0x00),
    (0x7F, 0x7F, 0x7F),
)

QL_COLORS_UNSATURATED: tuple[RGB, ...] = (
    (0x00, 0x00, 0x00), (0x00, 0x00, 0xB0), (0xB0, 0x00, 0x00),
    (0xB0, 0x00, 0xB0), (0x00, 0xB0, 0x00), (0x00, 0xB0, 0xB0),
    (0xB0, 0xB0, 0x00), (0xB0, 0xB0, 0xB0), (0x3F, 0x3F, 0x3F),
    (0x00, 0x00, 0x7F), (0x7F, 0x00, 0x00), (0x7F, 0x00, 0x7F),
    (0x00, 0x7F, 0x00), (0x00, 0x7F, 0x7F), (0x7F, 0x7F, 0x00),
    (0x7F, 0x7F, 0x7F),
)

QL_COLORS_GRAY: tuple[RGB, ...] = (
    (0x00, 0x00, 0x00), (0x12, 0x12, 0x12), (0x36, 0x36, 0x36),
    (0x48, 0x48, 0x48), (0xB6, 0xB6, 0xB6), (0xC8, 0xC8, 0xC8),
    (0xEC, 0xEC, 0x00), (0xFF, 0xFF, 0xFF), (0x3F, 0x3F, 0x3F),
    (0x09, 0x09, 0x09), (0x1B, 0x1B, 0x1B), (0x24, 0x00, 0x24),
    (0x5A, 0x5A, 0x5A), (0x63, 0x63, 0x63), (0x75, 0x75, 0x75),
    (0x7F, 0x7F, 0x7F),
)

P8_COLORS: tuple[RGB, ...] = (
    (0x00, 0x00, 0x00), (0x1D, 0x2B, 0x53), (0x7E, 0x25, 0x53),
    (0x00, 0x87, 0x51), (0xAB, 0x52, 0x36), (0x5F, 0x57, 0x4F),
    (0xC2, 0xC3, 0xC7), (0xFF, 0xF1, 0xE8), (0xFF, 0x00, 0x4D),
    (0xFF, 0xA3, 0x00), (0xFF, 0xEC, 0x27), (0x00, 0xE4, 0x36),
    (0x29, 0xAD, 0xFF), (0x83, 0x76, 0x9C), (0xFF, 0x77, 0xA8),
    (0xFF, 0xCC, 0xAA), (0x29, 0x18, 0x14), (0x11, 0x1D, 0x35),
    (0x42, 0x21, 0x36), (0x12, 0x53, 0x59), (0x74, 0x2F, 0x29),
    (0x49, 0x33, 0x3B), (0xA2, 0x88, 0x79), (0xF3, 0xEF, 0x7D),
    (0xBE, 0x12, 0x50), (0xFF, 0x6C, 0x24), (0xA8, 0xE7, 0x2E),
    (0x00, 0xB5, 0x4E), (0x06, 0x5A, 0xB5), (0x75, 0x46, 0x65),
    (0xFF, 0x6E, 0x59), (0xFF, 0x9D, 0x81),
)

_FLASH_BIT = 1 << 5
_FRAME_CYCLE = 64
_MODE8_LINE = 256


def palette(option: int) -> list[RGB]:
    """The 16 QL colours: 0 full colour, 1 unsaturated, 2 grayscale; others give full colour."""
    if option == 2:
        return list(QL_COLORS_GRAY)
    if option == 1:
        return list(QL_COLORS_UNSATURATED)
    return list(QL_COLORS)


def p8_color_index(value: int) -> int:
    """Map a screen palette entry to an index into the 32 nextp8 colours."""
    return ((value >> 3) & 0x10) | (value & 0xF)


def aspect_ratio(fixaspect: int) -> float:
    """Vertical stretch applied to the display for the ``fixaspect`` option."""
    if fixaspect == 1:
        return 3.0 / 2.0
    if fixaspect == 2:
        return 1.355
    return 1.0


def window_geometry(xres: int, yres: int, ratio: float, win_size: str) -> tuple[int, int, str]:
    """Initial window ``(width, height, mode)`` for a ``win_size`` setting.

    ``mode`` is ``"window"``, ``"maximized"`` or ``"fullscreen"``.  Unknown
    sizes behave like ``"1x"``.
    """
    ay = yres * ratio
    width, height, mode = xres, round(ay), "window"
    if win_size == "2x":
        width, height = xres * 2, round(ay * 2.0)
    elif win_size == "3x":
        width, height = xres * 3, round(ay * 3.0)
    elif win_size == "max":
        mode = "maximized"
    elif win_size == "full":
        mode = "fullscreen"
    return width, height, mode


class FrameDecoder:
    """Turns screen memory into pixels, keeping the frame counter used for flashing."""

    def __init__(self, palette_option: int = 0) -> None:
        self.ql_colors = palette(palette_option)
        self.p8_colors = list(P8_COLORS)
        self.frame = 0

    def _advance_frame(self) -> None:
        self.frame = (self.frame + 1) % _FRAME_CYCLE

    def decode_ql(self, data: bytes | bytearray | memoryview, mode: int) -> list[RGB]:
        """Decode QL screen memory in mode 4 (or 1) or mode 8 into a flat pixel list."""
        raw = bytes(data)
        if len(raw) % 2:
            raise ValueError("QL screen data must hold whole 16-bit words")
        if mode == 8:
            pixels = self._decode_mode8(raw)
        elif mode in (1, 4):
            pixels = self._decode_mode4(raw)
        else:
            raise ValueError(f"unsupported display mode: {mode}")
        self._advance_frame()
        return pixels

    def _decode_mode4(self, raw: bytes) -> list[RGB]:
        colors = self.ql_colors
        pixels: list[RGB] = []
        for t1, t2 in zip(raw[0::2], raw[1::2]):
            for shift in range(7, -1, -1):
                p1 = (t1 >> shift) & 1
                p2 = (t2 >> shift) & 1
                pixels.append(colors[(p1 << 2) + (p2 << 1) + (p1 & p2)])
        return pixels

    def _decode_mode8(self, raw: bytes) -> list[RGB]:
        colors = self.ql_colors
        flash_phase = bool(self.frame & _FLASH_BIT)
        pixels: list[RGB] = []
        flash_bg = colors[0]
        flash_on = False
        column = 0
        for t1, t2 in zip(raw[0::2], raw[1::2]):
            for shift in (6, 4, 2, 0):
                p1 = (t1 >> shift) & 0x03
                p2 = (t2 >> shift) & 0x03
                value = colors[((p1 & 2) << 1) + (p2 & 3)]
                if flash_phase and flash_on:
                    value = flash_bg
                pixels.extend((value, value))
                if p1 & 1:
                    if not flash_on:
                        flash_bg = value
                        flash_on = True
                    else:
                        flash_on = False
                column = (column + 1) % _MODE8_LINE
                if column == 0:
                    flash_bg = colors[0]
                    flash_on = False
        return pixels

    def decode_p8(self, data: bytes | bytearray | memoryview,
                  screen_palette: Sequence[int]) -> list[RGB]:
        """Decode nextp8 screen memory: two 4-bit pixels per byte, low nibble first."""
        colors = self.p8_colors
        pixels: list[RGB] = []
        for byte in bytes(data):
            pixels.append(colors[p8_color_index(screen_palette[byte & 0xF])])
            pixels.append(colors[p8_color_index(screen_palette[(byte >> 4) & 0xF])])
        self._advance_frame()
        return pixels