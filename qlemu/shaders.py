"""Display scaling, shader source assembly and curved-screen mouse mapping."""

from __future__ import annotations

import re
from enum import Enum

from qlemu.pointer import Rect

DEFAULT_HEADER = "#version 100\nprecision mediump int;\nprecision mediump float;\n"
CURVATURE_PREPEND = "#define CURVATURE\n"
_UNSET = 1e8
_ALIGN_TOLERANCE = 3.0
_BARREL = 0.23
_FLOAT_PREFIX = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


class ShaderStage(Enum):
    """Which half of a shader program is being compiled."""

    VERTEX = "VERTEX"
    FRAGMENT = "FRAGMENT"

    @property
    def directive(self) -> str:
        return f"#define {self.value}\n"


class ShaderLanguage(Enum):
    """Shading language offered by the renderer."""

    GLSL = "glsl"
    GLSLES = "glsles"


def fit_viewport(width: int, height: int, pixel_ratio: float,
                 screen_ratio: float) -> Rect:
    """Largest rectangle in a ``width`` x ``height`` window that keeps the aspect ratio.

    A window within three pixels of the right shape is used whole; otherwise
    the picture is centred with bars on the sides or top and bottom.
    """
    ideal_width = (pixel_ratio * height) / screen_ratio
    if abs(width - ideal_width) < _ALIGN_TOLERANCE:
        return Rect(0, 0, width, height)
    if width > ideal_width:
        w = int(ideal_width)
        return Rect(int((width - w) / 2), 0, w, height)
    h = int(width * screen_ratio / pixel_ratio)
    return Rect(0, int((height - h) / 2), width, h)


def distort(x: float, y: float, curve_x: float, curve_y: float) -> tuple[float, float]:
    """Apply the curved-screen barrel distortion to a point in the unit square."""
    cx = x - 0.5
    cy = y - 0.5
    rsq = cx * cx + cy * cy
    cx += cx * curve_x * rsq
    cy += cy * curve_y * rsq
    cx *= 1.0 - _BARREL * curve_x
    cy *= 1.0 - _BARREL * curve_y
    return cx + 0.5, cy + 0.5


def _parse_float_prefix(token: str) -> float:
    match = _FLOAT_PREFIX.match(token)
    return float(match.group(0)) if match else 0.0


def read_curve(text: str) -> tuple[float, float]:
    """Read ``#define CURVATURE_X`` and ``CURVATURE_Y`` from shader source.

    If either is missing both default to 1.0.
    """
    tokens = [t for t in re.split(r"[ \t\n]+", text) if t]
    x = y = _UNSET
    define = False
    position = 0
    while position < len(tokens):
        token = tokens[position]
        if define and token in ("CURVATURE_X", "CURVATURE_Y"):
            position += 1
            if position >= len(tokens):
                break
            token = tokens[position]
            if tokens[position - 1] == "CURVATURE_X":
                x = _parse_float_prefix(token)
            else:
                y = _parse_float_prefix(token)
        define = token == "#define"
        position += 1
    if x == _UNSET or y == _UNSET:
        return 1.0, 1.0
    return x, y


def shader_header(language: ShaderLanguage, min_version: int, max_version: int) -> str:
    """Version line (and precision lines for GLSL ES) put before the shader text."""
    if language is ShaderLanguage.GLSL:
        if min_version >= 120:
            return f"#version {min_version}\n"
        if max_version >= 120:
            return "#version 120\n"
        return "#version 110\n"
    return DEFAULT_HEADER


def build_shader_source(stage: ShaderStage, data: str, language: ShaderLanguage,
                        min_version: int, max_version: int,
                        prepend: str | None = None) -> str:
    """Full source for one stage: header, stage define, optional prefix, then ``data``."""
    return "".join((
        shader_header(language, min_version, max_version),
        ShaderStage(stage).directive,
        prepend or "",
        data,
    ))


def mouse_to_screen(x: int, y: int, rect: Rect, xres: int, yres: int,
                    curve: tuple[float, float] | None = None) -> tuple[int, int]:
    """Map a window position to QL screen coordinates, clamped to the screen.

    ``curve`` holds the curvature factors when the curved shader is active.
    """
    qlx = int(((x - rect.x) * xres + 0.5) / rect.w)
    qly = int(((y - rect.y) * yres + 0.5) / rect.h)
    if curve is not None:
        fx, fy = distort(qlx / xres, qly / yres, *curve)
        qlx = int(fx * xres)
        qly = int(fy * yres)
    qlx = max(qlx, 0)
    qlx = qlx if qlx < xres else xres - 1
    qly = max(qly, 0)
    qly = qly if qly < yres else yres - 1
    return qlx, qly