import pytest

from qlemu.pointer import Rect
from qlemu.shaders import (
    CURVATURE_PREPEND,
    DEFAULT_HEADER,
    ShaderLanguage,
    ShaderStage,
    build_shader_source,
    distort,
    fit_viewport,
    mouse_to_screen,
    read_curve,
    shader_header,
)


def test_header_glsl_uses_min_version_when_high_enough():
    assert shader_header(ShaderLanguage.GLSL, 130, 450) == "#version 130\n"


def test_header_glsl_falls_back_to_120():
    assert shader_header(ShaderLanguage.GLSL, 100, 150) == "#version 120\n"


def test_header_glsl_falls_back_to_110():
    assert shader_header(ShaderLanguage.GLSL, 100, 110) == "#version 110\n"


def test_header_glsles_is_default():
    header = shader_header(ShaderLanguage.GLSLES, 300, 300)
    assert header == "#version 100\nprecision mediump int;\nprecision mediump float;\n"
    assert header == DEFAULT_HEADER


@pytest.mark.parametrize("stage,directive", [
    (ShaderStage.VERTEX, "#define VERTEX\n"),
    (ShaderStage.FRAGMENT, "#define FRAGMENT\n"),
])
def test_build_source_order(stage, directive):
    body = "void main() {}\n"
    source = build_shader_source(stage, body, ShaderLanguage.GLSL, 120, 120,
                                 CURVATURE_PREPEND)
    assert source == "#version 120\n" + directive + CURVATURE_PREPEND + body


def test_build_source_without_prepend():
    source = build_shader_source(ShaderStage.VERTEX, "x", ShaderLanguage.GLSLES, 0, 0)
    assert source == DEFAULT_HEADER + "#define VERTEX\n" + "x"


def test_distort_centre_is_fixed():
    assert distort(0.5, 0.5, 0.3, 0.4) == pytest.approx((0.5, 0.5))


def test_distort_zero_curvature_is_identity():
    assert distort(0.1, 0.9, 0.0, 0.0) == pytest.approx((0.1, 0.9))


def test_distort_is_symmetric():
    ax, ay = distort(0.8, 0.3, 0.5, 0.5)
    bx, by = distort(0.2, 0.7, 0.5, 0.5)
    assert ax - 0.5 == pytest.approx(0.5 - bx)
    assert ay - 0.5 == pytest.approx(0.5 - by)


def test_read_curve_values():
    text = "#define CURVATURE\n#define CURVATURE_X 0.25\n#define CURVATURE_Y 0.5\nvoid main(){}"
    assert read_curve(text) == pytest.approx((0.25, 0.5))


def test_read_curve_missing_defaults():
    assert read_curve("void main() {}") == (1.0, 1.0)


def test_read_curve_partial_defaults_both():
    assert read_curve("#define CURVATURE_X 0.25\n") == (1.0, 1.0)


def test_read_curve_requires_define():
    assert read_curve("CURVATURE_X 0.25 CURVATURE_Y 0.5") == (1.0, 1.0)


def test_viewport_exact_fit():
    assert fit_viewport(1024, 512, 2.0, 1.0) == Rect(0, 0, 1024, 512)


def test_viewport_wide_window_is_centred():
    rect = fit_viewport(1200, 512, 2.0, 1.0)
    assert rect.h == 512
    assert rect.y == 0
    assert rect.w < 1200
    assert rect.x * 2 + rect.w == 1200


def test_viewport_tall_window_is_centred():
    rect = fit_viewport(1024, 800, 2.0, 1.0)
    assert rect.w == 1024
    assert rect.x == 0
    assert rect.h < 800
    assert rect.y * 2 + rect.h == 800


def test_mouse_identity_mapping():
    assert mouse_to_screen(100, 50, Rect(0, 0, 512, 256), 512, 256) == (100, 50)


def test_mouse_clamps():
    rect = Rect(0, 0, 512, 256)
    assert mouse_to_screen(-10, -10, rect, 512, 256) == (0, 0)
    assert mouse_to_screen(1000, 1000, rect, 512, 256) == (511, 255)


def test_mouse_curve_keeps_centre():
    rect = Rect(0, 0, 512, 256)
    assert mouse_to_screen(256, 128, rect, 512, 256, (0.5, 0.5)) == (256, 128)