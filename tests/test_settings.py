from dataclasses import dataclass

import pytest
from hypothesis import given
from hypothesis import strategies as st

from sublayout.settings import (
    BITMAP_CACHE_MAX_SIZE,
    COMPOSITE_CACHE_MAX_SIZE,
    GLYPH_CACHE_MAX,
    MEGABYTE,
    SELECTIVE_FONT_SCALE,
    Hinting,
    RendererConfig,
    ShapingLevel,
)


@dataclass
class _Style:
    FontName: str
    FontSize: float


def test_defaults():
    config = RendererConfig()
    assert config.settings.font_size_coeff == 1.0
    assert config.settings.shaper is ShapingLevel.COMPLEX
    assert config.settings.selective_style_overrides == SELECTIVE_FONT_SCALE
    assert config.is_configured is False


def test_frame_size_reconfigures_once():
    config = RendererConfig()
    config.set_frame_size(1280, 720)
    first = config.render_id
    config.set_frame_size(1280, 720)
    assert config.render_id == first
    assert (config.width, config.height) == (1280, 720)
    assert (config.fit_width, config.fit_height) == (1280, 720)
    assert config.is_configured


def test_margins_letterbox():
    config = RendererConfig()
    config.set_frame_size(1920, 1080)
    config.set_margins(60, 60, 0, 0)
    assert config.orig_width == 1920
    assert config.orig_height == 1080 - 120
    assert config.fit_width == config.width
    assert config.fit_height == pytest.approx(config.orig_height)


@given(
    st.integers(1, 4000),
    st.integers(1, 4000),
    st.integers(0, 400),
    st.integers(0, 400),
)
def test_fit_within_frame(w, h, vmargin, hmargin):
    config = RendererConfig()
    config.set_frame_size(w + 2 * hmargin, h + 2 * vmargin)
    config.set_margins(vmargin, vmargin, hmargin, hmargin)
    assert config.fit_width <= config.width + 1e-9
    assert config.fit_height <= config.height + 1e-9
    assert config.fit_width == config.width or config.fit_height == config.height


def test_shaper_illegal_value_selects_complex():
    config = RendererConfig()
    config.set_shaper(ShapingLevel.SIMPLE)
    assert config.settings.shaper is ShapingLevel.SIMPLE
    config.set_shaper(42)
    assert config.settings.shaper is ShapingLevel.COMPLEX


def test_use_margins_and_line_spacing_do_not_reconfigure():
    config = RendererConfig()
    config.set_use_margins(1)
    config.set_line_spacing(5.0)
    assert config.render_id == 0
    assert config.settings.use_margins is True
    assert config.settings.line_spacing == 5.0


@pytest.mark.parametrize(
    "call",
    [
        lambda c: c.set_font_scale(2.0),
        lambda c: c.set_hinting(Hinting.LIGHT),
        lambda c: c.set_line_position(50.0),
        lambda c: c.set_selective_style_override_enabled(0),
        lambda c: c.set_pixel_aspect(1.5),
        lambda c: c.set_storage_size(640, 480),
    ],
)
def test_changes_bump_render_id(call):
    config = RendererConfig()
    call(config)
    assert config.render_id == 1
    call(config)
    assert config.render_id == 1


def test_cache_limits_defaults():
    config = RendererConfig()
    config.set_cache_limits(0, 0)
    assert config.glyph_max == GLYPH_CACHE_MAX
    assert config.bitmap_max_size == BITMAP_CACHE_MAX_SIZE
    assert config.composite_max_size == COMPOSITE_CACHE_MAX_SIZE


def test_cache_limits_split():
    config = RendererConfig()
    config.set_cache_limits(500, 30)
    assert config.glyph_max == 500
    assert config.bitmap_max_size + config.composite_max_size == 30 * MEGABYTE
    assert config.bitmap_max_size >= 2 * config.composite_max_size


def test_pixel_aspect_explicit():
    config = RendererConfig()
    config.set_aspect_ratio(2.0, 1.0)
    assert config.pixel_aspect_ratio() == pytest.approx(2.0)


def test_pixel_aspect_zero_sar_rejected():
    with pytest.raises(ValueError):
        RendererConfig().set_aspect_ratio(1.0, 0)


def test_pixel_aspect_without_storage_is_one():
    config = RendererConfig()
    config.set_frame_size(1280, 720)
    assert config.pixel_aspect_ratio() == 1.0


def test_pixel_aspect_matching_storage_is_one():
    config = RendererConfig()
    config.set_frame_size(1280, 720)
    config.set_storage_size(640, 360)
    assert config.pixel_aspect_ratio() == pytest.approx(1.0)


def test_selective_style_override_is_copied():
    config = RendererConfig()
    style = _Style("Sans", 20.0)
    config.set_selective_style_override(style)
    style.FontSize = 99.0
    assert config.user_override_style.FontSize == 20.0
    assert config.user_override_style.FontName == "Sans"