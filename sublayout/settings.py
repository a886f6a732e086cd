"""Renderer settings and the frame geometry derived from them."""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

GLYPH_CACHE_MAX = 10000
MEGABYTE = 1024 * 1024
BITMAP_CACHE_MAX_SIZE = 128 * MEGABYTE
COMPOSITE_CACHE_RATIO = 2
COMPOSITE_CACHE_MAX_SIZE = BITMAP_CACHE_MAX_SIZE // COMPOSITE_CACHE_RATIO

# Override bit that keeps the font scale from applying to positioned events.
SELECTIVE_FONT_SCALE = 1 << 1


class ShapingLevel(IntEnum):
    """How text is shaped: simple bidi shaping or full OpenType shaping."""

    SIMPLE = 0
    COMPLEX = 1


class Hinting(IntEnum):
    """Font hinting mode."""

    NONE = 0
    LIGHT = 1
    NORMAL = 2
    NATIVE = 3


@dataclass
class Settings:
    """User-visible renderer settings."""

    frame_width: int = 0
    frame_height: int = 0
    storage_width: int = 0
    storage_height: int = 0
    font_size_coeff: float = 1.0
    line_spacing: float = 0.0
    line_position: float = 0.0
    top_margin: int = 0
    bottom_margin: int = 0
    left_margin: int = 0
    right_margin: int = 0
    use_margins: bool = False
    par: float = 0.0
    hinting: Hinting = Hinting.NONE
    shaper: ShapingLevel = ShapingLevel.COMPLEX
    selective_style_overrides: int = SELECTIVE_FONT_SCALE
    default_font: str | None = None
    default_family: str | None = None


def _ratio(numerator: float, denominator: float) -> float:
    if denominator:
        return numerator / denominator
    if numerator:
        return math.copysign(math.inf, numerator)
    return math.nan


@dataclass
class RendererConfig:
    """Settings plus the frame-global values recomputed whenever they change.

    ``render_id`` grows on every reconfiguration; anything cached against an
    older id is stale.
    """

    settings: Settings = field(default_factory=Settings)
    render_id: int = 0
    width: int = 0
    height: int = 0
    orig_width: int = 0
    orig_height: int = 0
    fit_width: float = 0.0
    fit_height: float = 0.0
    glyph_max: int = GLYPH_CACHE_MAX
    bitmap_max_size: int = BITMAP_CACHE_MAX_SIZE
    composite_max_size: int = COMPOSITE_CACHE_MAX_SIZE
    user_override_style: Any = None

    @property
    def is_configured(self) -> bool:
        """True once a frame size has been set."""
        return bool(self.settings.frame_width or self.settings.frame_height)

    def _reconfigure(self) -> None:
        s = self.settings
        self.render_id += 1
        self.width = s.frame_width
        self.height = s.frame_height
        self.orig_width = s.frame_width - s.left_margin - s.right_margin
        self.orig_height = s.frame_height - s.top_margin - s.bottom_margin
        wide = self.orig_width * self.height
        tall = self.orig_height * self.width
        self.fit_width = (
            float(self.width) if wide >= tall else _ratio(wide, self.orig_height)
        )
        self.fit_height = (
            float(self.height) if wide <= tall else _ratio(tall, self.orig_width)
        )

    def set_frame_size(self, w: int, h: int) -> None:
        s = self.settings
        if (s.frame_width, s.frame_height) != (w, h):
            s.frame_width, s.frame_height = w, h
            self._reconfigure()

    def set_storage_size(self, w: int, h: int) -> None:
        s = self.settings
        if (s.storage_width, s.storage_height) != (w, h):
            s.storage_width, s.storage_height = w, h
            self._reconfigure()

    def set_shaper(self, level: int) -> None:
        """Select the shaping level; unknown values select the complex shaper."""
        try:
            self.settings.shaper = ShapingLevel(level)
        except ValueError:
            self.settings.shaper = ShapingLevel.COMPLEX

    def set_margins(self, t: int, b: int, l: int, r: int) -> None:  # noqa: E741
        s = self.settings
        current = (s.top_margin, s.bottom_margin, s.left_margin, s.right_margin)
        if current != (t, b, l, r):
            s.top_margin, s.bottom_margin = t, b
            s.left_margin, s.right_margin = l, r
            self._reconfigure()

    def set_use_margins(self, use: bool) -> None:
        self.settings.use_margins = bool(use)

    def set_aspect_ratio(self, dar: float, sar: float) -> None:
        if not sar:
            raise ValueError("storage aspect ratio must be non-zero")
        self.set_pixel_aspect(dar / sar)

    def set_pixel_aspect(self, par: float) -> None:
        if self.settings.par != par:
            self.settings.par = par
            self._reconfigure()

    def set_font_scale(self, font_scale: float) -> None:
        if self.settings.font_size_coeff != font_scale:
            self.settings.font_size_coeff = font_scale
            self._reconfigure()

    def set_hinting(self, hinting: Hinting) -> None:
        if self.settings.hinting != hinting:
            self.settings.hinting = Hinting(hinting)
            self._reconfigure()

    def set_line_spacing(self, line_spacing: float) -> None:
        self.settings.line_spacing = line_spacing

    def set_line_position(self, line_position: float) -> None:
        if self.settings.line_position != line_position:
            self.settings.line_position = line_position
            self._reconfigure()

    def set_selective_style_override_enabled(self, bits: int) -> None:
        if self.settings.selective_style_overrides != bits:
            self.settings.selective_style_overrides = bits
            self._reconfigure()

    def set_selective_style_override(self, style: Any) -> None:
        """Store a private copy of the user's override style."""
        self.user_override_style = copy.copy(style)

    def set_cache_limits(self, glyph_max: int, bitmap_max: int) -> None:
        """Set cache limits; zero selects the default. ``bitmap_max`` is in megabytes."""
        self.glyph_max = glyph_max or GLYPH_CACHE_MAX
        if bitmap_max:
            bitmap_cache = MEGABYTE * bitmap_max
            composite_cache = bitmap_cache // (COMPOSITE_CACHE_RATIO + 1)
            bitmap_cache -= composite_cache
        else:
            bitmap_cache = BITMAP_CACHE_MAX_SIZE
            composite_cache = COMPOSITE_CACHE_MAX_SIZE
        self.bitmap_max_size = bitmap_cache
        self.composite_max_size = composite_cache

    def pixel_aspect_ratio(self) -> float:
        """Return the pixel aspect ratio used to stretch glyphs horizontally."""
        s = self.settings
        if s.par:
            return s.par
        if self.orig_width and self.orig_height and s.storage_width and s.storage_height:
            dar = self.orig_width / self.orig_height
            sar = s.storage_width / s.storage_height
            return dar / sar
        return 1.0