"""Glyph, line and text records shared by the layout stages."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import IntEnum

from .geometry import Rect, Vector

DECO_UNDERLINE = 1
DECO_STRIKETHROUGH = 2
DECO_ROTATE = 4

SPACE = ord(" ")
NEWLINE = ord("\n")


class Effect(IntEnum):
    """Karaoke effect applied to a glyph."""

    NONE = 0
    KARAOKE = 1
    KARAOKE_KF = 2
    KARAOKE_KO = 3


@dataclass(eq=False)
class GlyphInfo:
    """One glyph of an event's text.

    Positions, advances, bounding boxes, ascender and descender are in 26.6
    fixed-point units. Extra glyphs produced for the same character by shaping
    hang off ``next``.
    """

    symbol: int = 0
    skip: bool = False
    is_trimmed_whitespace: bool = False
    font_family: str | None = None
    vertical: bool = False
    face_index: int = 0
    glyph_index: int = 0
    font_size: float = 0.0
    drawing_text: str | None = None
    drawing_scale: int = 0
    drawing_pbo: int = 0
    bbox: Rect = field(default_factory=Rect)
    pos: Vector = field(default_factory=Vector)
    offset: Vector = field(default_factory=Vector)
    linebreak: int = 0
    starts_new_run: bool = False
    c: tuple[int, int, int, int] = (0, 0, 0, 0)
    a_pre_fade: tuple[int, int, int, int] = (0, 0, 0, 0)
    advance: Vector = field(default_factory=Vector)
    cluster_advance: Vector = field(default_factory=Vector)
    effect_type: Effect = Effect.NONE
    effect_timing: int = 0
    effect_skip_timing: int = 0
    asc: int = 0
    desc: int = 0
    be: int = 0
    blur: float = 0.0
    shadow_x: float = 0.0
    shadow_y: float = 0.0
    frx: float = 0.0
    fry: float = 0.0
    frz: float = 0.0
    fax: float = 0.0
    fay: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0
    scale_fix: float = 1.0
    border_style: int = 0
    border_x: float = 0.0
    border_y: float = 0.0
    hspacing: float = 0.0
    hspacing_scaled: int = 0
    italic: int = 0
    bold: int = 0
    flags: int = 0
    fade: int = 0
    shape_run_id: int = 0
    shift: Vector = field(default_factory=Vector)
    next: GlyphInfo | None = None

    def cluster(self) -> Iterator[GlyphInfo]:
        """Yield this glyph and every glyph chained after it."""
        glyph: GlyphInfo | None = self
        while glyph is not None:
            yield glyph
            glyph = glyph.next


@dataclass
class LineInfo:
    """Metrics of one laid-out line, in pixels, and its glyph range."""

    asc: float = 0.0
    desc: float = 0.0
    offset: int = 0
    len: int = 0


@dataclass
class TextInfo:
    """The glyphs of one event together with their line structure."""

    glyphs: list[GlyphInfo] = field(default_factory=list)
    lines: list[LineInfo] = field(default_factory=list)
    height: float = 0.0
    border_top: int = 0
    border_bottom: int = 0
    border_x: int = 0

    @property
    def length(self) -> int:
        return len(self.glyphs)

    @property
    def n_lines(self) -> int:
        return len(self.lines)

    def line_starts(self) -> list[int]:
        """Return the index of the first glyph of every line."""
        return [i for i, glyph in enumerate(self.glyphs) if i == 0 or glyph.linebreak]