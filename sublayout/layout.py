"""Line wrapping, measuring, alignment and run splitting of event text."""

from __future__ import annotations

from collections.abc import Sequence

from .geometry import Rect, Vector
from .text import DECO_ROTATE, NEWLINE, SPACE, Effect, GlyphInfo, LineInfo, TextInfo

HALIGN_LEFT = 1
HALIGN_CENTER = 2
HALIGN_RIGHT = 3
VALIGN_SUB = 0
VALIGN_TOP = 4
VALIGN_CENTER = 8

JUSTIFY_AUTO = 0
JUSTIFY_LEFT = 1
JUSTIFY_CENTER = 2
JUSTIFY_RIGHT = 3

SOFT_BREAK = 1
HARD_BREAK = 2


def _from_d6(value: float) -> float:
    return value / 64.0


def _to_d6(value: float) -> int:
    return round(value * 64)


def _is_whitespace(glyph: GlyphInfo) -> bool:
    return glyph.symbol in (SPACE, NEWLINE) and not glyph.linebreak


def _mark_trimmed(glyph: GlyphInfo) -> None:
    glyph.skip = True
    glyph.is_trimmed_whitespace = True


def trim_whitespace(text: TextInfo) -> None:
    """Mark leading, trailing and line-boundary whitespace to be skipped."""
    glyphs = text.glyphs
    n = len(glyphs)
    if not n:
        return

    i = n - 1
    while i and _is_whitespace(glyphs[i]):
        _mark_trimmed(glyphs[i])
        i -= 1

    i = 0
    while i < n and _is_whitespace(glyphs[i]):
        _mark_trimmed(glyphs[i])
        i += 1
    if i < n:
        glyphs[i].starts_new_run = True

    i = 0
    while i < n:
        if glyphs[i].linebreak:
            j = i - 1
            while j > 0 and _is_whitespace(glyphs[j]):
                _mark_trimmed(glyphs[j])
                j -= 1
            run_start = i
            if glyphs[i].symbol in (SPACE, NEWLINE):
                _mark_trimmed(glyphs[i])
                j = i + 1
                while j < n and _is_whitespace(glyphs[j]):
                    _mark_trimmed(glyphs[j])
                    j += 1
                i = j - 1
                run_start = j
            if run_start < n:
                glyphs[run_start].starts_new_run = True
        i += 1


def _end_of_line(text, scale, cur_line, max_asc, max_desc, max_border_x,
                 max_border_y, border_scale) -> None:
    line = text.lines[cur_line]
    line.asc = scale * max_asc
    line.desc = scale * max_desc
    text.height += scale * max_asc + scale * max_desc
    # Biased rounding of border sizes, as VSFilter does.
    text.border_bottom = int(border_scale * max_border_y + 0.5)
    if cur_line == 0:
        text.border_top = text.border_bottom
    text.border_x = max(text.border_x, int(border_scale * max_border_x + 0.5))


def measure_text(text: TextInfo, border_scale: float, line_spacing: float) -> None:
    """Fill line ascenders and descenders, total height and border extents."""
    n_lines = 1 + sum(1 for glyph in text.glyphs if glyph.linebreak)
    if not text.lines:
        text.lines = [LineInfo() for _ in range(n_lines)]
    elif len(text.lines) != n_lines:
        raise ValueError("line table does not match the glyph line breaks")

    text.height = 0.0
    text.border_x = 0

    cur_line = 0
    scale = 0.5 / 64
    max_asc = max_desc = 0
    max_border_x = max_border_y = 0.0
    empty_trimmed_line = True
    for glyph in text.glyphs:
        if glyph.linebreak:
            _end_of_line(text, scale, cur_line, max_asc, max_desc,
                         max_border_x, max_border_y, border_scale)
            empty_trimmed_line = True
            max_asc = max_desc = 0
            max_border_x = max_border_y = 0.0
            scale = 0.5 / 64
            cur_line += 1
        # Trimmed whitespace only counts when the line holds nothing else.
        if empty_trimmed_line and not glyph.is_trimmed_whitespace:
            empty_trimmed_line = False
            max_asc = max_desc = 0
            max_border_x = max_border_y = 0.0
        elif not empty_trimmed_line and glyph.is_trimmed_whitespace:
            continue
        max_asc = max(max_asc, glyph.asc)
        max_desc = max(max_desc, glyph.desc)
        max_border_y = max(max_border_y, glyph.border_y)
        max_border_x = max(max_border_x, glyph.border_x)
        if glyph.symbol != NEWLINE:
            scale = 1.0 / 64
    _end_of_line(text, scale, cur_line, max_asc, max_desc,
                 max_border_x, max_border_y, border_scale)
    text.height += cur_line * line_spacing


def _left_edge(glyph: GlyphInfo) -> float:
    return glyph.bbox.x_min + glyph.pos.x


def _right_edge(glyph: GlyphInfo) -> float:
    return glyph.bbox.x_max + glyph.pos.x


def _place_breaks(glyphs: list[GlyphInfo], max_text_width: float, wrap_style: int) -> int:
    n = len(glyphs)
    last_space = -1
    n_lines = 1
    break_type = 0
    line_start = 0
    for i, cur in enumerate(glyphs):
        break_at = -1
        s_offset = _from_d6(_left_edge(glyphs[line_start]))
        length = _from_d6(_right_edge(cur)) - s_offset
        if cur.symbol == NEWLINE:
            break_type = HARD_BREAK
            break_at = i
        elif cur.symbol == SPACE:
            last_space = i
        elif length >= max_text_width and wrap_style != 2:
            break_type = SOFT_BREAK
            break_at = last_space
        if break_at != -1:
            lead = break_at + 1
            if lead < n:
                glyphs[lead].linebreak = break_type
                last_space = -1
                line_start = lead
                n_lines += 1
    return n_lines


def _balance_lines(glyphs: list[GlyphInfo], n_lines: int) -> int:
    n = len(glyphs)
    done = False
    while not done:
        done = True
        s1: int | None = None
        s2: int | None = None
        s3 = 0
        for i in range(n + 1):
            if i == n or glyphs[i].linebreak:
                s1, s2, s3 = s2, s3, i
                if s1 is not None and glyphs[s2].linebreak == SOFT_BREAK:
                    w = s2 - 1
                    while w > s1 and glyphs[w].symbol == SPACE:
                        w -= 1
                    while w > s1 and glyphs[w].symbol != SPACE:
                        w -= 1
                    e1 = w
                    while e1 > s1 and glyphs[e1].symbol == SPACE:
                        e1 -= 1
                    if glyphs[w].symbol == SPACE:
                        w += 1

                    l1 = _from_d6(_right_edge(glyphs[s2 - 1]) - _left_edge(glyphs[s1]))
                    l2 = _from_d6(_right_edge(glyphs[s3 - 1]) - _left_edge(glyphs[s2]))
                    l1_new = _from_d6(_right_edge(glyphs[e1]) - _left_edge(glyphs[s1]))
                    l2_new = _from_d6(_right_edge(glyphs[s3 - 1]) - _left_edge(glyphs[w]))

                    if abs(l1_new - l2_new) < abs(l1 - l2):
                        if glyphs[w].linebreak or w == 0:
                            n_lines -= 1
                        if w != 0:
                            glyphs[w].linebreak = SOFT_BREAK
                        glyphs[s2].linebreak = 0
                        done = False
    return n_lines


def wrap_lines(
    text: TextInfo,
    max_text_width: float,
    wrap_style: int,
    line_spacing: float,
    border_scale: float,
) -> None:
    """Break text into lines no wider than ``max_text_width`` pixels.

    Words are wrapped greedily, then moved between neighbouring soft-broken
    lines while that evens out their lengths (except with wrap style 1).
    Wrap style 2 disables soft wrapping. Afterwards whitespace is trimmed,
    lines are measured and glyphs are moved to their line's pen position.
    """
    glyphs = text.glyphs
    n = len(glyphs)
    n_lines = _place_breaks(glyphs, max_text_width, wrap_style)
    if wrap_style != 1:
        n_lines = _balance_lines(glyphs, n_lines)

    text.lines = [LineInfo() for _ in range(n_lines)]
    trim_whitespace(text)
    measure_text(text, border_scale, line_spacing)

    lines = text.lines
    cur_line = 1
    first = next((i for i, glyph in enumerate(glyphs) if not glyph.skip), n)
    pen_shift_x = -_from_d6(glyphs[first].pos.x) if first < n else 0.0
    pen_shift_y = 0.0

    i = 0
    while i < n:
        if glyphs[i].linebreak:
            while i < n and glyphs[i].skip and glyphs[i].symbol != NEWLINE:
                i += 1
            height = lines[cur_line - 1].desc + lines[cur_line].asc
            lines[cur_line - 1].len = i - lines[cur_line - 1].offset
            lines[cur_line].offset = i
            cur_line += 1
            if i == n:
                break
            pen_shift_x = -_from_d6(glyphs[i].pos.x)
            pen_shift_y += height + line_spacing
        cur = glyphs[i]
        cur.pos = Vector(cur.pos.x + _to_d6(pen_shift_x), cur.pos.y + _to_d6(pen_shift_y))
        i += 1
    lines[cur_line - 1].len = n - lines[cur_line - 1].offset


def _counts_for_width(glyph: GlyphInfo) -> bool:
    return not glyph.skip and glyph.symbol not in (NEWLINE, 0)


def _line_shift(halign, justify, width, max_width, max_text_width) -> float:
    if halign == HALIGN_LEFT:
        if justify == JUSTIFY_RIGHT:
            return max_width - width
        if justify == JUSTIFY_CENTER:
            return (max_width - width) / 2.0
        return 0.0
    if halign == HALIGN_RIGHT:
        if justify == JUSTIFY_LEFT:
            return max_text_width - max_width
        if justify == JUSTIFY_CENTER:
            return max_text_width - max_width + (max_width - width) / 2.0
        return max_text_width - width
    if halign == HALIGN_CENTER:
        if justify == JUSTIFY_LEFT:
            return (max_text_width - max_width) / 2.0
        if justify == JUSTIFY_RIGHT:
            return (max_text_width - max_width) / 2.0 + max_width - width
        return (max_text_width - width) / 2.0
    return 0.0


def align_lines(
    text: TextInfo,
    alignment: int,
    justify: int,
    max_text_width: float,
    hscroll: bool = False,
) -> None:
    """Shift each line horizontally according to alignment and justification."""
    glyphs = text.glyphs
    n = len(glyphs)
    halign = alignment & 3
    if hscroll:
        justify = halign
        halign = HALIGN_LEFT

    max_width = 0.0
    width = 0.0
    for i in range(n + 1):
        if i == n or glyphs[i].linebreak:
            max_width = max(max_width, width)
            width = 0.0
        if i < n and _counts_for_width(glyphs[i]):
            width += _from_d6(glyphs[i].cluster_advance.x)

    width = 0.0
    last_break = -1
    for i in range(n + 1):
        if i == n or glyphs[i].linebreak:
            shift = _to_d6(_line_shift(halign, justify, width, max_width, max_text_width))
            for glyph in glyphs[last_break + 1:i]:
                for member in glyph.cluster():
                    member.pos = Vector(member.pos.x + shift, member.pos.y)
            last_break = i - 1
            width = 0.0
        if i < n and _counts_for_width(glyphs[i]):
            width += _from_d6(glyphs[i].cluster_advance.x)


def compute_string_bbox(text: TextInfo) -> Rect:
    """Return the text's bounding box in pixels, relative to the first baseline."""
    if not text.glyphs:
        return Rect(0, 0, 0, 0)
    y_min = -text.lines[0].asc
    bbox = Rect(32000, y_min, -32000, y_min + text.height)
    for glyph in text.glyphs:
        if glyph.skip:
            continue
        start = _from_d6(glyph.pos.x)
        end = start + _from_d6(glyph.cluster_advance.x)
        bbox.x_min = min(bbox.x_min, start)
        bbox.x_max = max(bbox.x_max, end)
    return bbox


def get_base_point(bbox: Rect, alignment: int) -> Vector:
    """Return the anchor point of ``bbox`` used for positioning and rotation."""
    halign = alignment & 3
    valign = alignment & 12
    bx = 0.0
    by = 0.0
    if halign == HALIGN_LEFT:
        bx = bbox.x_min
    elif halign == HALIGN_CENTER:
        bx = (bbox.x_max + bbox.x_min) / 2.0
    elif halign == HALIGN_RIGHT:
        bx = bbox.x_max
    if valign == VALIGN_TOP:
        by = bbox.y_min
    elif valign == VALIGN_CENTER:
        by = (bbox.y_max + bbox.y_min) / 2.0
    elif valign == VALIGN_SUB:
        by = bbox.y_max
    return Vector(bx, by)


def _style_differs(last: GlyphInfo, info: GlyphInfo) -> bool:
    return (
        last.font_family != info.font_family
        or last.vertical != info.vertical
        or last.font_size != info.font_size
        or last.c != info.c
        or last.be != info.be
        or last.blur != info.blur
        or last.shadow_x != info.shadow_x
        or last.shadow_y != info.shadow_y
        or last.frx != info.frx
        or last.fry != info.fry
        or last.frz != info.frz
        or last.fax != info.fax
        or last.fay != info.fay
        or last.scale_x != info.scale_x
        or last.scale_y != info.scale_y
        or last.border_style != info.border_style
        or last.border_x != info.border_x
        or last.border_y != info.border_y
        or last.hspacing != info.hspacing
        or last.italic != info.italic
        or last.bold != info.bold
        or bool((last.flags ^ info.flags) & ~DECO_ROTATE)
    )


def split_style_runs(text: TextInfo) -> None:
    """Mark glyphs that start a new run because their style differs."""
    glyphs = text.glyphs
    if not glyphs:
        return
    last_effect = glyphs[0].effect_type
    glyphs[0].starts_new_run = True
    for last, info in zip(glyphs, glyphs[1:]):
        effect = info.effect_type
        info.starts_new_run = bool(
            info.effect_timing
            or (effect != Effect.NONE and effect != last_effect)
            or info.drawing_text
            or last.drawing_text
            or _style_differs(last, info)
        )
        if effect != Effect.NONE:
            last_effect = effect


def preliminary_layout(text: TextInfo) -> None:
    """Place glyphs one after another along a single line."""
    pen_x = pen_y = 0
    for glyph in text.glyphs:
        cluster_x, cluster_y = pen_x, pen_y
        for member in glyph.cluster():
            member.pos = Vector(cluster_x, cluster_y)
            cluster_x += member.advance.x
            cluster_y += member.advance.y
        pen_x += glyph.cluster_advance.x
        pen_y += glyph.cluster_advance.y


def apply_baseline_shear(text: TextInfo, cmap: Sequence[int]) -> None:
    """Shift glyphs vertically for \\fay shearing, walking in visual order ``cmap``."""
    glyphs = text.glyphs
    shear = 0
    last_fay = 0.0
    for i, index in enumerate(cmap):
        info = glyphs[index]
        if glyphs[i].linebreak or last_fay != info.fay:
            shear = 0
        last_fay = info.fay
        if not info.scale_x or not info.scale_y:
            info.skip = True
        if info.skip:
            continue
        for member in info.cluster():
            member.pos = Vector(member.pos.x, member.pos.y + shear)
        shear = int(shear + info.fay / info.scale_x * info.scale_y * info.cluster_advance.x)