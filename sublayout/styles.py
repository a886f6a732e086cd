"""Event styles, user style overrides and the font scale factors they imply."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import IntFlag

# Script resolution that user override styles are authored against.
USER_STYLE_PLAY_RES_Y = 288.0
OVERRIDE_STYLE_NAME = "OverrideStyle"


class OverrideBits(IntFlag):
    """Which parts of the user's override style replace the script style."""

    STYLE = 1 << 0
    SELECTIVE_FONT_SCALE = 1 << 1
    FONT_SIZE_FIELDS = 1 << 2
    FONT_NAME = 1 << 3
    COLORS = 1 << 4
    ATTRIBUTES = 1 << 5
    BORDER = 1 << 6
    ALIGNMENT = 1 << 7
    MARGINS = 1 << 8
    FULL_STYLE = 1 << 9
    JUSTIFY = 1 << 10


# Bits that copy at least one field from the user style.
_COPYING_BITS = (
    OverrideBits.STYLE
    | OverrideBits.FONT_SIZE_FIELDS
    | OverrideBits.FONT_NAME
    | OverrideBits.COLORS
    | OverrideBits.ATTRIBUTES
    | OverrideBits.BORDER
    | OverrideBits.ALIGNMENT
    | OverrideBits.MARGINS
    | OverrideBits.FULL_STYLE
    | OverrideBits.JUSTIFY
)


@dataclass
class Style:
    """A subtitle style: font, colours (RGBA), borders, alignment and margins."""

    name: str = "Default"
    font_name: str | None = None
    font_size: float = 0.0
    primary_colour: int = 0
    secondary_colour: int = 0
    outline_colour: int = 0
    back_colour: int = 0
    bold: int = 0
    italic: int = 0
    underline: bool = False
    strike_out: bool = False
    scale_x: float = 1.0
    scale_y: float = 1.0
    spacing: float = 0.0
    angle: float = 0.0
    border_style: int = 1
    outline: float = 0.0
    shadow: float = 0.0
    alignment: int = 2
    margin_l: int = 0
    margin_r: int = 0
    margin_v: int = 0
    encoding: int = 0
    treat_fontname_as_pattern: bool = False
    blur: float = 0.0
    justify: int = 0


@dataclass(frozen=True)
class FontScales:
    """Multipliers from script units to screen pixels for fonts, borders and blur."""

    font_scale: float
    border_scale: float
    blur_scale: float


def apply_style_overrides(
    script_style: Style,
    user_style: Style | None,
    requested: int,
    explicit: bool,
    play_res_y: float,
) -> tuple[Style, OverrideBits, bool]:
    """Mix the script style with the user's override style.

    Returns the new style, the override bits that actually apply, and whether
    the user font scale should be applied to this event. Positioned
    (``explicit``) events receive no overrides. User values are treated as if
    authored for a script with PlayResY 288 and rescaled to ``play_res_y``.
    """
    requested = OverrideBits(requested)
    apply_font_scale = not explicit or not (requested & OverrideBits.SELECTIVE_FONT_SCALE)

    if explicit:
        requested = OverrideBits(0)

    if requested & OverrideBits.STYLE:
        requested |= (
            OverrideBits.FONT_NAME
            | OverrideBits.FONT_SIZE_FIELDS
            | OverrideBits.COLORS
            | OverrideBits.BORDER
            | OverrideBits.ATTRIBUTES
        )

    if user_style is None:
        if requested & _COPYING_BITS:
            raise ValueError("override bits requested without a user override style")
        user_style = Style()

    new = copy.copy(script_style)

    if requested & OverrideBits.FULL_STYLE:
        new = copy.copy(user_style)
        new.name = OVERRIDE_STYLE_NAME

    scale = play_res_y / USER_STYLE_PLAY_RES_Y

    if requested & OverrideBits.FONT_SIZE_FIELDS:
        new.font_size = user_style.font_size * scale
        new.spacing = user_style.spacing * scale
        new.scale_x = user_style.scale_x
        new.scale_y = user_style.scale_y

    if requested & OverrideBits.FONT_NAME:
        new.font_name = user_style.font_name
        new.treat_fontname_as_pattern = user_style.treat_fontname_as_pattern

    if requested & OverrideBits.COLORS:
        new.primary_colour = user_style.primary_colour
        new.secondary_colour = user_style.secondary_colour
        new.outline_colour = user_style.outline_colour
        new.back_colour = user_style.back_colour

    if requested & OverrideBits.ATTRIBUTES:
        new.bold = user_style.bold
        new.italic = user_style.italic
        new.underline = user_style.underline
        new.strike_out = user_style.strike_out

    if requested & OverrideBits.BORDER:
        new.border_style = user_style.border_style
        new.outline = user_style.outline * scale
        new.shadow = user_style.shadow * scale

    if requested & OverrideBits.ALIGNMENT:
        new.alignment = user_style.alignment

    if requested & OverrideBits.JUSTIFY:
        new.justify = user_style.justify

    if requested & OverrideBits.MARGINS:
        new.margin_l = user_style.margin_l
        new.margin_r = user_style.margin_r
        new.margin_v = user_style.margin_v

    if not new.font_name:
        new.font_name = script_style.font_name

    return new, requested, apply_font_scale


def compute_font_scales(
    font_screen_height: float,
    play_res_y: float,
    storage_height: int,
    scaled_border_and_shadow: bool,
    apply_font_scale: bool,
    font_size_coeff: float,
) -> FontScales:
    """Compute font, border and blur scales for an event.

    Blur follows the storage (video) height when known; borders follow the
    script resolution only when the script asks for scaled borders.
    """
    if not play_res_y:
        raise ValueError("script resolution must be non-zero")

    font_scale = font_screen_height / play_res_y
    if storage_height:
        blur_scale = font_screen_height / storage_height
    else:
        blur_scale = font_screen_height / play_res_y
    if scaled_border_and_shadow:
        border_scale = font_screen_height / play_res_y
    else:
        border_scale = blur_scale

    if apply_font_scale:
        font_scale *= font_size_coeff
        border_scale *= font_size_coeff
        blur_scale *= font_size_coeff

    return FontScales(font_scale=font_scale, border_scale=border_scale, blur_scale=blur_scale)