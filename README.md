# sublayout

`sublayout` provides the geometry and text layout steps used when rendering
styled subtitles. It covers these jobs:

- mapping script (PlayRes) coordinates onto the video frame;
- merging a user's override style into a script style;
- computing font, border and blur scale factors;
- wrapping, trimming, measuring and aligning lines of glyphs;
- building and quantising the perspective matrix of a glyph.

The package has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `sublayout.geometry`: `Vector`, a frozen 2-D point that supports `+`, `-`
  and unpacking. `Rect`, a box whose max edges are exclusive.
  - `Rect.empty()` and `Rect.reset()` make a rectangle that holds nothing.
  - `Rect.update()` grows a rectangle to cover another box.
  - `Rect.is_empty()`, `width`, `height` and `center` describe it.
- `sublayout.transform`:
  - `calc_transform_matrix` builds a glyph's 3×3 projective matrix from its
    rotation (degrees), shear, scale, shift and position.
  - `quantize_transform` turns a matrix and an outline's control box into a
    `QuantizedTransform`. That holds the whole-pixel position, the subpixel
    offset, the integer matrix coefficients and a hashable `key`. A transform
    that is degenerate or out of range raises `TransformError`.
  - `restore_transform` rebuilds a matrix from a quantised transform.
  - `quantize_blur` returns a blur index together with a shadow offset mask.
    For example, `quantize_blur(0)` is `(0, 7)`.
  - `restore_blur` returns the squared radius that a blur index stands for.
- `sublayout.settings`:
  - `Settings`, the user-visible options.
  - `RendererConfig`, which holds the settings and recomputes the frame
    geometry whenever they change. It exposes `width`, `height`,
    `orig_width`, `orig_height`, `fit_width` and `fit_height`, and bumps
    `render_id` on each change.
  - The setters on `RendererConfig` are `set_frame_size`, `set_storage_size`,
    `set_margins`, `set_use_margins`, `set_pixel_aspect`,
    `set_aspect_ratio`, `set_font_scale`, `set_hinting`, `set_shaper`,
    `set_line_spacing`, `set_line_position`,
    `set_selective_style_override_enabled`, `set_selective_style_override`
    and `set_cache_limits`.
  - `pixel_aspect_ratio()` returns the explicit aspect ratio when one is set.
    Otherwise it derives one from the frame and storage sizes, or returns 1.0.
  - The `Hinting` and `ShapingLevel` enums.
- `sublayout.coordinates`: `CoordinateMapper`, built directly or with
  `CoordinateMapper.from_config`.
  - `x_pos`, `x_pos_scaled` and `y_pos` map coordinates into the original
    frame.
  - `x_left`, `x_right`, `y`, `y_top` and `y_sub` may place text in the
    margins when margins are in use and the event is not explicitly
    positioned.
- `sublayout.styles`:
  - `Style` and the `OverrideBits` flags.
  - `apply_style_overrides` mixes a user style into a script style. It
    rescales the user values from PlayResY 288 and skips overrides for
    positioned events. It returns the new style, the override bits that
    apply, and whether the font scale applies.
  - `compute_font_scales` returns a `FontScales` record.
- `sublayout.text`:
  - `GlyphInfo` holds one glyph, with positions in 26.6 fixed point.
    `cluster()` yields the glyph and the glyphs chained after it.
  - `LineInfo` and `TextInfo`. `TextInfo.line_starts()` gives the index of
    the first glyph of each line.
  - The karaoke `Effect` enum.
- `sublayout.layout`:
  - `wrap_lines` wraps greedily, then balances soft-broken lines; wrap style
    1 skips the balancing and 2 disables soft wrapping. It then trims
    whitespace, measures the lines and moves glyphs onto their lines.
  - The steps it uses are also available on their own: `trim_whitespace` and
    `measure_text`.
  - `align_lines` applies alignment and justification.
  - `compute_string_bbox` and `get_base_point` give the text bounds and the
    anchor point.
  - `split_style_runs`, `preliminary_layout` and `apply_baseline_shear`
    cover the other steps.

## Example

```python
from sublayout.settings import RendererConfig
from sublayout.coordinates import CoordinateMapper

config = RendererConfig()
config.set_frame_size(1920, 1080)

mapper = CoordinateMapper.from_config(config, play_res_x=384, play_res_y=288)
print(mapper.x_pos(192), mapper.y_pos(144))  # 960.0 540.0
```

## What the package does not do

`sublayout` works on glyphs whose outlines, advances and metrics have
already been obtained. It does not do any of the following:

- parse subtitle scripts or override tags;
- load fonts or shape text;
- rasterise outlines, blur bitmaps or composite images;
- clip finished images against the frame or a clip shape;
- move overlapping events apart.

A complete renderer needs those parts supplied from elsewhere.