"""Mapping between script coordinates and screen coordinates."""

from __future__ import annotations

from dataclasses import dataclass

from .settings import RendererConfig


@dataclass(frozen=True)
class CoordinateMapper:
    """Converts script (PlayRes) coordinates to screen pixels for one event.

    When the event is explicitly positioned, or margins are not used, every
    coordinate maps into the original video frame; otherwise toptitles and
    subtitles may spill into the margins.
    """

    play_res_x: float
    play_res_y: float
    width: int
    height: int
    orig_width: int
    orig_height: int
    fit_width: float
    fit_height: float
    left_margin: int = 0
    top_margin: int = 0
    use_margins: bool = False
    font_scale_x: float = 1.0
    explicit: bool = False

    def __post_init__(self) -> None:
        if not self.play_res_x or not self.play_res_y:
            raise ValueError("script resolution must be non-zero")
        if not self.font_scale_x:
            raise ValueError("font_scale_x must be non-zero")

    @classmethod
    def from_config(
        cls,
        config: RendererConfig,
        play_res_x: float,
        play_res_y: float,
        font_scale_x: float | None = None,
        explicit: bool = False,
    ) -> CoordinateMapper:
        s = config.settings
        return cls(
            play_res_x=play_res_x,
            play_res_y=play_res_y,
            width=config.width,
            height=config.height,
            orig_width=config.orig_width,
            orig_height=config.orig_height,
            fit_width=config.fit_width,
            fit_height=config.fit_height,
            left_margin=s.left_margin,
            top_margin=s.top_margin,
            use_margins=s.use_margins,
            font_scale_x=config.pixel_aspect_ratio() if font_scale_x is None else font_scale_x,
            explicit=explicit,
        )

    @property
    def _in_frame(self) -> bool:
        return self.explicit or not self.use_margins

    def x_pos(self, x: float) -> float:
        return (
            x * self.orig_width / self.font_scale_x / self.play_res_x + self.left_margin
        )

    def x_left(self, x: float) -> float:
        if self._in_frame:
            return self.x_pos(x)
        return x * self.fit_width / self.font_scale_x / self.play_res_x

    def x_right(self, x: float) -> float:
        if self._in_frame:
            return self.x_pos(x)
        return (
            x * self.fit_width / self.font_scale_x / self.play_res_x
            + (self.width - self.fit_width)
        )

    def x_pos_scaled(self, x: float) -> float:
        """Like x_pos but without the pixel aspect correction."""
        return x * self.orig_width / self.play_res_x + self.left_margin

    def y_pos(self, y: float) -> float:
        return y * self.orig_height / self.play_res_y + self.top_margin

    def y(self, y: float) -> float:
        """Map a midtitle or scrolling coordinate."""
        if self._in_frame:
            return self.y_pos(y)
        return y * self.fit_height / self.play_res_y + (self.height - self.fit_height) * 0.5

    def y_top(self, y: float) -> float:
        """Map a toptitle coordinate."""
        if self._in_frame:
            return self.y_pos(y)
        return y * self.fit_height / self.play_res_y

    def y_sub(self, y: float) -> float:
        """Map a subtitle coordinate."""
        if self._in_frame:
            return self.y_pos(y)
        return y * self.fit_height / self.play_res_y + (self.height - self.fit_height)