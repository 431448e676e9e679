# どこで: `src/boundviz/core/render.py`。
# 何を: ゲージ（溝・塗り・枠線・値テキスト）を抽象描画面へ描く。
# なぜ: 描画命令の順序と色計算を backend（imgui draw list 等）から切り離してテストするため。

from __future__ import annotations

from typing import Protocol

from .color import RGBA, SHADOW, tint_towards_white
from .gauge_config import GaugeConfig
from .gauge_values import format_gauge_text
from .gradient import select_gradient
from .layout import Rect

HOVER_TINT = 0.15
TEXT_FONT_SIZE = 10.0
SHADOW_OFFSET = 1.0


class DrawSurface(Protocol):
    """ゲージ描画に必要な最小の描画命令。"""

    def fill_rect(self, rect: Rect, color: RGBA, *, rounding: float = 0.0) -> None: ...

    def stroke_rect(self, rect: Rect, color: RGBA) -> None: ...

    def text_centered(
        self,
        rect: Rect,
        text: str,
        color: RGBA,
        *,
        font_size: float,
        bold: bool,
    ) -> None: ...


def fill_color_for(
    config: GaugeConfig,
    field_name: str,
    ratio: float,
    *,
    hovering: bool,
) -> RGBA:
    """塗り色を返す（スクラブ可能かつホバー中は白方向へ 15% 寄せる）。"""

    color = select_gradient(config, field_name).evaluate(ratio)
    if hovering and config.allow_scrubbing:
        color = tint_towards_white(color, HOVER_TINT)
    return color


def draw_gauge_bar(
    surface: DrawSurface,
    rect: Rect,
    ratio: float,
    config: GaugeConfig,
    field_name: str,
    *,
    hovering: bool,
) -> None:
    """溝 → 塗り（ratio > 0 のとき）→ 枠線（alpha > 0 のとき）の順に描く。"""

    surface.fill_rect(rect, config.gutter_color, rounding=config.rounding)

    if ratio > 0.0:
        fill = Rect(rect.x, rect.y, rect.width * float(ratio), rect.height)
        color = fill_color_for(config, field_name, ratio, hovering=hovering)
        surface.fill_rect(fill, color, rounding=config.rounding)

    if config.border_color[3] > 0.0:
        surface.stroke_rect(rect, config.border_color)


def draw_gauge_text(
    surface: DrawSurface,
    rect: Rect,
    current: float,
    max_value: float,
    config: GaugeConfig,
) -> str:
    """`current / max` を影付きで中央に描き、描いた文字列を返す。"""

    text = format_gauge_text(current, max_value)
    surface.text_centered(
        rect.offset(SHADOW_OFFSET, SHADOW_OFFSET),
        text,
        SHADOW,
        font_size=TEXT_FONT_SIZE,
        bold=True,
    )
    surface.text_centered(rect, text, config.text_color, font_size=TEXT_FONT_SIZE, bold=True)
    return text


__all__ = [
    "DrawSurface",
    "HOVER_TINT",
    "draw_gauge_bar",
    "draw_gauge_text",
    "fill_color_for",
]
