# どこで: `src/boundviz/core/layout.py`。
# 何を: ゲージの外枠 Rect から label/bar/visual_bar/子行の Rect と必要高さを求める純粋関数群。
# なぜ: 描画 backend に依存しないレイアウト計算を単体テスト可能に保つため。

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .gauge_config import GaugeConfig


@dataclass(frozen=True, slots=True)
class Rect:
    """左上原点の矩形（y は下向き）。"""

    x: float
    y: float
    width: float
    height: float

    @property
    def x_max(self) -> float:
        return self.x + self.width

    @property
    def y_max(self) -> float:
        return self.y + self.height

    def contains(self, px: float, py: float) -> bool:
        """点が矩形内にあるかを返す（境界上の点も含む）。"""

        return self.x <= px <= self.x_max and self.y <= py <= self.y_max

    def offset(self, dx: float, dy: float) -> Rect:
        return Rect(self.x + dx, self.y + dy, self.width, self.height)


@dataclass(frozen=True, slots=True)
class GaugeLayout:
    """1 ゲージ分のレイアウト結果。"""

    header: Rect
    label: Rect
    bar: Rect
    visual_bar: Rect


def _non_negative(v: float) -> float:
    return float(v) if v > 0.0 else 0.0


def measure_gauge(
    config: GaugeConfig,
    *,
    expanded: bool,
    child_heights: Sequence[float] = (),
    spacing: float,
) -> float:
    """ゲージが必要とする高さを返す。

    折りたたみ時はヘッダ高さのみ。展開時は
    ``height + spacing + Σ(h_i + spacing)`` を返す。
    """

    total = float(config.height)
    if not expanded:
        return total
    total += float(spacing)
    for h in child_heights:
        total += float(h) + float(spacing)
    return total


def layout_gauge(outer: Rect, config: GaugeConfig, *, label_width: float) -> GaugeLayout:
    """外枠からヘッダ内の各 Rect を計算して返す。"""

    height = float(config.height)
    padding = float(config.padding)
    label_w = min(_non_negative(label_width), _non_negative(outer.width))

    header = Rect(outer.x, outer.y, _non_negative(outer.width), height)
    label = Rect(outer.x, outer.y, label_w, height)
    bar = Rect(outer.x + label_w, outer.y, _non_negative(outer.width - label_w), height)

    # 先頭側（左/上）は padding、高さは上下 2 倍ぶん削る。
    visual_bar = Rect(
        bar.x + padding,
        bar.y + padding,
        _non_negative(bar.width - padding),
        _non_negative(bar.height - padding * 2.0),
    )
    return GaugeLayout(header=header, label=label, bar=bar, visual_bar=visual_bar)


def layout_children(
    outer: Rect,
    config: GaugeConfig,
    *,
    child_heights: Sequence[float],
    spacing: float,
) -> list[Rect]:
    """展開時の子行 Rect をヘッダ直下から宣言順に並べて返す。"""

    rects: list[Rect] = []
    y = outer.y + float(config.height) + float(spacing)
    for h in child_heights:
        rects.append(Rect(outer.x, y, _non_negative(outer.width), float(h)))
        y += float(h) + float(spacing)
    return rects


__all__ = ["GaugeLayout", "Rect", "layout_children", "layout_gauge", "measure_gauge"]
