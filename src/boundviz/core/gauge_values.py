# どこで: `src/boundviz/core/gauge_values.py`。
# 何を: 表示比率・スクラブ値・表示テキストを計算する純粋関数群。
# なぜ: 数値の端ケース（ゼロ幅レンジ、範囲外ポインタ）をまとめてテストするため。

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Context, Decimal

from .layout import Rect

RANGE_EPSILON = 1e-5

_CENTS = Decimal("0.01")
# float の最大値でも小数 2 桁まで量子化できる精度
_DECIMAL_CONTEXT = Context(prec=400)


def _clamp01(x: float) -> float:
    if x <= 0.0:
        return 0.0
    if x >= 1.0:
        return 1.0
    return float(x)


def compute_ratio(current: float, min_value: float, max_value: float) -> float:
    """`current` の `[min, max]` 内での正規化位置（0..1）を返す。

    レンジ幅が `RANGE_EPSILON` 以下なら 0 を返す（ゼロ除算を避ける）。
    値そのものは clamp しない。比率だけを clamp する。
    """

    span = float(max_value) - float(min_value)
    if span <= RANGE_EPSILON:
        return 0.0
    return _clamp01((float(current) - float(min_value)) / span)


def scrub_value(pointer_x: float, rect: Rect, min_value: float, max_value: float) -> float:
    """ポインタ x 座標からバー上の値を返す（rect 外は端に丸める）。"""

    if rect.width <= 0.0:
        pct = 0.0
    else:
        pct = _clamp01((float(pointer_x) - rect.x) / rect.width)
    return float(min_value) + pct * (float(max_value) - float(min_value))


def format_gauge_number(value: float) -> str:
    """小数 2 桁まで、末尾の 0 を落とした表記を返す（例: 50, 12.5, 1.23）。

    丸めは四捨五入（0 から遠い側）。10 進表記（repr）に対して行うので 0.125 は 0.13、2.675 は 2.68。
    """

    v = float(value)
    if not math.isfinite(v):
        return str(v)
    cents = Decimal(repr(v)).quantize(_CENTS, rounding=ROUND_HALF_UP, context=_DECIMAL_CONTEXT)
    text = format(cents, "f").rstrip("0").rstrip(".")
    if text in {"-0", ""}:
        return "0"
    return text


def format_gauge_text(current: float, max_value: float) -> str:
    """ゲージ上に重ねる `current / max` テキストを返す。"""

    return f"{format_gauge_number(current)} / {format_gauge_number(max_value)}"


__all__ = [
    "RANGE_EPSILON",
    "compute_ratio",
    "format_gauge_number",
    "format_gauge_text",
    "scrub_value",
]
