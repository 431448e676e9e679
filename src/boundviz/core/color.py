# どこで: `src/boundviz/core/color.py`。
# 何を: RGBA 色の正規化/補間と、ゲージ塗り色に使うカラーランプを提供する。
# なぜ: 色計算を描画 backend から切り離し、純粋関数としてテストできるようにするため。

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np

RGBA = tuple[float, float, float, float]

WHITE: RGBA = (1.0, 1.0, 1.0, 1.0)
SHADOW: RGBA = (0.0, 0.0, 0.0, 0.7)


def _clamp01(x: float) -> float:
    """0..1 に clamp した値を返す。"""

    if x <= 0.0:
        return 0.0
    if x >= 1.0:
        return 1.0
    return float(x)


def as_rgba(value: Any, *, key: str = "color") -> RGBA:
    """`[r, g, b]` / `[r, g, b, a]`（0..1）を RGBA タプルへ正規化して返す。"""

    try:
        seq = [float(v) for v in value]
    except Exception as exc:
        raise ValueError(f"{key} は数値配列である必要があります: got={value!r}") from exc
    if len(seq) == 3:
        seq.append(1.0)
    if len(seq) != 4:
        raise ValueError(f"{key} は長さ 3 または 4 である必要があります: got={value!r}")
    r, g, b, a = (_clamp01(v) for v in seq)
    return (r, g, b, a)


def lerp_rgba(a: RGBA, b: RGBA, t: float) -> RGBA:
    """a→b を t（0..1 に clamp）で線形補間した色を返す。"""

    t = _clamp01(float(t))
    return (
        a[0] + (b[0] - a[0]) * t,
        a[1] + (b[1] - a[1]) * t,
        a[2] + (b[2] - a[2]) * t,
        a[3] + (b[3] - a[3]) * t,
    )


def tint_towards_white(rgba: RGBA, t: float) -> RGBA:
    """色を白方向へ t だけ寄せて返す（alpha は白の 1.0 側へ補間される）。"""

    return lerp_rgba(rgba, WHITE, t)


@dataclass(frozen=True, slots=True)
class ColorRamp:
    """位置 0..1 に色キーを置いた線形補間カラーランプ。

    Notes
    -----
    キーは位置の昇順で保持する。範囲外の位置は端のキー色になる。
    """

    positions: tuple[float, ...]
    colors: tuple[RGBA, ...]

    def __post_init__(self) -> None:
        if not self.positions:
            raise ValueError("ColorRamp には 1 つ以上のキーが必要です")
        if len(self.positions) != len(self.colors):
            raise ValueError(
                "ColorRamp の positions と colors の長さが一致しません: "
                f"{len(self.positions)} != {len(self.colors)}"
            )
        if any(b < a for a, b in zip(self.positions, self.positions[1:])):
            raise ValueError(f"ColorRamp の positions は昇順である必要があります: {self.positions}")

    @classmethod
    def from_stops(cls, stops: Sequence[tuple[float, RGBA]]) -> ColorRamp:
        """(位置, 色) の列から位置順に並べ替えたランプを作る。"""

        ordered = sorted(((float(p), c) for p, c in stops), key=lambda s: s[0])
        return cls(
            positions=tuple(_clamp01(p) for p, _ in ordered),
            colors=tuple(tuple(float(v) for v in c) for _, c in ordered),  # type: ignore[misc]
        )

    def evaluate(self, t: float) -> RGBA:
        """位置 t の色を返す。"""

        xs = np.asarray(self.positions, dtype=np.float64)
        table = np.asarray(self.colors, dtype=np.float64)
        t = _clamp01(float(t))
        out = [float(np.interp(t, xs, table[:, ch])) for ch in range(4)]
        return (out[0], out[1], out[2], out[3])


def default_color_ramp() -> ColorRamp:
    """既定の 2 キーランプ（明るい青 → 濃い青）を返す。"""

    return ColorRamp(
        positions=(0.0, 1.0),
        colors=((0.2, 0.6, 1.0, 1.0), (0.1, 0.3, 0.8, 1.0)),
    )


__all__ = [
    "RGBA",
    "SHADOW",
    "WHITE",
    "ColorRamp",
    "as_rgba",
    "default_color_ramp",
    "lerp_rgba",
    "tint_towards_white",
]
