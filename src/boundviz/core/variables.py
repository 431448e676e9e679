# どこで: `src/boundviz/core/variables.py`。
# 何を: ゲージで描く代表的な有界変数型（タイマー/クールダウン/体力/貯留量/再生値）を定義して登録する。
# なぜ: 命名規約（直下の current/max/duration と、value/volume ラッパー）の実例を同梱するため。

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .object_fields import HIDDEN
from .registry import bounded_variable


@bounded_variable
@dataclass
class Bounded:
    """最小値・最大値つきの float 値。"""

    current: float = 0.0
    max: float = 1.0
    min: float = 0.0


@bounded_variable
@dataclass
class Timer:
    """経過時間 `current` と長さ `duration`。"""

    current: float = 0.0
    duration: float = 1.0


@bounded_variable
@dataclass
class Cooldown:
    """残り時間 `current` と再使用までの長さ `duration`。"""

    current: float = 0.0
    duration: float = 1.0
    label: str = field(default="", metadata={HIDDEN: True})


@bounded_variable
@dataclass
class Health:
    """整数（32bit）の体力。"""

    current: np.int32 = np.int32(100)
    max: np.int32 = np.int32(100)
    min: np.int32 = np.int32(0)


@bounded_variable
@dataclass
class Experience:
    """64bit 整数の経験値。"""

    current: np.int64 = np.int64(0)
    max: np.int64 = np.int64(1_000_000)


@bounded_variable
@dataclass
class Reservoir:
    """`volume` ラッパーの内側に値を持つ貯留量。"""

    volume: Bounded = field(default_factory=lambda: Bounded(current=0.0, max=100.0))


@bounded_variable
@dataclass
class RegenFloat:
    """`value` ラッパーの内側に値を持ち、毎秒 `rate` で回復する値。"""

    value: Bounded = field(default_factory=Bounded)
    rate: float = 0.0

    def tick(self, dt: float) -> None:
        """dt 秒ぶん回復させる（max で頭打ち）。"""

        v = self.value
        v.current = min(float(v.max), float(v.current) + float(self.rate) * float(dt))


__all__ = [
    "Bounded",
    "Cooldown",
    "Experience",
    "Health",
    "RegenFloat",
    "Reservoir",
    "Timer",
]
