# どこで: `src/boundviz/core/gradient.py`。
# 何を: フィールド名からゲージ塗りに使うカラーランプを選ぶ。
# なぜ: 上書き規則（部分一致・先勝ち）を 1 箇所に固定し、描画側から分離するため。

from __future__ import annotations

from .color import ColorRamp
from .gauge_config import GaugeConfig


def select_gradient(config: GaugeConfig, field_name: str) -> ColorRamp:
    """field_name に対応するカラーランプを返す。

    `config.overrides` をリスト順に走査し、`key` が field_name の部分文字列
    （大文字小文字を区別）になる最初のエントリのランプを返す。
    最長一致や特異度では選ばない。一致が無ければ既定ランプを返す。
    """

    name = str(field_name)
    for override in config.overrides:
        if override.key in name:
            return override.ramp
    return config.default_gradient


__all__ = ["select_gradient"]
