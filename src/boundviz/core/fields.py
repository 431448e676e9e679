# どこで: `src/boundviz/core/fields.py`。
# 何を: ホストのプロパティツリーに求めるインターフェース（FieldNode / HostMetrics）を定義する。
# なぜ: ゲージ本体を特定のホスト実装（imgui / テスト用フェイク）から独立させるため。

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Literal, Protocol

FieldKind = Literal["float", "int", "long", "other"]


class FieldNode(Protocol):
    """ホストが提供する編集可能フィールドの 1 ノード。

    Notes
    -----
    - `set_*` は書き込みと同時にホストの write-back を行い、観測者へ即時に見える。
    - `target` は束縛先オブジェクト（同一性判定に使う）。
    - `is_alive()` が False のノードは読み書きしてはならない。
    """

    @property
    def name(self) -> str: ...

    @property
    def kind(self) -> FieldKind: ...

    @property
    def height(self) -> float: ...

    @property
    def target(self) -> Any: ...

    expanded: bool

    def find(self, name: str) -> FieldNode | None: ...

    def visible_children(self) -> Sequence[FieldNode]: ...

    def is_alive(self) -> bool: ...

    def as_float(self) -> float: ...

    def as_int(self) -> int: ...

    def as_long(self) -> int: ...

    def set_float(self, value: float) -> None: ...

    def set_int(self, value: int) -> None: ...

    def set_long(self, value: int) -> None: ...


@dataclass(frozen=True, slots=True)
class HostMetrics:
    """ホストの標準レイアウト定数。"""

    label_width: float = 140.0
    vertical_spacing: float = 2.0
    line_height: float = 18.0


__all__ = ["FieldKind", "FieldNode", "HostMetrics"]
