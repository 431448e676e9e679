# どこで: `src/boundviz/core/object_fields.py`。
# 何を: dataclass インスタンスを根とするフィールドツリー（FieldNode 実装）を提供する。
#       型注釈から float / int(32bit) / long(64bit) を判定し、書き込みは即時に購読者へ通知する。
# なぜ: ゲージをホスト無しでも Python オブジェクトに直接束縛して使えるようにするため。

from __future__ import annotations

import dataclasses
import logging
import typing
from collections.abc import Callable, Sequence
from typing import Any

import numpy as np

from .fields import FieldKind, HostMetrics

_logger = logging.getLogger(__name__)

Path = tuple[str, ...]
ChangeListener = Callable[[Path, Any], None]

HIDDEN = "hidden"

_INT32 = np.iinfo(np.int32)
_INT64 = np.iinfo(np.int64)


def _kind_for_type(tp: Any) -> FieldKind:
    """型注釈から FieldKind を返す。"""

    if tp is bool:
        return "other"
    if tp is float or tp in (np.float16, np.float32, np.float64):
        return "float"
    if tp in (np.int64, np.uint32):
        return "long"
    if tp is int or tp in (np.int8, np.int16, np.int32, np.uint8, np.uint16):
        return "int"
    return "other"


def _kind_for_value(value: Any) -> FieldKind:
    """注釈が無いときに実値から FieldKind を推定する。"""

    if isinstance(value, (bool, np.bool_)):
        return "other"
    if isinstance(value, np.integer):
        return "long" if value.dtype.itemsize >= 8 else "int"
    if isinstance(value, int):
        return "int"
    if isinstance(value, (float, np.floating)):
        return "float"
    return "other"


def _type_hints(obj: Any) -> dict[str, Any]:
    try:
        return typing.get_type_hints(type(obj))
    except Exception:
        return {}


class FieldTree:
    """1 つの束縛先オブジェクトを根とするフィールドツリー。

    Notes
    -----
    - 展開状態はパス単位でツリーが保持する。
    - `set_*` による書き込みは `commit()` を通り、購読者へ同期的に通知される。
    - `detach()` 後はすべてのノードが無効（`is_alive() == False`）になる。
    """

    def __init__(
        self,
        target: Any,
        *,
        name: str = "root",
        metrics: HostMetrics | None = None,
    ) -> None:
        self._target: Any | None = target
        self._name = str(name)
        self._metrics = metrics if metrics is not None else HostMetrics()
        self._expanded: dict[Path, bool] = {}
        self._listeners: list[ChangeListener] = []
        self._revision = 0

    @property
    def target(self) -> Any | None:
        return self._target

    @property
    def metrics(self) -> HostMetrics:
        return self._metrics

    @property
    def revision(self) -> int:
        """書き込みのたびに増えるカウンタ。"""

        return self._revision

    def root(self) -> ObjectField:
        return ObjectField(self, (), self._name, None)

    def replace_target(self, target: Any) -> None:
        """束縛先を差し替える（展開状態は保持する）。"""

        self._target = target

    def detach(self) -> None:
        self._target = None

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """変更通知を購読し、購読解除関数を返す。"""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def is_expanded(self, path: Path) -> bool:
        return bool(self._expanded.get(path, False))

    def set_expanded(self, path: Path, expanded: bool) -> None:
        self._expanded[path] = bool(expanded)

    def resolve(self, path: Path) -> tuple[bool, Any]:
        """パスの値を返す。辿れなければ (False, None)。"""

        obj = self._target
        if obj is None:
            return False, None
        for part in path:
            if not hasattr(obj, part):
                return False, None
            obj = getattr(obj, part)
        return True, obj

    def commit(self, path: Path, value: Any) -> None:
        """パスへ値を書き込み、即時に購読者へ通知する。"""

        if not path:
            raise ValueError("root へは書き込めません")
        ok, owner = self.resolve(path[:-1])
        if not ok or owner is None:
            raise RuntimeError(f"書き込み先が見つかりません: {'.'.join(path)}")
        setattr(owner, path[-1], value)
        self._revision += 1
        for listener in list(self._listeners):
            listener(path, value)


class ObjectField:
    """FieldTree 上の 1 ノード（FieldNode 実装）。"""

    __slots__ = ("_tree", "_path", "_name", "_declared")

    def __init__(self, tree: FieldTree, path: Path, name: str, declared: Any) -> None:
        self._tree = tree
        self._path = path
        self._name = name
        self._declared = declared

    def __repr__(self) -> str:
        return f"ObjectField({'.'.join(self._path) or self._name!r}, kind={self.kind!r})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> Path:
        return self._path

    @property
    def tree(self) -> FieldTree:
        return self._tree

    @property
    def target(self) -> Any:
        return self._tree.target

    def _value(self) -> Any:
        _ok, value = self._tree.resolve(self._path)
        return value

    def value(self) -> Any:
        """生の値を返す（無効なら None）。"""

        return self._value()

    def is_alive(self) -> bool:
        ok, _value = self._tree.resolve(self._path)
        return ok

    @property
    def kind(self) -> FieldKind:
        if self._declared is not None:
            kind = _kind_for_type(self._declared)
            if kind != "other":
                return kind
        return _kind_for_value(self._value())

    # --- 子の列挙 ---

    def _child_specs(self) -> list[tuple[str, Any]]:
        value = self._value()
        if value is None or not dataclasses.is_dataclass(value) or isinstance(value, type):
            return []
        hints = _type_hints(value)
        specs: list[tuple[str, Any]] = []
        for f in dataclasses.fields(value):
            if f.metadata.get(HIDDEN, False):
                continue
            specs.append((f.name, hints.get(f.name)))
        return specs

    def is_composite(self) -> bool:
        return bool(self._child_specs())

    def find(self, name: str) -> ObjectField | None:
        for child_name, declared in self._child_specs():
            if child_name == name:
                return ObjectField(self._tree, self._path + (child_name,), child_name, declared)
        return None

    def visible_children(self) -> Sequence[ObjectField]:
        return [
            ObjectField(self._tree, self._path + (child_name,), child_name, declared)
            for child_name, declared in self._child_specs()
        ]

    # --- 展開状態 / 高さ ---

    @property
    def expanded(self) -> bool:
        return self._tree.is_expanded(self._path)

    @expanded.setter
    def expanded(self, value: bool) -> None:
        self._tree.set_expanded(self._path, value)

    @property
    def height(self) -> float:
        metrics = self._tree.metrics
        total = float(metrics.line_height)
        if not (self.expanded and self.is_composite()):
            return total
        total += float(metrics.vertical_spacing)
        for child in self.visible_children():
            total += child.height + float(metrics.vertical_spacing)
        return total

    # --- 型付き読み出し ---

    def as_float(self) -> float:
        value = self._value()
        try:
            return float(value)
        except (TypeError, ValueError):
            return 0.0

    def as_int(self) -> int:
        value = self._value()
        try:
            return int(value)
        except (TypeError, ValueError):
            return 0

    def as_long(self) -> int:
        return self.as_int()

    # --- 型付き書き込み（即時 commit）---

    def _coerce_int(self, value: int, limits: Any) -> Any:
        declared = self._declared
        target: Any = None
        if declared is not None and isinstance(declared, type) and issubclass(declared, np.integer):
            target = declared
        elif isinstance(self._value(), np.integer):
            target = type(self._value())
        lo, hi = int(limits.min), int(limits.max)
        if target is not None:
            # uint32 などは int64 の範囲に収めても溢れるため、格納先 dtype の範囲でも切る
            own = np.iinfo(target)
            lo, hi = max(lo, int(own.min)), min(hi, int(own.max))
        clipped = int(min(max(int(value), lo), hi))
        if clipped != int(value):
            _logger.debug("値を %s の範囲へ丸めました: %s -> %s", self._name, value, clipped)
        if target is not None:
            return target(clipped)
        return clipped

    def set_float(self, value: float) -> None:
        declared = self._declared
        if declared is not None and isinstance(declared, type) and issubclass(declared, np.floating):
            self._tree.commit(self._path, declared(value))
            return
        self._tree.commit(self._path, float(value))

    def set_int(self, value: int) -> None:
        self._tree.commit(self._path, self._coerce_int(value, _INT32))

    def set_long(self, value: int) -> None:
        self._tree.commit(self._path, self._coerce_int(value, _INT64))


def field_tree_for(target: Any, *, name: str = "root", metrics: HostMetrics | None = None) -> ObjectField:
    """target を根とする FieldTree を作り、その root ノードを返す。"""

    return FieldTree(target, name=name, metrics=metrics).root()


__all__ = ["HIDDEN", "ChangeListener", "FieldTree", "ObjectField", "field_tree_for"]
