# どこで: `src/boundviz/core/binding.py`。
# 何を: 束縛フィールドから current/max/min の子フィールドを探し、型付きの読み書き口を提供する。
# なぜ: 命名規約による探索と入れ子ラッパーへのフォールバックを明示的な変種として扱い、
#       描画/スクラブ側が「どこに値があるか」を知らずに済むようにするため。

from __future__ import annotations

import logging
import weakref
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from .fields import FieldNode

_logger = logging.getLogger(__name__)

# 大文字表記を先に探し、Python 属性名（小文字）も受け付ける。
_CURRENT_NAMES = ("Current", "current")
_MAX_NAMES = ("Max", "max", "Duration", "duration")
_MIN_NAMES = ("Min", "min")
_WRAPPER_NAMES = ("Value", "value", "Volume", "volume")


def _find_first(node: FieldNode, names: tuple[str, ...]) -> FieldNode | None:
    for name in names:
        found = node.find(name)
        if found is not None:
            return found
    return None


def read_number(node: FieldNode | None) -> float:
    """数値フィールドを float で読む。未解決/非対応 kind は 0。"""

    if node is None or not node.is_alive():
        return 0.0
    kind = node.kind
    if kind == "float":
        return float(node.as_float())
    if kind == "int":
        return float(node.as_int())
    if kind == "long":
        return float(node.as_long())
    _logger.debug("非対応の kind を 0 として読みます: name=%s kind=%s", node.name, kind)
    return 0.0


def write_number(node: FieldNode | None, value: float) -> bool:
    """kind に応じた経路で値を書き込み、書き込んだかを返す。

    int/long は最近接へ丸めてから書く。非対応 kind は何もしない。
    """

    if node is None or not node.is_alive():
        return False
    kind = node.kind
    if kind == "float":
        node.set_float(float(value))
        return True
    if kind == "int":
        node.set_int(int(round(float(value))))
        return True
    if kind == "long":
        node.set_long(int(round(float(value))))
        return True
    _logger.debug("非対応の kind への書き込みを無視します: name=%s kind=%s", node.name, kind)
    return False


class BoundedBinding(Protocol):
    """有界変数 1 つ分の読み書き口。"""

    @property
    def is_empty(self) -> bool: ...

    def is_alive(self) -> bool: ...

    def get_current(self) -> float: ...

    def get_max(self) -> float: ...

    def get_min(self) -> float: ...

    def set_current(self, value: float) -> bool: ...


@dataclass(frozen=True, slots=True)
class EmptyBinding:
    """current が見つからなかった束縛。読みは常に 0、書きは何もしない。"""

    @property
    def is_empty(self) -> bool:
        return True

    def is_alive(self) -> bool:
        return True

    def get_current(self) -> float:
        return 0.0

    def get_max(self) -> float:
        return 0.0

    def get_min(self) -> float:
        return 0.0

    def set_current(self, value: float) -> bool:
        return False


EMPTY_BINDING = EmptyBinding()


@dataclass(frozen=True, slots=True)
class DirectBinding:
    """束縛フィールド直下に Current/Max/Min を持つ変種。"""

    root: FieldNode
    current: FieldNode
    max: FieldNode | None
    min: FieldNode | None

    @property
    def is_empty(self) -> bool:
        return False

    def is_alive(self) -> bool:
        return self.root.is_alive()

    def get_current(self) -> float:
        return read_number(self.current)

    def get_max(self) -> float:
        return read_number(self.max)

    def get_min(self) -> float:
        # Min は省略可能（無ければ 0）。
        return read_number(self.min)

    def set_current(self, value: float) -> bool:
        return write_number(self.current, value)


@dataclass(frozen=True, slots=True)
class WrappedBinding:
    """`Value` / `Volume` ラッパーの 1 段内側に Current/Max/Min を持つ変種。"""

    root: FieldNode
    wrapper: FieldNode
    current: FieldNode
    max: FieldNode | None
    min: FieldNode | None

    @property
    def is_empty(self) -> bool:
        return False

    def is_alive(self) -> bool:
        return self.root.is_alive()

    def get_current(self) -> float:
        return read_number(self.current)

    def get_max(self) -> float:
        return read_number(self.max)

    def get_min(self) -> float:
        return read_number(self.min)

    def set_current(self, value: float) -> bool:
        return write_number(self.current, value)


def _probe(node: FieldNode) -> tuple[FieldNode | None, FieldNode | None, FieldNode | None]:
    return (
        _find_first(node, _CURRENT_NAMES),
        _find_first(node, _MAX_NAMES),
        _find_first(node, _MIN_NAMES),
    )


def resolve_binding(root: FieldNode) -> BoundedBinding:
    """root から current/max/min を解決して束縛を返す。

    1. root 直下の `Current` / `Max`（無ければ `Duration`）/ `Min`
    2. 1 で current が無ければ、ラッパー `Value`（無ければ `Volume`）の内側で同じ探索
    3. それでも current が無ければ空の束縛（例外は投げない）
    """

    current, max_field, min_field = _probe(root)
    if current is not None:
        return DirectBinding(root=root, current=current, max=max_field, min=min_field)

    wrapper = _find_first(root, _WRAPPER_NAMES)
    if wrapper is not None:
        current, max_field, min_field = _probe(wrapper)
        if current is not None:
            return WrappedBinding(
                root=root, wrapper=wrapper, current=current, max=max_field, min=min_field
            )

    _logger.debug("current フィールドが見つからないため空の束縛を使います: %s", root.name)
    return EMPTY_BINDING


def _identity_ref(target: Any) -> Callable[[], Any]:
    """target を保持せずに同一性を判定できる参照を返す（weakref 不可なら強参照）。"""

    try:
        return weakref.ref(target)
    except TypeError:
        return lambda: target


class BindingCache:
    """ドロワー 1 インスタンス分の束縛キャッシュ。

    束縛先オブジェクトの同一性が変わったとき、または束縛が読めなくなったときに
    解決をやり直す。束縛先が死んでいる間は空の束縛を返す。
    """

    def __init__(self) -> None:
        self._target_ref: Callable[[], Any] | None = None
        self._binding: BoundedBinding | None = None

    def clear(self) -> None:
        self._target_ref = None
        self._binding = None

    def _is_cached_target(self, target: Any) -> bool:
        ref = self._target_ref
        if ref is None:
            return False
        cached = ref()
        return cached is not None and cached is target

    def get(self, root: FieldNode) -> BoundedBinding:
        """root に対する束縛を返す（必要なら再解決する）。"""

        if not root.is_alive():
            self.clear()
            return EMPTY_BINDING

        target = root.target
        binding = self._binding
        if binding is not None and self._is_cached_target(target) and binding.is_alive():
            return binding

        binding = resolve_binding(root)
        self._binding = binding
        self._target_ref = _identity_ref(target)
        return binding


__all__ = [
    "EMPTY_BINDING",
    "BindingCache",
    "BoundedBinding",
    "DirectBinding",
    "EmptyBinding",
    "WrappedBinding",
    "read_number",
    "resolve_binding",
    "write_number",
]
