# どこで: `src/boundviz/core/registry.py`。
# 何を: ゲージで描く有界変数型のレジストリと、登録用デコレータを提供する。
# なぜ: ホストが「この型はゲージで描く」を型単位で判定できるようにするため。

from __future__ import annotations

from typing import Any, TypeVar

T = TypeVar("T", bound=type)


class BoundedTypeRegistry:
    """ゲージで描く型の集合（登録順を保持する）。"""

    def __init__(self) -> None:
        """空のレジストリを初期化する。"""
        self._types: dict[type, None] = {}

    def register(self, cls: type) -> None:
        self._types[cls] = None

    def unregister(self, cls: type) -> None:
        self._types.pop(cls, None)

    def __contains__(self, cls: object) -> bool:
        return cls in self._types

    def types(self) -> tuple[type, ...]:
        return tuple(self._types)

    def matches(self, obj_or_type: Any) -> bool:
        """型またはインスタンスが登録型（のサブクラス）かを返す。"""

        cls = obj_or_type if isinstance(obj_or_type, type) else type(obj_or_type)
        return any(issubclass(cls, registered) for registered in self._types)


bounded_registry = BoundedTypeRegistry()


def bounded_variable(cls: T) -> T:
    """クラスをゲージ描画対象として登録するデコレータ。

    Examples
    --------
    >>> @bounded_variable
    ... @dataclass
    ... class Stamina:
    ...     current: float
    ...     max: float
    """

    bounded_registry.register(cls)
    return cls


def is_bounded_variable(obj_or_type: Any) -> bool:
    """ゲージで描くべき型（インスタンス）かを返す。"""

    return bounded_registry.matches(obj_or_type)


def registered_bounded_types() -> tuple[type, ...]:
    """登録済みの型を登録順で返す。"""

    return bounded_registry.types()


__all__ = [
    "BoundedTypeRegistry",
    "bounded_registry",
    "bounded_variable",
    "is_bounded_variable",
    "registered_bounded_types",
]
