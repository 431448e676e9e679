from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from boundviz.core.binding import (
    EMPTY_BINDING,
    BindingCache,
    DirectBinding,
    WrappedBinding,
    read_number,
    resolve_binding,
    write_number,
)
from boundviz.core.object_fields import FieldTree


@dataclass
class Direct:
    Current: float = 30.0
    Max: float = 60.0
    Min: float = 10.0


@dataclass
class Inner:
    Current: float = 2.0
    Max: float = 8.0
    Min: float = 1.0


@dataclass
class Wrapped:
    Value: Inner = field(default_factory=Inner)


@dataclass
class VolumeWrapped:
    Volume: Inner = field(default_factory=Inner)


@dataclass
class DurationOnly:
    Current: float = 1.0
    Duration: float = 4.0


@dataclass
class Nothing:
    speed: float = 3.0
    name: str = "x"


@dataclass
class SnakeCase:
    current: int = 5
    max: int = 10


@dataclass
class Labelled:
    Current: str = "a"
    Max: float = 4.0


def _root(obj):
    return FieldTree(obj).root()


def test_resolve_direct_fields():
    binding = resolve_binding(_root(Direct()))

    assert isinstance(binding, DirectBinding)
    assert binding.current.name == "Current"
    assert binding.max is not None and binding.max.name == "Max"
    assert binding.min is not None and binding.min.name == "Min"
    assert (binding.get_current(), binding.get_max(), binding.get_min()) == (30.0, 60.0, 10.0)


def test_resolve_through_value_wrapper():
    binding = resolve_binding(_root(Wrapped()))

    assert isinstance(binding, WrappedBinding)
    assert binding.wrapper.name == "Value"
    assert binding.current.path == ("Value", "Current")
    assert (binding.get_current(), binding.get_max(), binding.get_min()) == (2.0, 8.0, 1.0)


def test_resolve_through_volume_wrapper():
    binding = resolve_binding(_root(VolumeWrapped()))

    assert isinstance(binding, WrappedBinding)
    assert binding.wrapper.name == "Volume"


def test_resolve_duration_as_max_and_missing_min_reads_zero():
    binding = resolve_binding(_root(DurationOnly()))

    assert isinstance(binding, DirectBinding)
    assert binding.max is not None and binding.max.name == "Duration"
    assert binding.min is None
    assert binding.get_max() == 4.0
    assert binding.get_min() == 0.0


def test_resolve_lower_case_attribute_names():
    binding = resolve_binding(_root(SnakeCase()))

    assert isinstance(binding, DirectBinding)
    assert (binding.get_current(), binding.get_max()) == (5.0, 10.0)


def test_resolve_without_current_returns_empty_binding():
    binding = resolve_binding(_root(Nothing()))

    assert binding is EMPTY_BINDING
    assert binding.is_empty
    assert (binding.get_current(), binding.get_max(), binding.get_min()) == (0.0, 0.0, 0.0)
    assert binding.set_current(5.0) is False


def test_unsupported_kind_reads_zero_and_ignores_writes():
    obj = Labelled()
    binding = resolve_binding(_root(obj))

    assert binding.get_current() == 0.0
    assert binding.set_current(3.0) is False
    assert obj.Current == "a"


def test_write_number_rounds_integers_to_nearest():
    @dataclass
    class Ints:
        Current: np.int32 = np.int32(0)
        Max: np.int64 = np.int64(0)

    obj = Ints()
    root = _root(obj)
    current = root.find("Current")
    big = root.find("Max")
    assert current is not None and big is not None
    assert current.kind == "int"
    assert big.kind == "long"

    assert write_number(current, 63.7) is True
    assert obj.Current == 64
    assert isinstance(obj.Current, np.int32)

    assert write_number(big, 5_000_000_000.4) is True
    assert obj.Max == 5_000_000_000
    assert read_number(big) == 5_000_000_000.0


def test_binding_cache_reuses_binding_for_same_target():
    tree = FieldTree(Direct())
    cache = BindingCache()

    first = cache.get(tree.root())
    assert cache.get(tree.root()) is first


def test_binding_cache_re_resolves_when_target_identity_changes():
    tree = FieldTree(Direct())
    cache = BindingCache()
    first = cache.get(tree.root())

    tree.replace_target(Wrapped())
    second = cache.get(tree.root())

    assert second is not first
    assert isinstance(second, WrappedBinding)


def test_binding_cache_returns_empty_binding_for_dead_target():
    tree = FieldTree(Direct())
    cache = BindingCache()
    cache.get(tree.root())

    tree.detach()
    assert cache.get(tree.root()) is EMPTY_BINDING

    tree.replace_target(Direct(Current=1.0))
    assert cache.get(tree.root()).get_current() == 1.0
