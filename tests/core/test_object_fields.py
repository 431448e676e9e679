from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from boundviz.core.fields import HostMetrics
from boundviz.core.object_fields import HIDDEN, FieldTree, field_tree_for
from boundviz.core.variables import Bounded, Cooldown, Experience, Health, RegenFloat, Reservoir


@dataclass
class Mixed:
    flag: bool = False
    speed: float = 1.0
    count: int = 3
    small: np.int16 = np.int16(2)
    big: np.uint32 = np.uint32(7)
    name: str = "x"
    loose: object = 4.5
    secret: float = field(default=0.0, metadata={HIDDEN: True})


def test_kinds_from_annotations_and_values():
    root = field_tree_for(Mixed())
    kinds = {child.name: child.kind for child in root.visible_children()}

    assert kinds == {
        "flag": "other",
        "speed": "float",
        "count": "int",
        "small": "int",
        "big": "long",
        "name": "other",
        "loose": "float",
    }


def test_numpy_kinds_of_sample_types():
    health = field_tree_for(Health())
    exp = field_tree_for(Experience())

    assert health.find("current").kind == "int"
    assert exp.find("current").kind == "long"


def test_hidden_fields_are_not_listed_or_found():
    root = field_tree_for(Cooldown(label="burst"))

    assert [c.name for c in root.visible_children()] == ["current", "duration"]
    assert root.find("label") is None


def test_commit_notifies_listeners_and_bumps_revision():
    obj = Bounded(current=1.0, max=5.0)
    tree = FieldTree(obj)
    seen = []
    unsubscribe = tree.subscribe(lambda path, value: seen.append((path, value)))

    tree.root().find("current").set_float(3.0)
    assert obj.current == 3.0
    assert seen == [(("current",), 3.0)]
    assert tree.revision == 1

    unsubscribe()
    tree.root().find("current").set_float(4.0)
    assert len(seen) == 1
    assert tree.revision == 2


def test_integer_writes_are_clipped_and_keep_numpy_type():
    obj = Health()
    root = field_tree_for(obj)

    root.find("current").set_int(10_000_000_000)

    assert obj.current == np.iinfo(np.int32).max
    assert isinstance(obj.current, np.int32)


def test_unsigned_long_writes_clip_to_their_own_dtype():
    obj = Mixed()
    big = field_tree_for(obj).find("big")
    assert big.kind == "long"

    big.set_long(-5)
    assert obj.big == 0
    assert isinstance(obj.big, np.uint32)

    big.set_long(2**40)
    assert obj.big == np.iinfo(np.uint32).max
    assert isinstance(obj.big, np.uint32)

    big.set_long(123)
    assert obj.big == 123


def test_unannotated_numpy_value_keeps_its_dtype_on_write():
    @dataclass
    class Loose:
        level: object = np.uint8(3)

    obj = Loose()
    level = field_tree_for(obj).find("level")

    level.set_int(1000)
    assert obj.level == 255
    assert isinstance(obj.level, np.uint8)


def test_nested_path_reads_and_writes():
    obj = Reservoir()
    root = field_tree_for(obj)
    inner = root.find("volume").find("current")

    assert inner.path == ("volume", "current")
    inner.set_float(12.5)
    assert obj.volume.current == 12.5
    assert inner.as_float() == 12.5


def test_expanded_state_and_height():
    metrics = HostMetrics(label_width=100.0, vertical_spacing=2.0, line_height=18.0)
    tree = FieldTree(RegenFloat(), metrics=metrics)
    root = tree.root()

    assert root.expanded is False
    assert root.height == 18.0

    root.expanded = True
    assert tree.root().expanded is True
    # value と rate の 2 行
    assert root.height == 18.0 + 2.0 + (18.0 + 2.0) * 2

    root.find("value").expanded = True
    # value の中の current/max/min の 3 行が増える
    assert root.height == 18.0 + 2.0 + (18.0 + 2.0 + 3 * 20.0 + 2.0) + (18.0 + 2.0)


def test_leaf_is_never_taller_than_a_line():
    root = field_tree_for(Bounded())
    leaf = root.find("current")
    leaf.expanded = True
    assert leaf.height == root.tree.metrics.line_height


def test_detach_and_replace_target():
    tree = FieldTree(Bounded(current=2.0))
    current = tree.root().find("current")
    assert current.is_alive()

    tree.detach()
    assert not current.is_alive()
    assert current.value() is None
    assert current.as_float() == 0.0
    assert tree.root().visible_children() == []

    tree.replace_target(Bounded(current=7.0))
    assert current.is_alive()
    assert current.as_float() == 7.0


def test_unreadable_values_read_as_zero():
    root = field_tree_for(Mixed())
    assert root.find("name").as_float() == 0.0
    assert root.find("name").as_int() == 0
