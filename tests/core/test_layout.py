import pytest

from boundviz.core.gauge_config import GaugeConfig
from boundviz.core.layout import Rect, layout_children, layout_gauge, measure_gauge


def test_layout_gauge_splits_header_into_label_and_bar():
    cfg = GaugeConfig(height=18.0, padding=2.0)
    lay = layout_gauge(Rect(10.0, 20.0, 300.0, 100.0), cfg, label_width=120.0)

    assert lay.header == Rect(10.0, 20.0, 300.0, 18.0)
    assert lay.label == Rect(10.0, 20.0, 120.0, 18.0)
    assert lay.bar == Rect(130.0, 20.0, 180.0, 18.0)
    assert lay.visual_bar == Rect(132.0, 22.0, 178.0, 14.0)


def test_layout_gauge_never_produces_negative_sizes():
    cfg = GaugeConfig(height=4.0, padding=5.0)
    lay = layout_gauge(Rect(0.0, 0.0, 50.0, 4.0), cfg, label_width=80.0)

    assert lay.label.width == 50.0
    assert lay.bar.width == 0.0
    assert lay.visual_bar.width == 0.0
    assert lay.visual_bar.height == 0.0


def test_measure_gauge_collapsed_is_header_height():
    cfg = GaugeConfig(height=18.0)
    assert measure_gauge(cfg, expanded=False, child_heights=[18.0, 18.0], spacing=2.0) == 18.0


def test_measure_gauge_expanded_adds_children_and_spacing():
    cfg = GaugeConfig(height=18.0)
    got = measure_gauge(cfg, expanded=True, child_heights=[18.0, 40.0], spacing=2.0)
    assert got == pytest.approx(18.0 + 2.0 + (18.0 + 2.0) + (40.0 + 2.0))


def test_measure_gauge_expanded_without_children():
    cfg = GaugeConfig(height=18.0)
    assert measure_gauge(cfg, expanded=True, child_heights=[], spacing=2.0) == 20.0


def test_layout_children_stacks_rows_below_header():
    cfg = GaugeConfig(height=18.0)
    rects = layout_children(
        Rect(5.0, 100.0, 200.0, 0.0), cfg, child_heights=[18.0, 30.0, 18.0], spacing=2.0
    )

    assert rects == [
        Rect(5.0, 120.0, 200.0, 18.0),
        Rect(5.0, 140.0, 200.0, 30.0),
        Rect(5.0, 172.0, 200.0, 18.0),
    ]


def test_rect_contains_includes_edges():
    r = Rect(10.0, 10.0, 100.0, 10.0)
    assert r.contains(10.0, 10.0)
    assert r.contains(110.0, 20.0)
    assert not r.contains(110.01, 15.0)
    assert not r.contains(50.0, 9.99)
