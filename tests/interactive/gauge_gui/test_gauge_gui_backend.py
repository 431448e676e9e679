from __future__ import annotations

import sys
from types import SimpleNamespace

import pytest

from boundviz.core.fields import HostMetrics
from boundviz.core.gauge_config import InspectorConfig
from boundviz.core.variables import Health, Timer
from boundviz.interactive.gauge_gui.gui import (
    _create_renderer,
    _sync_io,
    create_inspector_window,
    entries_from_objects,
)
from boundviz.interactive.gauge_gui.runner import InspectorLoop


class DummyWindow:
    width = 400
    height = 300

    def get_framebuffer_size(self) -> tuple[int, int]:
        return (800, 600)


def test_sync_imgui_io_sets_display_size_scale_and_dt():
    io = SimpleNamespace()
    imgui = SimpleNamespace(get_io=lambda: io)

    _sync_io(imgui, DummyWindow(), 0.0)

    assert io.display_size == (400.0, 300.0)
    assert io.display_fb_scale == (2.0, 2.0)
    assert io.delta_time == pytest.approx(1e-4)


def test_create_renderer_prefers_factory_then_class():
    window = DummyWindow()
    made = _create_renderer(SimpleNamespace(create_renderer=lambda w: ("factory", w)), window)
    assert made == ("factory", window)

    made = _create_renderer(SimpleNamespace(PygletRenderer=lambda w: ("class", w)), window)
    assert made == ("class", window)

    with pytest.raises(RuntimeError):
        _create_renderer(SimpleNamespace(), window)


def test_entries_from_objects_builds_one_tree_per_object():
    metrics = HostMetrics(label_width=90.0)
    timer, health = Timer(current=1.0, duration=3.0), Health()

    entries = entries_from_objects({"Dash": timer, "PlayerHealth": health}, metrics=metrics)

    assert [e.label for e in entries] == ["Dash", "PlayerHealth"]
    assert entries[0].field.name == "Dash"
    assert entries[0].field.target is timer
    assert entries[1].field.tree.metrics is metrics
    assert entries[0].field.tree is not entries[1].field.tree


class LoopWindow(DummyWindow):
    def __init__(self) -> None:
        self.has_exit = False
        self.draws: list[float] = []

    def draw(self, dt: float) -> None:
        self.draws.append(dt)


def test_inspector_loop_tick_runs_frame_callback_before_draw():
    window = LoopWindow()
    order: list[str] = []
    window.draw = lambda dt: order.append(f"draw {dt}")
    loop = InspectorLoop(SimpleNamespace(), window, fps=30.0, on_frame=lambda dt: order.append(f"frame {dt}"))

    loop.tick(0.25)

    assert order == ["frame 0.25", "draw 0.25"]
    assert loop.frames == 1


def test_inspector_loop_stops_drawing_after_window_exit():
    window = LoopWindow()
    frames: list[float] = []
    loop = InspectorLoop(SimpleNamespace(), window, on_frame=frames.append)

    loop.tick(0.1)
    window.has_exit = True
    loop.tick(0.1)

    assert window.draws == [0.1]
    assert frames == [0.1]
    assert loop.frames == 1


def test_inspector_loop_rejects_non_positive_fps():
    with pytest.raises(ValueError):
        InspectorLoop(SimpleNamespace(), LoopWindow(), fps=0.0)


def test_create_inspector_window_is_sized_from_inspector_config(monkeypatch):
    fake_pyglet = SimpleNamespace(
        gl=SimpleNamespace(Config=lambda **kw: kw),
        window=SimpleNamespace(Window=lambda **kw: kw),
    )
    monkeypatch.setitem(sys.modules, "pyglet", fake_pyglet)

    made = create_inspector_window(InspectorConfig(window_size=(800, 450)), caption="HUD")

    assert (made["width"], made["height"], made["caption"]) == (800, 450, "HUD")
    assert made["config"]["samples"] == 4
    assert create_inspector_window()["width"] == InspectorConfig().window_size[0]
