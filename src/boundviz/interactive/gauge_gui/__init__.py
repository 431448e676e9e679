# どこで: `src/boundviz/interactive/gauge_gui/__init__.py`。
# 何を: ゲージインスペクタ GUI の公開 API を集約する。
# なぜ: 実装を責務ごとに分割しつつ、利用側の import パスを安定させるため。

from __future__ import annotations

from .gui import GaugeEntry, GaugeInspector, create_inspector_window, entries_from_objects
from .imgui_host import ImGuiDrawSurface, ImGuiInspectorHost, PointerSampler
from .runner import InspectorLoop, run_gauge_inspector

__all__ = [
    "GaugeEntry",
    "GaugeInspector",
    "ImGuiDrawSurface",
    "ImGuiInspectorHost",
    "InspectorLoop",
    "PointerSampler",
    "create_inspector_window",
    "entries_from_objects",
    "run_gauge_inspector",
]
