# どこで: `src/boundviz/__init__.py`。
# 何を: ルート `boundviz` パッケージを定義し、ゲージ本体の公開 API をまとめる。
# なぜ: import 起点を `boundviz` に統一するため（imgui/pyglet 依存の GUI は含めない）。

from __future__ import annotations

from boundviz.core.binding import BindingCache, resolve_binding
from boundviz.core.drawer import BoundedGaugeDrawer
from boundviz.core.gauge_config import GaugeConfig, GradientOverride, gauge_config, set_config_path
from boundviz.core.layout import Rect
from boundviz.core.object_fields import FieldTree, field_tree_for
from boundviz.core.registry import bounded_variable, is_bounded_variable
from boundviz.core.scrub import InputCapture, InteractionContext, PointerEvent

__all__ = [
    "BindingCache",
    "BoundedGaugeDrawer",
    "FieldTree",
    "GaugeConfig",
    "GradientOverride",
    "InputCapture",
    "InteractionContext",
    "PointerEvent",
    "Rect",
    "bounded_variable",
    "field_tree_for",
    "gauge_config",
    "is_bounded_variable",
    "resolve_binding",
    "set_config_path",
]
