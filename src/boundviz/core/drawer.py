# どこで: `src/boundviz/core/drawer.py`。
# 何を: ホストから呼ばれる measure/draw の入口。束縛解決→レイアウト→入力→描画→子行を 1 サイクルで行う。
# なぜ: 各段（binding/layout/scrub/render）を純粋に保ったまま、ホストとの接点を 1 クラスへ集約するため。

from __future__ import annotations

import logging
from typing import Protocol

from .binding import BindingCache
from .fields import FieldNode, HostMetrics
from .gauge_config import DEFAULT_GAUGE_CONFIG, GaugeConfig, gauge_config
from .gauge_values import compute_ratio
from .layout import Rect, layout_children, layout_gauge, measure_gauge
from .render import DrawSurface, draw_gauge_bar, draw_gauge_text
from .scrub import InteractionContext, ScrubController

_logger = logging.getLogger(__name__)

_config_fallback_reported = False


class InspectorHost(Protocol):
    """ゲージを配置するインスペクタ側の機能。"""

    @property
    def metrics(self) -> HostMetrics: ...

    @property
    def surface(self) -> DrawSurface: ...

    def draw_foldout(self, rect: Rect, expanded: bool, label: str) -> bool: ...

    def set_cursor_hint(self, rect: Rect, hovering: bool) -> None: ...

    def measure_field(self, field: FieldNode, label: str) -> float: ...

    def draw_field(self, rect: Rect, field: FieldNode, ctx: InteractionContext) -> None: ...


def resolve_gauge_config() -> GaugeConfig:
    """設定をロードして返す。ロードできなければ組み込み既定値を返す。

    失敗は gauge_config 側に記録されるため、2 回目以降はファイルを読まずに既定値へ落ちる。
    """

    global _config_fallback_reported
    try:
        config = gauge_config()
    except Exception:
        if not _config_fallback_reported:
            _config_fallback_reported = True
            _logger.exception("Failed to load gauge config; using built-in defaults")
        return DEFAULT_GAUGE_CONFIG
    _config_fallback_reported = False
    return config


class BoundedGaugeDrawer:
    """有界変数をゲージとして描き、スクラブ編集を受け付けるドロワー。

    1 インスタンスが 1 つの束縛先（と、その束縛キャッシュ/スクラブ状態）を受け持つ。
    """

    def __init__(self, host: InspectorHost, *, config: GaugeConfig | None = None) -> None:
        self._host = host
        self._config = config
        self._bindings = BindingCache()
        self._scrub = ScrubController()

    @property
    def scrub(self) -> ScrubController:
        return self._scrub

    def config(self) -> GaugeConfig:
        if self._config is not None:
            return self._config
        return resolve_gauge_config()

    def _child_heights(self, children: list[FieldNode]) -> list[float]:
        # 子の高さはホストに測らせる（入れ子のゲージは gauge.height で描かれる）。
        return [float(self._host.measure_field(child, child.name)) for child in children]

    def measure(self, field: FieldNode, label: str) -> float:
        """field を描くのに必要な高さを返す。"""

        config = self.config()
        spacing = self._host.metrics.vertical_spacing
        if not field.is_alive():
            return float(config.height)
        expanded = bool(field.expanded)
        heights = self._child_heights(list(field.visible_children())) if expanded else []
        return measure_gauge(config, expanded=expanded, child_heights=heights, spacing=spacing)

    def draw(self, rect: Rect, field: FieldNode, label: str, ctx: InteractionContext) -> None:
        """rect 内にゲージを描き、ctx の入力を処理する。"""

        host = self._host
        config = self.config()
        metrics = host.metrics

        # --- 束縛解決（キャッシュ）---
        alive = field.is_alive()
        binding = self._bindings.get(field)
        if not alive or not binding.is_alive():
            self._scrub.cancel(ctx)

        # --- レイアウト ---
        lay = layout_gauge(rect, config, label_width=metrics.label_width)

        # --- 値の読み出し（このサイクルの描画は確定前の比率を使う）---
        current = binding.get_current()
        max_value = binding.get_max()
        min_value = binding.get_min()
        ratio = compute_ratio(current, min_value, max_value)

        expanded = False
        if alive:
            expanded = host.draw_foldout(lay.label, bool(field.expanded), label)
            field.expanded = expanded

        # --- 入力 ---
        hovering = ctx.is_hovering(lay.visual_bar)
        if config.allow_scrubbing and alive and binding.is_alive():
            host.set_cursor_hint(lay.visual_bar, hovering)
            self._scrub.handle(ctx, lay.visual_bar, min_value, max_value, binding.set_current)

        # --- 描画 ---
        if ctx.repaint:
            surface = host.surface
            draw_gauge_bar(surface, lay.visual_bar, ratio, config, field.name, hovering=hovering)
            if config.show_text:
                draw_gauge_text(surface, lay.visual_bar, current, max_value, config)

        # --- 子行 ---
        if expanded:
            children = list(field.visible_children())
            rects = layout_children(
                rect,
                config,
                child_heights=self._child_heights(children),
                spacing=metrics.vertical_spacing,
            )
            for child, child_rect in zip(children, rects):
                host.draw_field(child_rect, child, ctx)


__all__ = ["BoundedGaugeDrawer", "InspectorHost", "resolve_gauge_config"]
