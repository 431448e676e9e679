# どこで: `src/boundviz/interactive/gauge_gui/runner.py`。
# 何を: 1 枚のインスペクタウィンドウを pyglet の app loop で回し、閉じるまでゲージを描き続ける。
# なぜ: window 生成 → GUI 初期化 → ループ → 破棄 の定型を 1 か所にまとめるため。

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable

from boundviz.core.fields import HostMetrics
from boundviz.core.gauge_config import GaugeConfig, InspectorConfig

from .gui import GaugeInspector, create_inspector_window, entries_from_objects

_logger = logging.getLogger(__name__)


class InspectorLoop:
    """GaugeInspector とそのウィンドウを所有し、一定間隔で 1 フレームずつ描く。

    `pyglet.app.run(interval=None)` で自動再描画を止め、描画タイミングは
    `clock.schedule_interval` の tick に揃える。ウィンドウが閉じられると
    pyglet の既定ハンドラが `has_exit` を立て、最後のウィンドウが消えた時点でループが抜ける。
    """

    def __init__(
        self,
        gui: GaugeInspector,
        window: Any,
        *,
        fps: float = 60.0,
        on_frame: Callable[[float], None] | None = None,
    ) -> None:
        if fps <= 0:
            raise ValueError(f"fps は正である必要があります: got={fps}")
        self._gui = gui
        self._window = window
        self._interval = 1.0 / float(fps)
        self._on_frame = on_frame
        self.frames = 0

    def tick(self, dt: float) -> None:
        """1 フレーム進める（on_frame → 再描画）。閉じたウィンドウには描かない。"""

        if getattr(self._window, "has_exit", False):
            return
        if self._on_frame is not None:
            self._on_frame(float(dt))
        self._window.draw(dt)
        self.frames += 1

    def _on_draw(self) -> None:
        self._gui.draw_frame()

    def run(self) -> None:
        """ウィンドウが閉じられるまでブロックし、抜けたら GUI を破棄する。"""

        import pyglet

        self._window.push_handlers(on_draw=self._on_draw)
        pyglet.clock.schedule_interval(self.tick, self._interval)
        try:
            pyglet.app.run(interval=None)
        finally:
            pyglet.clock.unschedule(self.tick)
            self._gui.close()
            _logger.info("Gauge inspector closed after %d frames", self.frames)


def run_gauge_inspector(
    objects: Mapping[str, Any],
    *,
    inspector: InspectorConfig,
    config: GaugeConfig | None = None,
    fps: float = 60.0,
    on_frame: Callable[[float], None] | None = None,
    caption: str = "Gauge Inspector",
) -> None:
    """`{label: obj}` をゲージとして表示する。

    Parameters
    ----------
    objects : Mapping[str, Any]
        表示する有界変数（dataclass インスタンス）。
    inspector : InspectorConfig
        ラベル幅/行間/ウィンドウサイズ。
    config : GaugeConfig | None
        ゲージ設定。None なら config.yaml からロードする（失敗時は組み込み既定値）。
    fps : float
        目標フレームレート。
    on_frame : Callable[[float], None] | None
        各フレーム冒頭に dt を渡して呼ぶコールバック。
    """

    metrics = HostMetrics(
        label_width=inspector.label_width,
        vertical_spacing=inspector.vertical_spacing,
        line_height=inspector.line_height,
    )
    window = create_inspector_window(inspector, caption=caption)
    gui = GaugeInspector(
        window,
        entries=entries_from_objects(objects, metrics=metrics),
        metrics=metrics,
        config=config,
    )
    _logger.info("Gauge inspector started: %d entries", len(objects))
    InspectorLoop(gui, window, fps=fps, on_frame=on_frame).run()


__all__ = ["InspectorLoop", "run_gauge_inspector"]
