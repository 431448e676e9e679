# どこで: `src/boundviz/interactive/gauge_gui/gui.py`。
# 何を: 有界変数の一覧を pyimgui のゲージとして表示・スクラブ編集する GUI（初期化/1フレーム描画/破棄）を提供する。
# なぜ: 依存の重いライフサイクル管理を 1 箇所に閉じ込め、ゲージ本体（core）を純粋に保つため。

from __future__ import annotations

import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from boundviz.core.fields import HostMetrics
from boundviz.core.gauge_config import DEFAULT_INSPECTOR_CONFIG, GaugeConfig, InspectorConfig
from boundviz.core.layout import Rect
from boundviz.core.object_fields import FieldTree, ObjectField
from boundviz.core.scrub import InputCapture, InteractionContext

from .imgui_host import ImGuiInspectorHost, PointerSampler


@dataclass(frozen=True, slots=True)
class GaugeEntry:
    """インスペクタの 1 行（ラベルと束縛フィールド）。"""

    label: str
    field: ObjectField


def create_inspector_window(
    inspector: InspectorConfig | None = None,
    *,
    caption: str = "Gauge Inspector",
    vsync: bool = True,
) -> Any:
    """InspectorConfig.window_size の大きさでインスペクタ用 pyglet ウィンドウを作る。"""

    import pyglet

    width, height = (inspector or DEFAULT_INSPECTOR_CONFIG).window_size
    # 角丸バーの縁が荒れないよう MSAA を要求する。
    gl_cfg = pyglet.gl.Config(double_buffer=True, sample_buffers=1, samples=4)  # type: ignore[abstract]
    return pyglet.window.Window(  # type: ignore[abstract]
        width=int(width),
        height=int(height),
        caption=str(caption),
        resizable=True,
        vsync=bool(vsync),
        config=gl_cfg,
    )


def _create_renderer(imgui_pyglet: Any, gui_window: Any) -> Any:
    # pyimgui の版により create_renderer() が無く PygletRenderer だけのことがある。
    for name in ("create_renderer", "PygletRenderer"):
        make = getattr(imgui_pyglet, name, None)
        if callable(make):
            return make(gui_window)
    raise RuntimeError("imgui.integrations.pyglet に renderer がありません")


def _sync_io(imgui: Any, gui_window: Any, dt: float) -> None:
    """表示サイズと Retina 倍率、Δt を ImGui IO に反映する。"""

    io = imgui.get_io()
    io.delta_time = dt if dt > 1e-4 else 1e-4
    width, height = max(1, int(gui_window.width)), max(1, int(gui_window.height))
    fb_width, fb_height = gui_window.get_framebuffer_size()
    io.display_size = (float(gui_window.width), float(gui_window.height))
    io.display_fb_scale = (fb_width / width, fb_height / height)


def entries_from_objects(
    objects: Mapping[str, Any], *, metrics: HostMetrics | None = None
) -> list[GaugeEntry]:
    """`{label: obj}` から GaugeEntry を作る（1 オブジェクト 1 FieldTree）。"""

    out: list[GaugeEntry] = []
    for label, obj in objects.items():
        tree = FieldTree(obj, name=str(label), metrics=metrics)
        out.append(GaugeEntry(label=str(label), field=tree.root()))
    return out


class GaugeInspector:
    """pyimgui で有界変数をゲージ表示するインスペクタ。

    `draw_frame()` を呼ぶことで 1 フレーム分の UI を描画する。
    ドラッグの排他キャプチャはこのインスタンスが所有し、全ゲージで共有する。
    """

    def __init__(
        self,
        gui_window: Any,
        *,
        entries: Sequence[GaugeEntry],
        metrics: HostMetrics | None = None,
        config: GaugeConfig | None = None,
        title: str = "Gauges",
    ) -> None:
        """GUI の初期化（ImGui コンテキスト / renderer 作成）。"""

        import imgui  # type: ignore[import-untyped]

        try:
            from imgui.integrations import (
                pyglet as imgui_pyglet,  # type: ignore[import-untyped]
            )
        except Exception as exc:
            raise RuntimeError(f"imgui.integrations.pyglet を import できない: {exc}") from exc

        self._window = gui_window
        self._entries = list(entries)
        self._title = str(title)

        # ImGui は「グローバルな current context」を前提にするため、自前コンテキストを作って切り替えながら使う。
        self._imgui = imgui
        self._context = imgui.create_context()
        imgui.style_colors_dark()
        imgui.set_current_context(self._context)

        self._renderer = _create_renderer(imgui_pyglet, gui_window)

        self._metrics = metrics if metrics is not None else HostMetrics()
        self._host = ImGuiInspectorHost(imgui, metrics=self._metrics, config=config)
        self._capture = InputCapture()
        self._pointer = PointerSampler()

        self._prev_time = time.monotonic()
        self._closed = False

    @property
    def capture(self) -> InputCapture:
        return self._capture

    @property
    def entries(self) -> list[GaugeEntry]:
        return list(self._entries)

    def set_entries(self, entries: Sequence[GaugeEntry]) -> None:
        """表示対象を差し替える。進行中のドラッグは破棄する。"""

        self._entries = list(entries)
        self._host.clear_drawers()
        self._capture.invalidate()

    def _revision_sum(self) -> int:
        return sum(entry.field.tree.revision for entry in self._entries)

    def _draw_entry(self, entry: GaugeEntry, ctx: InteractionContext) -> None:
        imgui = self._imgui
        pos = imgui.get_cursor_screen_pos()
        width = float(imgui.get_content_region_available_width())
        height = self._host.measure_field(entry.field, entry.label)

        rect = Rect(float(pos[0]), float(pos[1]), width, height)
        self._host.draw_row(rect, entry.field, entry.label, ctx)

        # 自前で配置した領域ぶんだけカーソルを進め、スクロール範囲に反映させる。
        imgui.set_cursor_screen_pos((rect.x, rect.y))
        imgui.dummy(max(width, 1.0), height + self._metrics.vertical_spacing)

    def draw_frame(self) -> bool:
        """1 フレーム分の GUI を描画し、値が書き換わったかを返す。

        `flip()` は呼ばない。呼び出し側（pyglet の Window.draw）が担当する。
        """

        if self._closed:
            return False

        now = time.monotonic()
        dt = now - self._prev_time
        self._prev_time = now

        imgui = self._imgui
        imgui.set_current_context(self._context)

        # 注: process_inputs() は内部で pyglet.clock.tick() を呼ぶため、pyglet.app.run() 駆動では呼ばない。
        # 入力は pyglet のイベント配送で io に反映される。

        # --- ImGui フレーム開始 ---
        imgui.new_frame()
        _sync_io(imgui, self._window, dt)

        imgui.set_next_window_position(0, 0)
        imgui.set_next_window_size(self._window.width, self._window.height)
        # バー上のドラッグでウィンドウが動かないよう NO_MOVE を付ける。
        imgui.begin(
            self._title,
            flags=imgui.WINDOW_NO_RESIZE
            | imgui.WINDOW_NO_COLLAPSE
            | imgui.WINDOW_NO_TITLE_BAR
            | imgui.WINDOW_NO_MOVE,
        )

        event, pointer = self._pointer.sample(imgui)
        ctx = InteractionContext(capture=self._capture, event=event, pointer=pointer)
        before = self._revision_sum()

        imgui.begin_child("##gauge_scroll", 0, 0, border=False)
        try:
            self._host.begin_frame(imgui.get_window_draw_list())
            for entry in self._entries:
                self._draw_entry(entry, ctx)
        finally:
            imgui.end_child()
        imgui.end()

        # --- ImGui フレーム終了（draw_data 構築）---
        imgui.render()

        import pyglet

        pyglet.gl.glClearColor(0.12, 0.12, 0.12, 1.0)
        self._window.clear()
        self._renderer.render(imgui.get_draw_data())
        return self._revision_sum() != before

    def close(self) -> None:
        """GUI を終了し、コンテキストとウィンドウを破棄する。"""

        if self._closed:
            return
        self._closed = True

        self._capture.invalidate()
        shutdown = getattr(self._renderer, "shutdown", None)
        if callable(shutdown):
            shutdown()
        self._imgui.destroy_context(self._context)
        self._window.close()


__all__ = ["GaugeEntry", "GaugeInspector", "create_inspector_window", "entries_from_objects"]
