# どこで: `src/boundviz/interactive/gauge_gui/imgui_host.py`。
# 何を: pyimgui の draw list / IO をゲージ描画面・ポインタイベント・インスペクタホストとして提供する。
# なぜ: core 側は抽象（DrawSurface / InspectorHost / PointerEvent）だけを知り、
#       imgui 依存はこのモジュールへ閉じ込めるため。

from __future__ import annotations

from typing import Any

from boundviz.core.color import RGBA
from boundviz.core.drawer import BoundedGaugeDrawer
from boundviz.core.fields import FieldNode, HostMetrics
from boundviz.core.gauge_config import GaugeConfig
from boundviz.core.gauge_values import format_gauge_number
from boundviz.core.layout import Rect
from boundviz.core.registry import is_bounded_variable
from boundviz.core.scrub import InteractionContext, PointerEvent

INDENT_PX = 12.0
_LABEL_COLOR: RGBA = (0.85, 0.85, 0.85, 1.0)
_VALUE_COLOR: RGBA = (0.65, 0.75, 0.9, 1.0)
_ARROW_SIZE = 7.0

# imgui は画面外のマウス座標を -FLT_MAX 付近で返す。
_INVALID_MOUSE_COORD = -1e30


def _u32(imgui: Any, color: RGBA) -> int:
    r, g, b, a = color
    return int(imgui.get_color_u32_rgba(float(r), float(g), float(b), float(a)))


class ImGuiDrawSurface:
    """pyimgui のウィンドウ draw list へ描く DrawSurface。"""

    def __init__(self, imgui: Any, draw_list: Any, *, bold_font: Any | None = None) -> None:
        self._imgui = imgui
        self._draw_list = draw_list
        self._bold_font = bold_font

    def fill_rect(self, rect: Rect, color: RGBA, *, rounding: float = 0.0) -> None:
        if rect.width <= 0.0 or rect.height <= 0.0:
            return
        self._draw_list.add_rect_filled(
            rect.x,
            rect.y,
            rect.x_max,
            rect.y_max,
            _u32(self._imgui, color),
            rounding=float(rounding),
        )

    def stroke_rect(self, rect: Rect, color: RGBA) -> None:
        self._draw_list.add_rect(
            rect.x,
            rect.y,
            rect.x_max,
            rect.y_max,
            _u32(self._imgui, color),
            rounding=0.0,
            thickness=1.0,
        )

    def text_centered(
        self,
        rect: Rect,
        text: str,
        color: RGBA,
        *,
        font_size: float,
        bold: bool,
    ) -> None:
        # draw list の add_text はフォントサイズを取らないため、太字フォントがあれば push して代用する。
        imgui = self._imgui
        font = self._bold_font if bold else None
        if font is not None:
            imgui.push_font(font)
        try:
            size = imgui.calc_text_size(text)
            x = rect.x + (rect.width - float(size[0])) * 0.5
            y = rect.y + (rect.height - float(size[1])) * 0.5
            self._draw_list.add_text(x, y, _u32(imgui, color), text)
        finally:
            if font is not None:
                imgui.pop_font()

    def text(self, x: float, y: float, text: str, color: RGBA) -> None:
        self._draw_list.add_text(x, y, _u32(self._imgui, color), text)

    def arrow(self, x: float, y: float, *, expanded: bool, color: RGBA) -> None:
        s = _ARROW_SIZE
        col = _u32(self._imgui, color)
        if expanded:
            self._draw_list.add_triangle_filled(x, y, x + s, y, x + s * 0.5, y + s, col)
        else:
            self._draw_list.add_triangle_filled(x, y, x + s, y + s * 0.5, x, y + s, col)


class PointerSampler:
    """imgui IO からフレームごとの PointerEvent を作る。

    drag は「主ボタン押下中に座標が変わった」フレームとして、前フレーム座標との差分で判定する。
    """

    def __init__(self) -> None:
        self._last_pos: tuple[float, float] | None = None

    def sample(self, imgui: Any) -> tuple[PointerEvent | None, tuple[float, float] | None]:
        io = imgui.get_io()
        mx, my = float(io.mouse_pos[0]), float(io.mouse_pos[1])
        pos: tuple[float, float] | None = (mx, my)
        if mx <= _INVALID_MOUSE_COORD or my <= _INVALID_MOUSE_COORD:
            pos = None

        last = self._last_pos
        self._last_pos = pos
        if pos is None:
            return None, None

        for button in (0, 1, 2):
            if imgui.is_mouse_clicked(button):
                return PointerEvent("press", mx, my, button=button), pos
        if imgui.is_mouse_released(0):
            return PointerEvent("release", mx, my), pos
        if bool(io.mouse_down[0]) and last is not None and last != pos:
            return PointerEvent("drag", mx, my), pos
        return None, pos


def _field_key(field: FieldNode) -> tuple[int, tuple[str, ...]]:
    tree = getattr(field, "tree", None)
    path = getattr(field, "path", None)
    if path is None:
        path = (field.name,)
    return id(tree), tuple(path)


class ImGuiInspectorHost:
    """pyimgui 上でゲージと子行を並べるインスペクタホスト。

    `begin_frame()` でこのフレームの draw list を受け取り、以降の描画はそこへ積む。
    """

    def __init__(
        self,
        imgui: Any,
        *,
        metrics: HostMetrics | None = None,
        config: GaugeConfig | None = None,
        bold_font: Any | None = None,
    ) -> None:
        self._imgui = imgui
        self._metrics = metrics if metrics is not None else HostMetrics()
        self._config = config
        self._bold_font = bold_font
        self._surface: ImGuiDrawSurface | None = None
        self._drawers: dict[tuple[int, tuple[str, ...]], BoundedGaugeDrawer] = {}
        self._widget_counter = 0

    @property
    def metrics(self) -> HostMetrics:
        return self._metrics

    @property
    def surface(self) -> ImGuiDrawSurface:
        if self._surface is None:
            raise RuntimeError("begin_frame() の前に描画面へアクセスしました")
        return self._surface

    def begin_frame(self, draw_list: Any) -> None:
        self._surface = ImGuiDrawSurface(self._imgui, draw_list, bold_font=self._bold_font)
        self._widget_counter = 0

    def drawer_for(self, field: FieldNode) -> BoundedGaugeDrawer:
        """フィールドの位置ごとに 1 つのドロワーを返す（状態を持つため使い回す）。"""

        key = _field_key(field)
        drawer = self._drawers.get(key)
        if drawer is None:
            drawer = BoundedGaugeDrawer(self, config=self._config)
            self._drawers[key] = drawer
        return drawer

    def clear_drawers(self) -> None:
        """ドロワー（束縛キャッシュ/スクラブ状態）をすべて破棄する。"""

        self._drawers.clear()

    def measure_field(self, field: FieldNode, label: str) -> float:
        """行の高さを返す。ゲージはドロワーに測らせ、展開中の複合値は子を再帰的に積む。"""

        if self._is_gauge(field):
            return self.drawer_for(field).measure(field, label)
        metrics = self._metrics
        children = list(field.visible_children())
        if not children or not field.expanded:
            return float(metrics.line_height)
        spacing = float(metrics.vertical_spacing)
        total = float(metrics.line_height) + spacing
        for child in children:
            total += self.measure_field(child, child.name) + spacing
        return total

    def draw_foldout(self, rect: Rect, expanded: bool, label: str) -> bool:
        imgui = self._imgui
        self._widget_counter += 1
        imgui.set_cursor_screen_pos((rect.x, rect.y))
        clicked = imgui.invisible_button(
            f"##foldout{self._widget_counter}", max(rect.width, 1.0), max(rect.height, 1.0)
        )
        if clicked:
            expanded = not expanded

        surface = self.surface
        ay = rect.y + (rect.height - _ARROW_SIZE) * 0.5
        surface.arrow(rect.x + 2.0, ay, expanded=expanded, color=_LABEL_COLOR)
        ty = rect.y + (rect.height - float(imgui.get_text_line_height())) * 0.5
        surface.text(rect.x + _ARROW_SIZE + 6.0, ty, label, _LABEL_COLOR)
        return expanded

    def set_cursor_hint(self, rect: Rect, hovering: bool) -> None:
        if hovering:
            self._imgui.set_mouse_cursor(self._imgui.MOUSE_CURSOR_RESIZE_EW)

    def _is_gauge(self, field: FieldNode) -> bool:
        value_of = getattr(field, "value", None)
        if not callable(value_of):
            return False
        return is_bounded_variable(value_of())

    def draw_field(self, rect: Rect, field: FieldNode, ctx: InteractionContext) -> None:
        """子行を 1 段インデントして描く。"""

        indented = Rect(rect.x + INDENT_PX, rect.y, max(rect.width - INDENT_PX, 0.0), rect.height)
        self.draw_row(indented, field, field.name, ctx)

    def draw_row(self, rect: Rect, field: FieldNode, label: str, ctx: InteractionContext) -> None:
        """有界変数はゲージ、複合値は折りたたみ、スカラーは `label  value` の 1 行で描く。"""

        if self._is_gauge(field):
            self.drawer_for(field).draw(rect, field, label, ctx)
            return

        metrics = self._metrics
        line = Rect(rect.x, rect.y, rect.width, metrics.line_height)
        children = list(field.visible_children())
        if children:
            label_rect = Rect(line.x, line.y, min(metrics.label_width, line.width), line.height)
            expanded = self.draw_foldout(label_rect, bool(field.expanded), label)
            field.expanded = expanded
            if expanded:
                spacing = float(metrics.vertical_spacing)
                y = line.y_max + spacing
                for child in children:
                    h = self.measure_field(child, child.name)
                    self.draw_field(Rect(rect.x, y, rect.width, h), child, ctx)
                    y += h + spacing
            return

        if not ctx.repaint:
            return
        imgui = self._imgui
        surface = self.surface
        ty = line.y + (line.height - float(imgui.get_text_line_height())) * 0.5
        surface.text(line.x + _ARROW_SIZE + 6.0, ty, label, _LABEL_COLOR)
        surface.text(line.x + metrics.label_width, ty, _leaf_text(field), _VALUE_COLOR)


def _leaf_text(field: FieldNode) -> str:
    kind = field.kind
    if kind == "float":
        return format_gauge_number(field.as_float())
    if kind == "int":
        return str(field.as_int())
    if kind == "long":
        return str(field.as_long())
    value_of = getattr(field, "value", None)
    if callable(value_of):
        return str(value_of())
    return ""


__all__ = ["INDENT_PX", "ImGuiDrawSurface", "ImGuiInspectorHost", "PointerSampler"]
