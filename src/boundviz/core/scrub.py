# どこで: `src/boundviz/core/scrub.py`。
# 何を: ポインタ入力（press/drag/release）をゲージ値の確定へ変換するスクラブ状態機械と、
#       ドラッグ中の排他キャプチャを提供する。
# なぜ: 「ドラッグ中は 1 ウィジェットだけが入力を持つ」規則をホスト共通の 1 オブジェクトに閉じ込め、
#       フレームごとの入力はコンテキストとして明示的に渡すため。

from __future__ import annotations

import enum
import logging
import weakref
from dataclasses import dataclass
from typing import Any, Callable, Literal

from .gauge_values import scrub_value
from .layout import Rect

_logger = logging.getLogger(__name__)

PointerKind = Literal["press", "drag", "release", "move"]

PRIMARY_BUTTON = 0


@dataclass(slots=True)
class PointerEvent:
    """1 リフレッシュ分のポインタイベント。

    `consumed` はどれかのコントロールが処理済みにしたとき True になる。
    """

    kind: PointerKind
    x: float
    y: float
    button: int = PRIMARY_BUTTON
    consumed: bool = False

    def use(self) -> None:
        self.consumed = True


class InputCapture:
    """ドラッグ中の排他所有権（ホスト全体で 1 つ）。

    Notes
    -----
    - 取得は test-and-set（他者が保持中なら失敗する）。
    - 解放は冪等で、保持者以外からの解放は無視する。
    - 所有者は弱参照で持ち、GC された所有者は解放済みとして扱う。
    """

    def __init__(self) -> None:
        self._owner_ref: Callable[[], Any] | None = None

    @property
    def owner(self) -> Any | None:
        ref = self._owner_ref
        if ref is None:
            return None
        owner = ref()
        if owner is None:
            self._owner_ref = None
        return owner

    def is_free(self) -> bool:
        return self.owner is None

    def holds(self, owner: Any) -> bool:
        current = self.owner
        return current is not None and current is owner

    def try_acquire(self, owner: Any) -> bool:
        """未保持なら owner が取得して True。既に owner が保持していても True。"""

        current = self.owner
        if current is not None:
            return current is owner
        self._owner_ref = weakref.ref(owner)
        return True

    def release(self, owner: Any) -> None:
        if self.holds(owner):
            self._owner_ref = None

    def invalidate(self) -> None:
        """保持者に関係なくキャプチャを破棄する。"""

        self._owner_ref = None


@dataclass(slots=True)
class InteractionContext:
    """1 リフレッシュ分の入力コンテキスト。

    `capture` はホストが所有し、サイクルをまたいで共有される。
    `event` はこのサイクルで処理すべきポインタイベント（無ければ None）。
    `pointer` はホバー判定に使う現在のポインタ位置。
    `repaint` が False のサイクルでは描画を行わない。
    """

    capture: InputCapture
    event: PointerEvent | None = None
    pointer: tuple[float, float] | None = None
    repaint: bool = True

    def pointer_position(self) -> tuple[float, float] | None:
        if self.pointer is not None:
            return self.pointer
        if self.event is not None:
            return (self.event.x, self.event.y)
        return None

    def is_hovering(self, rect: Rect) -> bool:
        pos = self.pointer_position()
        return pos is not None and rect.contains(pos[0], pos[1])


class ScrubState(enum.Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


class ScrubController:
    """1 ゲージ分のスクラブ状態機械。

    状態はキャプチャの保持状況から導く（保持中 = DRAGGING）。
    """

    def __init__(self) -> None:
        self._last_value: float | None = None

    def state(self, capture: InputCapture) -> ScrubState:
        return ScrubState.DRAGGING if capture.holds(self) else ScrubState.IDLE

    @property
    def last_value(self) -> float | None:
        """直近に確定した値（未確定なら None）。"""

        return self._last_value

    def handle(
        self,
        ctx: InteractionContext,
        rect: Rect,
        min_value: float,
        max_value: float,
        commit: Callable[[float], Any],
    ) -> bool:
        """ctx.event を処理し、消費したかを返す。

        Parameters
        ----------
        ctx : InteractionContext
            このサイクルの入力コンテキスト。
        rect : Rect
            ゲージの可視バー領域。
        min_value, max_value : float
            値域。
        commit : Callable[[float], Any]
            計算した値を書き込むコールバック（即時反映）。
        """

        evt = ctx.event
        if evt is None or evt.consumed:
            return False

        capture = ctx.capture
        holding = capture.holds(self)

        if evt.kind == "press":
            if holding or evt.button != PRIMARY_BUTTON or not rect.contains(evt.x, evt.y):
                return False
            if not capture.try_acquire(self):
                return False
            self._apply(evt.x, rect, min_value, max_value, commit)
            evt.use()
            return True

        if not holding:
            return False

        if evt.kind == "drag":
            self._apply(evt.x, rect, min_value, max_value, commit)
            evt.use()
            return True

        if evt.kind == "release":
            capture.release(self)
            evt.use()
            return True

        return False

    def cancel(self, ctx: InteractionContext) -> None:
        """保持中のキャプチャを書き込みなしで解放する。"""

        if ctx.capture.holds(self):
            _logger.debug("束縛先が無効になったためドラッグを中断します")
            ctx.capture.release(self)

    def _apply(
        self,
        pointer_x: float,
        rect: Rect,
        min_value: float,
        max_value: float,
        commit: Callable[[float], Any],
    ) -> None:
        value = scrub_value(pointer_x, rect, min_value, max_value)
        commit(value)
        self._last_value = value


__all__ = [
    "PRIMARY_BUTTON",
    "InputCapture",
    "InteractionContext",
    "PointerEvent",
    "PointerKind",
    "ScrubController",
    "ScrubState",
]
