# どこで: `src/boundviz/core/gauge_config.py`。
# 何を: config.yaml によるゲージ表示設定（探索・ロード・キャッシュ）と既定値を提供する。
# なぜ: サイズ/色/グラデーション上書きをユーザーが差し替えられるようにしつつ、
#       設定が無い/壊れている環境でも組み込み定数で描画を続けられるようにするため。

from __future__ import annotations

import os
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any

from .color import RGBA, ColorRamp, as_rgba, default_color_ramp


@dataclass(frozen=True, slots=True)
class GradientOverride:
    """フィールド名の部分文字列 `key` に対応付けたカラーランプ。"""

    key: str
    ramp: ColorRamp


@dataclass(frozen=True, slots=True)
class GaugeConfig:
    """ゲージ 1 本の描画に使う設定スナップショット。

    Notes
    -----
    `default_gradient` は生成時点で必ず埋まる（未指定なら青系 2 キー）。
    `overrides` はリスト順に評価される（先勝ち）。
    """

    height: float = 18.0
    padding: float = 2.0
    rounding: float = 3.0
    allow_scrubbing: bool = True
    show_text: bool = True
    text_color: RGBA = (1.0, 1.0, 1.0, 1.0)
    gutter_color: RGBA = (0.1, 0.1, 0.1, 1.0)
    border_color: RGBA = (0.0, 0.0, 0.0, 0.5)
    default_gradient: ColorRamp = field(default_factory=default_color_ramp)
    overrides: tuple[GradientOverride, ...] = ()


@dataclass(frozen=True, slots=True)
class InspectorConfig:
    """インスペクタ（ホスト側）のレイアウト定数。"""

    label_width: float = 140.0
    vertical_spacing: float = 2.0
    line_height: float = 18.0
    window_size: tuple[int, int] = (520, 640)


DEFAULT_GAUGE_CONFIG = GaugeConfig()
DEFAULT_INSPECTOR_CONFIG = InspectorConfig()

_EXPLICIT_CONFIG_PATH: Path | None = None
_CONFIG_CACHE: tuple[GaugeConfig, InspectorConfig, Path | None] | None = None
_CONFIG_ERROR: Exception | None = None


def set_config_path(path: str | Path | None) -> None:
    """以降の設定探索で使う明示 config パスを設定する。

    Notes
    -----
    `path` を None にすると明示指定を解除し、既定の探索に戻る。
    """

    global _EXPLICIT_CONFIG_PATH, _CONFIG_CACHE, _CONFIG_ERROR
    _EXPLICIT_CONFIG_PATH = None if path is None else Path(str(path)).expanduser()
    _CONFIG_CACHE = None
    _CONFIG_ERROR = None


def _default_config_candidates() -> tuple[Path, ...]:
    cwd = Path.cwd()
    home = Path.home()
    return (
        cwd / ".boundviz" / "config.yaml",
        home / ".config" / "boundviz" / "config.yaml",
    )


def _as_mapping(value: Any, *, key: str) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, dict):
        return dict(value)
    raise RuntimeError(f"{key} は mapping である必要があります: got={value!r}")


def _as_float(value: Any, *, key: str, default: float) -> float:
    if value is None:
        return float(default)
    if isinstance(value, bool):
        raise RuntimeError(f"{key} は数値である必要があります: got={value!r}")
    try:
        return float(value)
    except Exception as exc:
        raise RuntimeError(f"{key} は数値である必要があります: got={value!r}") from exc


def _as_bool(value: Any, *, key: str, default: bool) -> bool:
    if value is None:
        return bool(default)
    if isinstance(value, bool):
        return value
    raise RuntimeError(f"{key} は真偽値である必要があります: got={value!r}")


def _as_color(value: Any, *, key: str, default: RGBA) -> RGBA:
    if value is None:
        return default
    try:
        return as_rgba(value, key=key)
    except ValueError as exc:
        raise RuntimeError(str(exc)) from exc


def _as_int_pair(value: Any, *, key: str, default: tuple[int, int]) -> tuple[int, int]:
    if value is None:
        return default
    try:
        seq = list(value)
        if len(seq) != 2:
            raise ValueError(len(seq))
        return (int(seq[0]), int(seq[1]))
    except Exception as exc:
        raise RuntimeError(f"{key} は [w, h] の整数配列である必要があります: got={value!r}") from exc


def _as_ramp(value: Any, *, key: str) -> ColorRamp | None:
    """`[{pos, color}, ...]` をカラーランプへ変換する。空なら None。"""

    if value is None:
        return None
    if not isinstance(value, list):
        raise RuntimeError(f"{key} はキーの配列である必要があります: got={value!r}")
    if not value:
        return None

    stops: list[tuple[float, RGBA]] = []
    for i, item in enumerate(value):
        item_key = f"{key}[{i}]"
        stop = _as_mapping(item, key=item_key)
        pos = _as_float(stop.get("pos"), key=f"{item_key}.pos", default=0.0)
        if "color" not in stop:
            raise RuntimeError(f"{item_key}.color が未設定です")
        color = _as_color(stop.get("color"), key=f"{item_key}.color", default=(1.0, 1.0, 1.0, 1.0))
        stops.append((pos, color))
    return ColorRamp.from_stops(stops)


def _as_overrides(value: Any, *, key: str) -> tuple[GradientOverride, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise RuntimeError(f"{key} は配列である必要があります: got={value!r}")

    out: list[GradientOverride] = []
    for i, item in enumerate(value):
        item_key = f"{key}[{i}]"
        entry = _as_mapping(item, key=item_key)
        name = entry.get("key")
        if not isinstance(name, str) or not name:
            raise RuntimeError(f"{item_key}.key は空でない文字列である必要があります: got={name!r}")
        ramp = _as_ramp(entry.get("gradient"), key=f"{item_key}.gradient")
        if ramp is None:
            # ランプ無しの上書きは一致しても既定ランプへ落ちるため、登録しない。
            continue
        out.append(GradientOverride(key=name, ramp=ramp))
    return tuple(out)


def gauge_config_from_mapping(payload: dict[str, Any]) -> GaugeConfig:
    """`gauge:` セクションの mapping から GaugeConfig を作る。未指定キーは既定値。"""

    d = DEFAULT_GAUGE_CONFIG
    colors = _as_mapping(payload.get("colors"), key="gauge.colors")

    height = _as_float(payload.get("height"), key="gauge.height", default=d.height)
    if height <= 0:
        raise ValueError(f"gauge.height は正の値である必要があります: got={height}")
    padding = _as_float(payload.get("padding"), key="gauge.padding", default=d.padding)
    if padding < 0:
        raise ValueError(f"gauge.padding は 0 以上である必要があります: got={padding}")

    default_gradient = _as_ramp(payload.get("default_gradient"), key="gauge.default_gradient")

    return GaugeConfig(
        height=height,
        padding=padding,
        rounding=_as_float(payload.get("rounding"), key="gauge.rounding", default=d.rounding),
        allow_scrubbing=_as_bool(
            payload.get("allow_scrubbing"), key="gauge.allow_scrubbing", default=d.allow_scrubbing
        ),
        show_text=_as_bool(payload.get("show_text"), key="gauge.show_text", default=d.show_text),
        text_color=_as_color(colors.get("text"), key="gauge.colors.text", default=d.text_color),
        gutter_color=_as_color(
            colors.get("gutter"), key="gauge.colors.gutter", default=d.gutter_color
        ),
        border_color=_as_color(
            colors.get("border"), key="gauge.colors.border", default=d.border_color
        ),
        default_gradient=default_gradient if default_gradient is not None else default_color_ramp(),
        overrides=_as_overrides(payload.get("overrides"), key="gauge.overrides"),
    )


def inspector_config_from_mapping(payload: dict[str, Any]) -> InspectorConfig:
    """`inspector:` セクションの mapping から InspectorConfig を作る。"""

    d = DEFAULT_INSPECTOR_CONFIG
    return InspectorConfig(
        label_width=_as_float(
            payload.get("label_width"), key="inspector.label_width", default=d.label_width
        ),
        vertical_spacing=_as_float(
            payload.get("vertical_spacing"),
            key="inspector.vertical_spacing",
            default=d.vertical_spacing,
        ),
        line_height=_as_float(
            payload.get("line_height"), key="inspector.line_height", default=d.line_height
        ),
        window_size=_as_int_pair(
            payload.get("window_size"), key="inspector.window_size", default=d.window_size
        ),
    )


def _load_yaml_text(text: str, *, source: str) -> dict[str, Any]:
    try:
        import yaml  # type: ignore[import-untyped]
    except Exception as exc:  # pragma: no cover
        raise RuntimeError(f"PyYAML を import できません: {exc}") from exc

    try:
        data = yaml.safe_load(text)
    except Exception as exc:
        raise RuntimeError(f"config.yaml の読み込みに失敗しました: source={source}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RuntimeError(f"config.yaml は mapping である必要があります: source={source}")
    return dict(data)


def _load_yaml_config(path: Path) -> dict[str, Any]:
    return _load_yaml_text(path.read_text(encoding="utf-8"), source=str(path))


def _load_packaged_default_config() -> dict[str, Any]:
    """同梱デフォルト config をロードして dict を返す。"""

    try:
        blob = (
            resources.files("boundviz")
            .joinpath("resource", "default_config.yaml")
            .read_text(encoding="utf-8")
        )
    except Exception as exc:  # pragma: no cover
        raise RuntimeError(
            "同梱 default_config.yaml の読み込みに失敗しました"
            "（パッケージ配布物の package-data を確認してください）"
        ) from exc
    return _load_yaml_text(blob, source="boundviz/resource/default_config.yaml")


def _merge_sections(base: dict[str, Any], extra: dict[str, Any]) -> dict[str, Any]:
    """トップレベルのセクション単位で 1 段だけマージする（後勝ち）。"""

    out = dict(base)
    for k, v in extra.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            merged = dict(out[k])
            merged.update(v)
            out[k] = merged
        else:
            out[k] = v
    return out


def _load_all() -> tuple[GaugeConfig, InspectorConfig, Path | None]:
    """設定をロードしてキャッシュする。失敗も記録し、set_config_path() まで再読込しない。"""

    global _CONFIG_CACHE, _CONFIG_ERROR
    if _CONFIG_CACHE is not None:
        return _CONFIG_CACHE
    if _CONFIG_ERROR is not None:
        raise RuntimeError(
            "config.yaml のロードは失敗済みです（set_config_path() で再試行できます）"
        ) from _CONFIG_ERROR

    try:
        _CONFIG_CACHE = _load_uncached()
    except Exception as exc:
        _CONFIG_ERROR = exc
        raise
    return _CONFIG_CACHE


def _load_uncached() -> tuple[GaugeConfig, InspectorConfig, Path | None]:
    explicit_path = _EXPLICIT_CONFIG_PATH
    if explicit_path is not None and not explicit_path.is_file():
        raise FileNotFoundError(f"config.yaml が見つかりません: {explicit_path}")

    discovered_path: Path | None = None
    for p in _default_config_candidates():
        if p.is_file():
            discovered_path = p
            break

    payload = _load_packaged_default_config()
    if discovered_path is not None:
        payload = _merge_sections(payload, _load_yaml_config(discovered_path))
    if explicit_path is not None:
        payload = _merge_sections(payload, _load_yaml_config(explicit_path))

    version = payload.get("version")
    try:
        version_i = int(version)  # type: ignore[arg-type]
    except Exception as exc:
        raise RuntimeError(f"config.yaml の version は整数である必要があります: got={version!r}") from exc
    if version_i != 1:
        raise RuntimeError(f"未対応の config.yaml version です: got={version_i}")

    gauge = gauge_config_from_mapping(_as_mapping(payload.get("gauge"), key="gauge"))
    inspector = inspector_config_from_mapping(
        _as_mapping(payload.get("inspector"), key="inspector")
    )
    return (gauge, inspector, explicit_path or discovered_path)


def gauge_config() -> GaugeConfig:
    """ゲージ設定をロードして返す（キャッシュ）。

    上書き順（後勝ち）:
    1) 同梱 default_config.yaml
    2) `./.boundviz/config.yaml` / `~/.config/boundviz/config.yaml`
    3) `set_config_path()` で指定したパス
    """

    return _load_all()[0]


def inspector_config() -> InspectorConfig:
    """インスペクタ設定をロードして返す（キャッシュ）。"""

    return _load_all()[1]


def loaded_config_path() -> Path | None:
    """実際に読み込まれたユーザー config のパス（無ければ None）を返す。"""

    return _load_all()[2]


def _expand_path_text(text: str) -> str:
    return os.path.expandvars(os.path.expanduser(str(text)))


def config_path_from_env(var: str = "BOUNDVIZ_CONFIG") -> Path | None:
    """環境変数に書かれた config パスを返す（未設定/空なら None）。"""

    raw = os.environ.get(var, "").strip()
    if not raw:
        return None
    return Path(_expand_path_text(raw))


__all__ = [
    "DEFAULT_GAUGE_CONFIG",
    "DEFAULT_INSPECTOR_CONFIG",
    "GaugeConfig",
    "GradientOverride",
    "InspectorConfig",
    "config_path_from_env",
    "gauge_config",
    "gauge_config_from_mapping",
    "inspector_config",
    "inspector_config_from_mapping",
    "loaded_config_path",
    "set_config_path",
]
