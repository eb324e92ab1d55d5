from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import tkinter as tk

from paperback.core.book_config import BookConfig, BookConfigError, CoverSpec
from paperback.geometry.vector import Vector3

CONFIG_PATH       = Path(__file__).parent.parent.parent / "config.json"
WINDOW_STATE_PATH = Path(__file__).parent.parent.parent / "window_state.json"

DEFAULT_GEOMETRY = "760x680"

DEFAULT_BACKGROUND = (128, 128, 128)

IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp", ".tga", ".tif", ".tiff"}


@dataclass(frozen=True)
class ShadowStyle:
    """影のシーム除去（膨張→収縮→ぼかし）と不透明度の定数。

    四角形ワープのつなぎ目に出る1pxの隙間を消すための経験的な値。
    """
    grow_radius: int = 1
    shrink_radius: int = 1
    blur_radius: float = 20.0
    opacity_factor: float = 50.0  # 不透明度(%) = (1 - ambient) * opacity_factor

    def opacity_for(self, ambient_light: float) -> float:
        return min(100.0, max(0.0, (1 - ambient_light) * self.opacity_factor))


@dataclass(frozen=True)
class RenderSettings:
    book: BookConfig
    cover: CoverSpec
    shadow: ShadowStyle
    background: "tuple[int, int, int] | None"


def load_config(path: "Path | None" = None) -> dict:
    with open(path or CONFIG_PATH, encoding="utf-8") as f:
        return json.load(f)


def _build(cls, section: str, data: dict):
    """dict の各キーを dataclass のフィールドとして渡す。未知のキーはエラー。"""
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise BookConfigError(f"unknown key(s) in [{section}]: {', '.join(unknown)}")
    try:
        return cls(**data)
    except TypeError as e:
        raise BookConfigError(f"invalid [{section}] settings: {e}") from e


def _components(value, count: int, name: str, convert) -> tuple:
    """[x, y, ...] 形式の値を検査して変換する。"""
    if isinstance(value, (str, bytes)) or not hasattr(value, "__len__") or len(value) != count:
        raise BookConfigError(f"{name} needs {count} components, got {value!r}")
    try:
        return tuple(convert(v) for v in value)
    except (TypeError, ValueError, OverflowError) as e:
        raise BookConfigError(f"invalid {name}: {value!r} ({e})") from e


def book_config_from_dict(data: dict) -> BookConfig:
    data = dict(data)
    if "light_dir" in data:
        data["light_dir"] = Vector3(*_components(data["light_dir"], 3, "light_dir", float))
    if data.get("output_origin") is not None:
        data["output_origin"] = _components(data["output_origin"], 2, "output_origin", float)
    return _build(BookConfig, "book", data)


def settings_from_config(config: dict) -> RenderSettings:
    """config.json の内容を RenderSettings に変換する。欠けたセクションは既定値。"""
    unknown = sorted(set(config) - {"book", "cover", "shadow", "background"})
    if unknown:
        raise BookConfigError(f"unknown section(s) in config: {', '.join(unknown)}")

    if "background" in config:
        bg = config["background"]
        if bg is not None:
            bg = _components(bg, 3, "background", int)
            if not all(0 <= v <= 255 for v in bg):
                raise BookConfigError(f"background components must be 0..255, got {config['background']!r}")
    else:
        bg = DEFAULT_BACKGROUND

    return RenderSettings(
        book=book_config_from_dict(config.get("book", {})),
        cover=_build(CoverSpec, "cover", config.get("cover", {})),
        shadow=_build(ShadowStyle, "shadow", config.get("shadow", {})),
        background=bg,
    )


def load_settings(path: "Path | None" = None) -> RenderSettings:
    """設定ファイルを読み込む。ファイルが無い場合はすべて既定値。"""
    try:
        config = load_config(path)
    except FileNotFoundError:
        if path is not None:
            raise
        config = {}
    return settings_from_config(config)


def load_window_state() -> str:
    try:
        with open(WINDOW_STATE_PATH, encoding="utf-8") as f:
            return json.load(f).get("geometry", DEFAULT_GEOMETRY)
    except FileNotFoundError:
        return DEFAULT_GEOMETRY


def save_window_state(root: tk.Misc) -> None:
    with open(WINDOW_STATE_PATH, "w", encoding="utf-8") as f:
        json.dump({"geometry": root.geometry()}, f, indent=2)
