"""レンダリング設定（本の寸法・カメラ・ライト・出力キャンバス）。

角度は生成時に (-180, 180] へ正規化される。寸法などの不正値は
``BookConfigError`` で即座に失敗させる。
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace

from paperback.geometry.vector import Vector3


class BookConfigError(ValueError):
    """設定値が不正（寸法が0以下、未知のキーなど）。"""


def normalize_angle(angle: float) -> float:
    """角度(度)を (-180, 180] に正規化する。"""
    angle = angle - 360 * math.floor(angle / 360)
    if angle > 180:
        angle -= 360
    return angle


def _require_positive(name: str, value: float) -> None:
    if not value > 0:
        raise BookConfigError(f"{name} must be positive, got {value!r}")


@dataclass(frozen=True)
class BookConfig:
    """1回のレンダリングに必要な入力一式。寸法はインチ、角度は度。"""
    output_width: int = 3000
    output_height: int = 2500
    output_border: int = 100  # 描画しない外周（影のぼかしは少しはみ出す）
    output_dpi: float = 0.0  # 0: キャンバスに自動フィット / それ以外: 固定スケール
    output_origin: "tuple[float, float] | None" = None  # 射影後の原点を固定するピクセル位置

    book_width: float = 6.0
    book_height: float = 9.0
    spine_width: float = 1.0
    partial_open_angle: float = 2.0  # 表紙・裏表紙をそれぞれ半分ずつ開く

    y_angle: float = 30.0  # 本体のY軸回転（ヨー）
    x_angle: float = 30.0  # カメラのX軸回転（チルト）、通常は0以上
    focal_length: float = 1.5
    z_distance: float = 100.0  # カメラから本の原点までの距離

    ambient_light: float = 0.6
    diffuse_light: float = 0.7
    light_dir: Vector3 = field(default_factory=lambda: Vector3(10, 50, -40))

    def __post_init__(self) -> None:
        _require_positive("output_width", self.output_width)
        _require_positive("output_height", self.output_height)
        if self.output_border < 0:
            raise BookConfigError(f"output_border must not be negative, got {self.output_border!r}")
        if self.output_border >= min(self.output_width, self.output_height):
            raise BookConfigError("output_border leaves no room to draw the book")
        if self.output_dpi < 0:
            raise BookConfigError(f"output_dpi must not be negative, got {self.output_dpi!r}")
        _require_positive("book_width", self.book_width)
        _require_positive("book_height", self.book_height)
        _require_positive("spine_width", self.spine_width)
        _require_positive("focal_length", self.focal_length)
        _require_positive("z_distance", self.z_distance)
        if not isinstance(self.light_dir, Vector3):
            object.__setattr__(self, "light_dir", Vector3(*self.light_dir))
        if self.output_origin is not None:
            object.__setattr__(self, "output_origin", tuple(float(v) for v in self.output_origin))
        object.__setattr__(self, "y_angle", normalize_angle(self.y_angle))
        object.__setattr__(self, "x_angle", normalize_angle(self.x_angle))

    @property
    def camera_factor(self) -> float:
        """透視除算の f（= z_distance / focal_length）。"""
        return self.z_distance / self.focal_length

    def with_changes(self, **changes) -> "BookConfig":
        return replace(self, **changes)


@dataclass(frozen=True)
class CoverSpec:
    """カバー画像の構成。"""
    dpi: float = 300.0
    includes_spine: bool = True
    includes_back: bool = True  # 裏表紙があれば背表紙も必ず含む
    bleed_pixels: int = 0  # 各辺の塗り足し（例: 1/8" = 300dpiで38px）
    cream_pages: bool = True  # False で白いページ

    def __post_init__(self) -> None:
        _require_positive("dpi", self.dpi)
        if self.bleed_pixels < 0:
            raise BookConfigError(f"bleed_pixels must not be negative, got {self.bleed_pixels!r}")
        if self.includes_back and not self.includes_spine:
            object.__setattr__(self, "includes_spine", True)
