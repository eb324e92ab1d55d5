"""カメラ射影とキャンバスへのフィット。

シーン空間の点をカメラのチルト（X軸回転）で回し、透視除算して2Dにし、
画像座標系（Y下向き）へ反転してから出力キャンバスに収まるよう拡大・配置する。
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from paperback.core.book_config import BookConfig
from paperback.geometry.vector import Vector3, rotation_matrix

logger = logging.getLogger(__name__)

# f + z がこれ以下の点はカメラの焦点面上または背後にある
_MIN_DEPTH = 1e-9


class InvalidCameraGeometryError(ValueError):
    """点がカメラの焦点面上または背後にあり、透視除算できない。"""


@dataclass(frozen=True)
class Bounds:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @classmethod
    def of(cls, points: "list[tuple[float, float]]") -> "Bounds":
        xs = [x for x, _ in points]
        ys = [y for _, y in points]
        return cls(min(xs), min(ys), max(xs), max(ys))


@dataclass(frozen=True)
class CameraProjection:
    points: tuple[tuple[int, int], ...]
    scale: float
    bounds: Bounds  # 拡大前（透視除算・Y反転後）の範囲


def perspective_divide(points: "tuple[Vector3, ...]", config: BookConfig) -> list[tuple[float, float]]:
    """チルト回転と透視除算を行い、Y を反転した2D座標を返す。"""
    camera = rotation_matrix(Vector3(config.x_angle, 0, 0))
    f = config.camera_factor
    flat = []
    for i, p in enumerate(points):
        p = p.apply(camera)
        depth = f + p.z
        if not depth > _MIN_DEPTH or not math.isfinite(depth):
            raise InvalidCameraGeometryError(
                f"invalid camera geometry: point {i} lies at or behind the focal plane "
                f"(f={f:g}, z={p.z:g}); increase z_distance or reduce focal_length"
            )
        p = p.scale(f / depth)
        flat.append((p.x, -p.y))
    return flat


def fit_scale(bounds: Bounds, config: BookConfig) -> float:
    """固定スケール (output_dpi) か、範囲が余白を除いたキャンバスに収まる最大スケール。"""
    if config.output_dpi:
        return config.output_dpi
    avail_w = config.output_width - config.output_border
    avail_h = config.output_height - config.output_border
    candidates = []
    if bounds.width > 0:
        candidates.append(avail_w / bounds.width)
    if bounds.height > 0:
        candidates.append(avail_h / bounds.height)
    if not candidates:
        raise InvalidCameraGeometryError("invalid camera geometry: projection collapses to a point")
    return min(candidates)


def project_points(points: "tuple[Vector3, ...]", config: BookConfig) -> CameraProjection:
    """シーン空間の点を出力キャンバスの整数ピクセル座標へ射影する。

    原点固定 (output_origin) の場合はモデル原点がその位置に来るよう平行移動し、
    そうでなければ範囲をキャンバス中央に置く。隣り合う面の間に隙間が出ないよう
    最後に整数へ丸める。
    """
    flat = perspective_divide(points, config)
    bounds = Bounds.of(flat)
    scale = fit_scale(bounds, config)
    logger.debug(
        "projection bounds %.4f x %.4f, scale %.3f", bounds.width, bounds.height, scale,
    )

    result = []
    for x, y in flat:
        if config.output_origin is not None:
            ox, oy = config.output_origin
            x = x * scale + ox
            y = y * scale + oy
        else:
            x = (x - bounds.min_x - bounds.width / 2) * scale + config.output_width / 2
            y = (y - bounds.min_y - bounds.height / 2) * scale + config.output_height / 2
        result.append((math.floor(x + 0.5), math.floor(y + 0.5)))
    return CameraProjection(points=tuple(result), scale=scale, bounds=bounds)
