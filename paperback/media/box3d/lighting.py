"""面ごとのランバート照明。

光源は無限遠の平行光。環境光 + 拡散光 が1を超えても明るさは1で頭打ち
（＝暗くしない）。鏡面反射は扱わない。
"""
from __future__ import annotations

import math

from paperback.geometry.vector import Vector3

FULL_LEVEL = 255


def face_intensity(normal: Vector3, light_dir: Vector3, ambient: float, diffuse: float) -> float:
    """0.0〜1.0 の明るさを返す。"""
    lambert = max(0.0, light_dir.normalize().dot(normal.normalize()))
    return min(1.0, max(0.0, ambient + diffuse * lambert))


def face_level(normal: Vector3, light_dir: Vector3, ambient: float, diffuse: float) -> int:
    """0〜255 の出力レベルを返す。255 なら暗くする必要はない。"""
    intensity = face_intensity(normal, light_dir, ambient, diffuse)
    return int(math.floor(intensity * FULL_LEVEL + 0.5))
