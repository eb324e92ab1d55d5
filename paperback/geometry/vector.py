"""3Dベクトルと4x4変換行列。

座標系: X が右、Y が上、Z が視点から奥。
点は行ベクトルとして ``p · M`` の形で行列に掛ける。行列の16係数は
列優先 (``m[列 * 4 + 行]``) で保持するため、コード上の並びは転置して見える。
``A.multiply(B)`` を点に適用すると A → B の順に効く。
"""
from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

_IDENTITY = (
    1.0, 0.0, 0.0, 0.0,
    0.0, 1.0, 0.0, 0.0,
    0.0, 0.0, 1.0, 0.0,
    0.0, 0.0, 0.0, 1.0,
)

# これ未満の回転角(度)は単位行列として扱う
_MIN_ROTATION_DEG = 1e-4


@dataclass(frozen=True)
class Vector3:
    """点・方向ベクトル兼用の3要素ベクトル（2D座標にも使う）。"""
    x: float
    y: float
    z: float = 0.0

    @classmethod
    def zero(cls) -> "Vector3":
        return cls(0.0, 0.0, 0.0)

    def dot(self, other: "Vector3") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Vector3") -> "Vector3":
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def cross2(self, a: "Vector3", b: "Vector3") -> "Vector3":
        """self を共通の原点として (a - self) × (b - self) を返す。面法線の計算用。"""
        return a.subtract(self).cross(b.subtract(self))

    def length(self) -> float:
        return math.sqrt(self.dot(self))

    def normalize(self) -> "Vector3":
        """単位ベクトルを返す。長さ0以下ならゼロベクトルを返す（例外にはしない）。"""
        length = self.length()
        if length <= 0:
            return Vector3.zero()
        return Vector3(self.x / length, self.y / length, self.z / length)

    def add(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def subtract(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def scale(self, factor: float) -> "Vector3":
        return Vector3(self.x * factor, self.y * factor, self.z * factor)

    def scale_by(self, other: "Vector3") -> "Vector3":
        """成分ごとの積。"""
        return Vector3(self.x * other.x, self.y * other.y, self.z * other.z)

    def with_y(self, y: float) -> "Vector3":
        return Vector3(self.x, y, self.z)

    def apply(self, matrix: "Matrix4") -> "Vector3":
        """行列を適用し、同次座標 w で割った点を返す。"""
        x, y, z, w = np.array([self.x, self.y, self.z, 1.0]) @ matrix.to_array()
        return Vector3(float(x / w), float(y / w), float(z / w))

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class Matrix4:
    """列優先16係数の4x4変換行列。"""
    m: tuple[float, ...] = _IDENTITY

    def __post_init__(self) -> None:
        if len(self.m) != 16:
            raise ValueError(f"Matrix4 needs 16 coefficients, got {len(self.m)}")
        object.__setattr__(self, "m", tuple(float(v) for v in self.m))

    @classmethod
    def identity(cls) -> "Matrix4":
        return cls(_IDENTITY)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "Matrix4":
        """通常の行・列で並んだ 4x4 配列 ``M[行][列]`` から生成する。"""
        return cls(tuple(np.asarray(array, dtype=float).T.flatten()))

    def to_array(self) -> np.ndarray:
        """``M[行][列]`` の 4x4 配列を返す（``p_row @ M`` で点に適用できる）。"""
        return np.array(self.m, dtype=float).reshape(4, 4).T

    def multiply(self, other: "Matrix4") -> "Matrix4":
        """self の変換を先に、other の変換を後に適用する合成行列を返す。"""
        return Matrix4.from_array(self.to_array() @ other.to_array())

    def is_close(self, other: "Matrix4", tol: float = 1e-9) -> bool:
        return bool(np.allclose(self.m, other.m, atol=tol))


def rotation_matrix(axis_angle: Vector3) -> Matrix4:
    """軸角ベクトルから回転行列を作る。

    ベクトルの長さが回転角(度)、向きが回転軸。角度がほぼ0のときは
    軸の正規化で0除算しないよう単位行列を返す。
    """
    angle = axis_angle.length()
    if abs(angle) < _MIN_ROTATION_DEG:
        return Matrix4.identity()
    axis = axis_angle.scale(1 / angle)
    rad = math.radians(angle)
    c, s = math.cos(rad), math.sin(rad)
    r = 1 - c
    x, y, z = axis.x, axis.y, axis.z
    X, Y, Z = x * r, y * r, z * r
    return Matrix4((
        X * x + c, X * y + z * s, X * z - y * s, 0,
        Y * x - z * s, Y * y + c, Y * z + x * s, 0,
        Z * x + y * s, Z * y - x * s, Z * z + c, 0,
        0, 0, 0, 1,
    ))


def scale_matrix(factors: Vector3) -> Matrix4:
    return Matrix4((
        factors.x, 0, 0, 0,
        0, factors.y, 0, 0,
        0, 0, factors.z, 0,
        0, 0, 0, 1,
    ))


def translation_matrix(offset: Vector3) -> Matrix4:
    return Matrix4((
        1, 0, 0, offset.x,
        0, 1, 0, offset.y,
        0, 0, 1, offset.z,
        0, 0, 0, 1,
    ))
