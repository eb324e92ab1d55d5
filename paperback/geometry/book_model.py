"""本のシーン空間モデル（8コーナー・面法線・地面への影）。

本の原点は表紙側・下端・背の角。表紙と裏表紙は背の辺を軸に
それぞれ partial_open_angle / 2 だけ開き、そのあと本全体を Y 軸回転（ヨー）で
シーンに配置する。
"""
from __future__ import annotations

from paperback.core.book_config import BookConfig
from paperback.geometry.faces import NORMAL_TRIPLES, BookFace
from paperback.geometry.vector import Matrix4, Vector3, rotation_matrix, translation_matrix

CORNER_COUNT = 8


def hinge_matrices(partial_open_angle: float, spine_width: float) -> tuple[Matrix4, Matrix4]:
    """(表紙のヒンジ, 裏表紙のヒンジ) を返す。裏表紙は回転後に背の厚みだけ奥へ移動する。"""
    half = partial_open_angle / 2
    front_open = rotation_matrix(Vector3(0, -half, 0))
    back_open = rotation_matrix(Vector3(0, half, 0)).multiply(
        translation_matrix(Vector3(0, 0, spine_width))
    )
    return front_open, back_open


def build_corners(config: BookConfig) -> tuple[Vector3, ...]:
    """ヨー回転済みの8コーナー（シーン空間）を返す。番号はビット配置に従う。"""
    w, h, d = config.book_width, config.book_height, config.spine_width
    front_open, back_open = hinge_matrices(config.partial_open_angle, d)
    book_turn = rotation_matrix(Vector3(0, config.y_angle, 0))

    corners = (
        Vector3(0, 0, 0),
        Vector3(w, 0, 0).apply(front_open),
        Vector3(0, h, 0),
        Vector3(w, h, 0).apply(front_open),
        Vector3(0, 0, d),
        Vector3(w, 0, 0).apply(back_open),
        Vector3(0, h, d),
        Vector3(w, h, 0).apply(back_open),
    )
    return tuple(p.apply(book_turn) for p in corners)


def face_normals(corners: "tuple[Vector3, ...]") -> dict[BookFace, Vector3]:
    """各面の外向き法線（正規化前）を返す。"""
    return {
        face: corners[o].cross2(corners[a], corners[b])
        for face, (o, a, b) in NORMAL_TRIPLES.items()
    }


def project_shadow(corner: Vector3, light_dir: Vector3) -> Vector3:
    """光の方向に沿って点を地面 (y=0) に落とす。

    光が水平 (light_dir.y == 0) の場合は高さだけ0にした点を返す。
    """
    if light_dir.y:
        return corner.subtract(light_dir.scale(corner.y / light_dir.y))
    return corner.with_y(0.0)


def cast_shadows(corners: "tuple[Vector3, ...]", light_dir: Vector3) -> tuple[Vector3, ...]:
    return tuple(project_shadow(p, light_dir) for p in corners)


def scene_points(config: BookConfig) -> tuple[tuple[Vector3, ...], dict[BookFace, Vector3]]:
    """(16点 = 8コーナー + 8影, 面法線) をシーン空間で返す。"""
    corners = build_corners(config)
    return corners + cast_shadows(corners, config.light_dir), face_normals(corners)
