"""本の3D射影の計算と、Compositor への描画手順。

``project_book`` は設定だけから決まる純粋な計算（同じ設定なら常に同じ結果）。
``render_book`` はその結果を使い、影 → 見える面の順に Compositor を呼び出す。
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from paperback.core.book_config import BookConfig
from paperback.core.config_manager import ShadowStyle
from paperback.geometry.book_model import scene_points
from paperback.geometry.faces import SHADOW_QUADS, BookFace, face_quad, render_order, shadow_quad
from paperback.geometry.projection import project_points
from paperback.geometry.vector import Vector3
from paperback.media.box3d.compositor import Compositor, Morphology, Sampling, SourceRegion, Texture
from paperback.media.box3d.cover import CoverLayout
from paperback.media.box3d.lighting import FULL_LEVEL, face_level

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookProjection:
    """1回分の射影結果。points は 0-7 がコーナー、8-15 がその影。"""
    config: BookConfig
    scene: tuple[Vector3, ...]
    points: tuple[tuple[int, int], ...]
    scale: float
    normals: dict[BookFace, Vector3]
    order: tuple[BookFace, ...]
    levels: dict[BookFace, int]

    def face_corners(self, face: BookFace) -> list[tuple[int, int]]:
        """面を貼る4点（左上・右上・右下・左下）。"""
        return [self.points[i] for i in face_quad(face)]

    def shadow_quads(self) -> list[list[tuple[int, int]]]:
        """影を描く四角形（各点は地面上の影の点）。"""
        return [[self.points[i] for i in shadow_quad(quad)] for quad in SHADOW_QUADS]

    def to_dict(self) -> dict:
        return {
            "points": [list(p) for p in self.points],
            "scale": self.scale,
            "render_order": [face.name for face in self.order],
            "lighting": {face.name: level for face, level in self.levels.items()},
            "normals": {face.name: list(n.to_tuple()) for face, n in self.normals.items()},
        }


def project_book(config: BookConfig) -> BookProjection:
    """コーナー・影の射影、描画順、面ごとの照明レベルを計算する。"""
    scene, normals = scene_points(config)
    camera = project_points(scene, config)
    order = render_order(config.y_angle, config.partial_open_angle)
    levels = {
        face: face_level(normal, config.light_dir, config.ambient_light, config.diffuse_light)
        for face, normal in normals.items()
    }
    logger.debug("render order: %s", ", ".join(face.name for face in order))
    logger.debug("lighting: %s", {face.name: levels[face] for face in order})
    return BookProjection(
        config=config,
        scene=scene,
        points=camera.points,
        scale=camera.scale,
        normals=normals,
        order=order,
        levels=levels,
    )


def render_shadow(projection: BookProjection, canvas: Compositor, style: ShadowStyle) -> None:
    """地面の影を1枚のレイヤーとして描く。"""
    source = SourceRegion(Texture.SHADOW)
    for count, quad in enumerate(projection.shadow_quads()):
        # つなぎ目が出にくいよう最近傍で描く
        canvas.paint_quad(source, quad, Sampling.NEAREST)
        if count:
            canvas.composite_down()

    # 四角形のつなぎ目に残る1pxの隙間を消す
    canvas.apply_morphology(Morphology.GROW, style.grow_radius)
    canvas.apply_morphology(Morphology.SHRINK, style.shrink_radius)
    canvas.apply_blur(style.blur_radius)
    canvas.set_layer_opacity(style.opacity_for(projection.config.ambient_light))


def render_face(
    projection: BookProjection,
    face: BookFace,
    canvas: Compositor,
    source: SourceRegion,
) -> None:
    """1つの面を貼り、必要なら照明に応じて暗くする。"""
    corners = projection.face_corners(face)
    # 1回目は最近傍で隙間を埋め、2回目をバイキュービックで重ねる
    canvas.paint_quad(source, corners, Sampling.NEAREST)
    canvas.paint_quad(source, corners, Sampling.SMOOTH)
    canvas.composite_down()

    level = projection.levels[face]
    if level < FULL_LEVEL:
        canvas.apply_levels_clamp(level)
        canvas.composite_down()


def render_book(
    projection: BookProjection,
    canvas: Compositor,
    layout: CoverLayout,
    *,
    background: "tuple[int, int, int] | None" = None,
    shadow: "ShadowStyle | None" = ShadowStyle(),
) -> None:
    """背景 → 影 → 見える面（奥から手前）の順に描画する。"""
    if background is not None:
        canvas.fill_solid(background)
    if shadow is not None:
        render_shadow(projection, canvas, shadow)
    for face in projection.order:
        render_face(projection, face, canvas, layout.region(face))
