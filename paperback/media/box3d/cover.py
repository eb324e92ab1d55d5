"""カバー画像の構成解析とテクスチャ領域。

カバー画像は「表紙のみ」「背表紙 + 表紙」「裏表紙 + 背表紙 + 表紙（全面）」の
いずれか。画像サイズと dpi から本の高さ（と必要なら幅・背幅）を求め直す。
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from PIL import Image

from paperback.core.book_config import BookConfig, BookConfigError, CoverSpec
from paperback.geometry.faces import BookFace
from paperback.media.box3d.compositor import SourceRegion, Texture

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CoverLayout:
    """カバー画像内の各面の位置（ピクセル）。"""
    book_width_px: int
    book_height_px: int
    spine_width_px: int
    spine_x: int
    front_x: int
    bleed: int
    has_spine: bool
    has_back: bool

    def region(self, face: BookFace) -> SourceRegion:
        """面に貼るテクスチャ領域を返す。カバーに無い面は FILL テクスチャ全体。"""
        top = self.bleed
        bottom = self.bleed + self.book_height_px
        if face is BookFace.FRONT:
            return SourceRegion(Texture.COVER, (self.front_x, top, self.front_x + self.book_width_px, bottom))
        if face is BookFace.BACK:
            if not self.has_back:
                return SourceRegion(Texture.FILL)
            return SourceRegion(Texture.COVER, (self.bleed, top, self.bleed + self.book_width_px, bottom))
        if face is BookFace.SPINE:
            if not self.has_spine:
                return SourceRegion(Texture.FILL)
            return SourceRegion(Texture.COVER, (self.spine_x, top, self.spine_x + self.spine_width_px, bottom))
        return SourceRegion(Texture.PAGES)

    @property
    def pages_size(self) -> tuple[int, int]:
        return (self.spine_width_px, min(self.book_width_px, self.book_height_px))


def resolve_cover_layout(
    image_size: tuple[int, int],
    cover: CoverSpec,
    config: BookConfig,
) -> tuple[CoverLayout, BookConfig]:
    """(カバー構成, 寸法を画像に合わせた BookConfig) を返す。

    本の高さは常に画像から求める。全面・背表紙付きのカバーでは背幅を、
    表紙のみのカバーでは本の幅を画像から求める。
    """
    width, height = image_size
    bleed = cover.bleed_pixels
    height -= bleed * 2
    width -= bleed * (2 if cover.includes_back else 1)
    if width <= 0 or height <= 0:
        raise BookConfigError(f"cover image {image_size} is smaller than its bleed ({bleed}px)")

    dpi = cover.dpi
    book_width = config.book_width
    spine_width = config.spine_width

    if cover.includes_back:
        book_width_px = round(book_width * dpi)
        spine_width_px = width - book_width_px * 2
        spine_x = bleed + book_width_px
        front_x = spine_x + spine_width_px
    elif cover.includes_spine:
        book_width_px = round(book_width * dpi)
        spine_width_px = width - book_width_px
        spine_x = bleed
        front_x = spine_x + spine_width_px
    else:
        book_width_px = width
        book_width = width / dpi
        spine_width_px = round(spine_width * dpi)
        spine_x = front_x = bleed

    if spine_width_px <= 0:
        raise BookConfigError(
            f"cover image is too narrow for a {config.book_width:g}in book at {dpi:g}dpi "
            f"(spine would be {spine_width_px}px)"
        )
    if cover.includes_spine:
        spine_width = spine_width_px / dpi

    layout = CoverLayout(
        book_width_px=book_width_px,
        book_height_px=height,
        spine_width_px=spine_width_px,
        spine_x=spine_x,
        front_x=front_x,
        bleed=bleed,
        has_spine=cover.includes_spine,
        has_back=cover.includes_back,
    )
    logger.debug("cover layout: %s", layout)
    resolved = config.with_changes(
        book_width=book_width,
        book_height=height / dpi,
        spine_width=spine_width,
    )
    return layout, resolved


def make_fill_texture(cover: "Image.Image", layout: CoverLayout) -> "Image.Image":
    """カバーの背側の端の平均色から、背表紙風のグラデーション画像を作る。"""
    x0 = layout.front_x
    strip = cover.convert("RGB").crop((
        x0, layout.bleed,
        x0 + max(1, layout.book_width_px // 10), layout.bleed + layout.book_height_px,
    ))
    avg = np.asarray(strip, dtype=float).reshape(-1, 3).mean(axis=0)
    dark = avg * 0.45
    light = avg * 0.70

    w = max(1, layout.spine_width_px)
    h = max(1, layout.book_height_px)
    t = np.linspace(0.0, 1.0, w)[:, None]
    row = dark + (light - dark) * t
    pixels = np.broadcast_to(row, (h, w, 3)).astype(np.uint8)
    return Image.fromarray(pixels).convert("RGBA")
