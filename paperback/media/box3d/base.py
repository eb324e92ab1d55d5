"""カバー画像から立てた本の3D画像を生成する。

幾何計算（射影・描画順・照明）は renderer、ピクセル処理は PilCanvas に任せ、
ここではテクスチャの用意と呼び出しの組み立てだけを行う。
"""
from __future__ import annotations

import logging

from PIL import Image

from paperback.core.book_config import BookConfig, CoverSpec
from paperback.core.config_manager import DEFAULT_BACKGROUND, ShadowStyle
from paperback.media.box3d.compositor import Texture
from paperback.media.box3d.cover import make_fill_texture, resolve_cover_layout
from paperback.media.box3d.pages import create_pages
from paperback.media.box3d.pil_canvas import PilCanvas
from paperback.media.box3d.renderer import BookProjection, project_book, render_book

logger = logging.getLogger(__name__)


def prepare_projection(
    cover_size: tuple[int, int],
    config: BookConfig,
    cover: CoverSpec,
):
    """(カバー構成, 射影結果) を返す。寸法はカバー画像に合わせて補正される。"""
    layout, resolved = resolve_cover_layout(cover_size, cover, config)
    return layout, project_book(resolved)


def generate_book_image(
    cover_img: "Image.Image",
    config: "BookConfig | None" = None,
    *,
    cover: "CoverSpec | None" = None,
    shadow: "ShadowStyle | None" = ShadowStyle(),
    background: "tuple[int, int, int] | None" = DEFAULT_BACKGROUND,
    crop: bool = False,
) -> "Image.Image":
    """カバー画像から3Dの本の画像を生成する。

    Args:
        cover_img:   カバー画像（表紙のみ / 背表紙付き / 全面）
        config:      寸法・角度・ライト・出力サイズ（None=既定値）
        cover:       カバー画像の構成（None=既定値: 全面, 300dpi）
        shadow:      影の設定（None=影なし）
        background:  背景色（None=透明）
        crop:        不透明部分の範囲で切り抜くか
    Returns:
        出力キャンバスサイズの RGBA 画像
    """
    config = config or BookConfig()
    cover = cover or CoverSpec()
    cover_rgba = cover_img.convert("RGBA")

    layout, projection = prepare_projection(cover_rgba.size, config, cover)
    logger.debug(
        "cover %dx%d: spine=%s back=%s scale=%.3f",
        *cover_rgba.size, layout.has_spine, layout.has_back, projection.scale,
    )

    textures = {
        Texture.COVER: cover_rgba,
        Texture.PAGES: create_pages(layout.pages_size, cream=cover.cream_pages),
        Texture.SHADOW: Image.new("RGBA", (8, 8), (0, 0, 0, 255)),
    }
    if not (layout.has_back and layout.has_spine):
        textures[Texture.FILL] = make_fill_texture(cover_rgba, layout)

    canvas = PilCanvas((config.output_width, config.output_height), textures)
    render_book(projection, canvas, layout, background=background, shadow=shadow)
    result = canvas.flatten()

    if crop:
        bbox = result.getbbox()
        if bbox:
            result = result.crop(bbox)
    return result


def describe_projection(projection: BookProjection) -> str:
    return ", ".join(
        f"{face.name}={projection.levels[face]}" for face in projection.order
    )
