"""Pillow によるレイヤー合成（Compositor の実装）。

レイヤーは下から上への RGBA 画像のスタック。レベル補正は調整レイヤーとして
積み、下のレイヤーへ統合したときに焼き込む。
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from PIL import Image, ImageChops, ImageDraw, ImageFilter

from paperback.media.box3d.compositor import Morphology, Sampling, SourceRegion, Texture

logger = logging.getLogger(__name__)

_RESAMPLE = {
    Sampling.NEAREST: Image.NEAREST,
    Sampling.SMOOTH: Image.BICUBIC,
}


class CanvasError(RuntimeError):
    """レイヤー操作の対象がない、テクスチャが未登録など。"""


def find_perspective_coeffs(
    src_points: list[tuple[float, float]],
    dst_points: list[tuple[float, float]],
) -> list[float]:
    """入力画像の4点(src)を出力画像の4点(dst)にマッピングする
    Pillow Image.transform(PERSPECTIVE) 用の8係数を返す。
    """
    A = []
    B = []
    for (sx, sy), (dx, dy) in zip(src_points, dst_points):
        A.append([dx, dy, 1, 0, 0, 0, -sx * dx, -sx * dy])
        A.append([0, 0, 0, dx, dy, 1, -sy * dx, -sy * dy])
        B.append(sx)
        B.append(sy)
    res = np.linalg.lstsq(np.array(A, dtype=float), np.array(B, dtype=float), rcond=None)[0]
    return list(res)


def quad_area(corners: Sequence[tuple[float, float]]) -> float:
    """四角形の面積（靴ひも公式、向きは無視）。"""
    total = 0.0
    for i, (x0, y0) in enumerate(corners):
        x1, y1 = corners[(i + 1) % len(corners)]
        total += x0 * y1 - x1 * y0
    return abs(total) / 2


def clamp_levels(img: "Image.Image", max_output: int) -> "Image.Image":
    """RGB の出力レベルを [0, max_output] に縮める。アルファはそのまま。"""
    r, g, b, a = img.convert("RGBA").split()
    factor = max_output / 255
    r, g, b = (band.point(lambda v: int(v * factor + 0.5)) for band in (r, g, b))
    return Image.merge("RGBA", (r, g, b, a))


def with_opacity(img: "Image.Image", opacity: float) -> "Image.Image":
    if opacity >= 1.0:
        return img
    out = img.copy()
    out.putalpha(img.getchannel("A").point(lambda v: int(v * opacity + 0.5)))
    return out


@dataclass
class Layer:
    image: "Image.Image | None"  # None は調整レイヤー
    opacity: float = 1.0
    levels_max: int = 255

    @property
    def is_adjustment(self) -> bool:
        return self.image is None


class PilCanvas:
    """出力キャンバス。textures には Texture ごとの RGBA 画像を渡す。"""

    def __init__(self, size: tuple[int, int], textures: "dict[Texture, Image.Image]") -> None:
        self.size = size
        self.textures = {k: v.convert("RGBA") for k, v in textures.items()}
        self.layers: list[Layer] = []

    def _top(self, action: str) -> Layer:
        if not self.layers:
            raise CanvasError(f"no layer to {action}")
        return self.layers[-1]

    def _top_image(self, action: str) -> Layer:
        layer = self._top(action)
        if layer.is_adjustment:
            raise CanvasError(f"cannot {action} an adjustment layer")
        return layer

    def _source(self, source: SourceRegion) -> "Image.Image":
        try:
            img = self.textures[source.texture]
        except KeyError:
            raise CanvasError(f"texture {source.texture.value!r} is not loaded") from None
        return img.crop(source.box) if source.box else img

    def paint_quad(
        self,
        source: SourceRegion,
        corners: Sequence[tuple[int, int]],
        sampling: Sampling,
    ) -> None:
        src = self._source(source)
        dst = [tuple(c) for c in corners]
        if quad_area(dst) < 1.0:
            # 真横から見た面は潰れて係数が求まらないので、空のレイヤーだけ積む
            logger.debug("skipping degenerate quad %s", dst)
            self.layers.append(Layer(Image.new("RGBA", self.size, (0, 0, 0, 0))))
            return

        w, h = src.size
        src_points = [(0, 0), (w, 0), (w, h), (0, h)]
        coeffs = find_perspective_coeffs(src_points, dst)
        warped = src.transform(self.size, Image.PERSPECTIVE, coeffs, _RESAMPLE[sampling])

        # 四角形の外に出た画素は捨てる
        mask = Image.new("L", self.size, 0)
        ImageDraw.Draw(mask).polygon(dst, fill=255)
        warped.putalpha(ImageChops.multiply(warped.getchannel("A"), mask))
        self.layers.append(Layer(warped))

    def composite_down(self) -> None:
        if len(self.layers) < 2:
            raise CanvasError("no layer below to merge into")
        top = self.layers.pop()
        below = self.layers[-1]
        if below.is_adjustment:
            raise CanvasError("cannot merge into an adjustment layer")
        if top.is_adjustment:
            below.image = clamp_levels(below.image, top.levels_max)
        else:
            below.image = Image.alpha_composite(below.image, with_opacity(top.image, top.opacity))

    def apply_levels_clamp(self, max_output: int) -> None:
        self.layers.append(Layer(None, levels_max=max(0, min(255, int(max_output)))))

    def apply_blur(self, radius: float) -> None:
        layer = self._top_image("blur")
        layer.image = layer.image.filter(ImageFilter.GaussianBlur(radius=radius))

    def apply_morphology(self, op: Morphology, radius: int) -> None:
        layer = self._top_image(op.value)
        if radius <= 0:
            return
        size = radius * 2 + 1
        filt = ImageFilter.MaxFilter(size) if op is Morphology.GROW else ImageFilter.MinFilter(size)
        layer.image = Image.merge("RGBA", [band.filter(filt) for band in layer.image.split()])

    def set_layer_opacity(self, percent: float) -> None:
        self._top("set opacity of").opacity = max(0.0, min(100.0, percent)) / 100

    def fill_solid(self, color: tuple[int, int, int]) -> None:
        self.layers.append(Layer(Image.new("RGBA", self.size, (*color, 255))))

    def flatten(self) -> "Image.Image":
        """全レイヤーを下から合成した画像を返す。調整レイヤーはそれより下全体に効く。"""
        result = Image.new("RGBA", self.size, (0, 0, 0, 0))
        for layer in self.layers:
            if layer.is_adjustment:
                result = clamp_levels(result, layer.levels_max)
            else:
                result = Image.alpha_composite(result, with_opacity(layer.image, layer.opacity))
        logger.debug("flattened %d layer(s)", len(self.layers))
        return result
