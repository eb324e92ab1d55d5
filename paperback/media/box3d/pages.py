"""ページの小口（天・小口面）に貼るテクスチャの生成。"""
from __future__ import annotations

import numpy as np
from PIL import Image

CREAM_COLORS = ((187, 180, 166), (255, 245, 227))
WHITE_COLORS = ((200, 200, 200), (255, 255, 255))

PAGES_SEED = 48102939
_FIBER_STRENGTH = 64 / 255  # 繊維の濃さ（暗い色側へ寄せる最大量）


def create_pages(size: tuple[int, int], cream: bool = True, seed: int = PAGES_SEED) -> "Image.Image":
    """縦方向の細い繊維が並んだ紙の束のような画像を返す。

    列ごとに乱数で暗さを決め、縦方向に流すことでページの重なりに見せる。
    シード固定なので同じ size からは常に同じ画像になる。
    """
    w, h = max(1, size[0]), max(1, size[1])
    dark, light = (np.array(c, dtype=float) for c in (CREAM_COLORS if cream else WHITE_COLORS))
    rng = np.random.default_rng(seed)

    columns = rng.random(w) ** 3 * _FIBER_STRENGTH * 4
    grain = rng.random((h, w)) * 0.08
    t = np.clip(columns[None, :] + grain, 0.0, 1.0)[..., None]
    pixels = light + (dark - light) * t

    img = Image.fromarray(pixels.astype(np.uint8))
    # 縦方向のモーションブラー相当: 縦だけ縮めて戻す
    smeared = img.resize((w, max(1, h // 20)), Image.BOX).resize((w, h), Image.BILINEAR)
    return smeared.convert("RGBA")
