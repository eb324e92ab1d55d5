"""描画先（レイヤー合成を行う画像エディタ相当）のインターフェース。

レンダラはこのインターフェースを決まった順序で呼び出すだけで、
ピクセル処理そのものは実装側（Pillow なら ``PilCanvas``）が行う。
呼び出しが失敗した場合は例外がそのまま伝わり、レンダリング全体が中断される。
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Sequence


class Texture(Enum):
    COVER = "cover"  # 入力カバー画像
    PAGES = "pages"  # ページの小口テクスチャ
    FILL = "fill"  # カバーに含まれない背表紙・裏表紙の代わり
    SHADOW = "shadow"  # 影用の黒一色


class Sampling(Enum):
    NEAREST = "nearest"
    SMOOTH = "smooth"


class Morphology(Enum):
    GROW = "grow"
    SHRINK = "shrink"


@dataclass(frozen=True)
class SourceRegion:
    """テクスチャ内の矩形 (left, top, right, bottom)。box が None なら全体。"""
    texture: Texture
    box: "tuple[int, int, int, int] | None" = None


class Compositor(Protocol):
    def paint_quad(
        self,
        source: SourceRegion,
        corners: Sequence[tuple[int, int]],
        sampling: Sampling,
    ) -> None:
        """source を新しいレイヤーに貼り、左上・右上・右下・左下の4点へ変形する。"""

    def composite_down(self) -> None:
        """最上位レイヤーを1つ下のレイヤーに統合する。"""

    def apply_levels_clamp(self, max_output: int) -> None:
        """出力レベルを [0, max_output] に制限する調整レイヤーを追加する。"""

    def apply_blur(self, radius: float) -> None: ...

    def apply_morphology(self, op: Morphology, radius: int) -> None: ...

    def set_layer_opacity(self, percent: float) -> None: ...

    def fill_solid(self, color: tuple[int, int, int]) -> None:
        """単色で塗りつぶした新しいレイヤーを追加する。"""
