"""本の面の識別子と、コーナー番号への対応表。

コーナー番号 0-7 はビットで軸を表す（bit0=幅 X, bit1=高さ Y, bit2=奥行き Z）。
影の点は ``8 + コーナー番号``。
"""
from __future__ import annotations

from enum import Enum


class BookFace(Enum):
    FRONT = "Front cover"
    BACK = "Back cover"
    SPINE = "Spine"
    TOP = "Pages (top)"
    SIDE = "Pages (side)"


SHADOW_OFFSET = 8

# 貼り付け先の四角形: 左上, 右上, 右下, 左下 の順
FACE_QUADS: dict[BookFace, tuple[int, int, int, int]] = {
    BookFace.FRONT: (2, 3, 1, 0),
    BookFace.BACK: (7, 6, 4, 5),
    BookFace.SPINE: (6, 2, 0, 4),
    BookFace.SIDE: (7, 3, 1, 5),  # 反時計回り。TOP と模様が揃うようテクスチャを反転させる
    BookFace.TOP: (7, 3, 2, 6),
}

# 外向き法線を得るための (原点, a, b): normal = (a - 原点) × (b - 原点)
NORMAL_TRIPLES: dict[BookFace, tuple[int, int, int]] = {
    BookFace.FRONT: (0, 2, 1),
    BookFace.BACK: (4, 5, 6),
    BookFace.SPINE: (0, 4, 2),
    BookFace.TOP: (2, 6, 3),
    BookFace.SIDE: (1, 3, 5),
}

# 地面の影として描く面（裏表紙・底・天・背・小口）。
# どの向きの光でも、光から見えない側の面の集合がすべて含まれるので影の輪郭を覆える。
SHADOW_QUADS: tuple[tuple[int, int, int, int], ...] = (
    (4, 5, 7, 6),
    (0, 1, 5, 4),
    (2, 3, 7, 6),
    (0, 2, 6, 4),
    (1, 3, 7, 5),
)


def face_quad(face: BookFace) -> tuple[int, int, int, int]:
    return FACE_QUADS[face]


def shadow_quad(corners: tuple[int, int, int, int]) -> tuple[int, int, int, int]:
    """コーナー番号の四角形を、対応する影の点の番号に置き換える。"""
    return tuple(SHADOW_OFFSET + i for i in corners)


def render_order(y_angle: float, partial_open_angle: float) -> tuple[BookFace, ...]:
    """ヨー角から、見える面を奥から手前の順に返す。

    y_angle は (-180, 180] に正規化済みであること。表紙が少し開いている分
    (partial_open_angle / 2) だけ、真横付近で表紙・裏表紙の見え方が変わる。
    """
    a = y_angle
    p = partial_open_angle / 2
    if a < -90 - p:
        return (BookFace.SIDE, BookFace.TOP, BookFace.BACK)
    if a <= -90 + p:
        return (BookFace.SIDE, BookFace.TOP)
    if a < 0:
        return (BookFace.SIDE, BookFace.TOP, BookFace.FRONT)
    if a == 0:
        return (BookFace.TOP, BookFace.FRONT)
    if a < 90 - p:
        return (BookFace.TOP, BookFace.SPINE, BookFace.FRONT)
    if a < 90 + p:
        return (BookFace.TOP, BookFace.SPINE, BookFace.BACK, BookFace.FRONT)
    if a <= 180 - p:
        return (BookFace.TOP, BookFace.SPINE, BookFace.BACK)
    return (BookFace.SIDE, BookFace.TOP, BookFace.SPINE, BookFace.BACK)
