import pytest
from PIL import Image

from paperback.core.book_config import BookConfig, BookConfigError, CoverSpec
from paperback.geometry.faces import BookFace
from paperback.media.box3d.compositor import SourceRegion, Texture
from paperback.media.box3d.cover import make_fill_texture, resolve_cover_layout


def test_wraparound_cover_layout():
    layout, config = resolve_cover_layout((1300, 900), CoverSpec(dpi=100), BookConfig(book_width=6))
    assert layout.book_width_px == 600
    assert layout.spine_width_px == 100
    assert (layout.spine_x, layout.front_x) == (600, 700)
    assert config.book_height == pytest.approx(9.0)
    assert config.spine_width == pytest.approx(1.0)
    assert layout.region(BookFace.FRONT) == SourceRegion(Texture.COVER, (700, 0, 1300, 900))
    assert layout.region(BookFace.BACK) == SourceRegion(Texture.COVER, (0, 0, 600, 900))
    assert layout.region(BookFace.SPINE) == SourceRegion(Texture.COVER, (600, 0, 700, 900))
    assert layout.region(BookFace.TOP) == SourceRegion(Texture.PAGES)
    assert layout.region(BookFace.SIDE) == SourceRegion(Texture.PAGES)
    assert layout.pages_size == (100, 600)


def test_bleed_is_trimmed():
    layout, config = resolve_cover_layout(
        (1320, 920), CoverSpec(dpi=100, bleed_pixels=10), BookConfig(book_width=6),
    )
    assert layout.book_height_px == 900
    assert (layout.spine_x, layout.front_x) == (610, 710)
    assert layout.region(BookFace.FRONT).box == (710, 10, 1310, 910)
    assert config.book_height == pytest.approx(9.0)


def test_spine_and_front_cover():
    spec = CoverSpec(dpi=100, includes_back=False)
    layout, config = resolve_cover_layout((700, 900), spec, BookConfig(book_width=6))
    assert (layout.spine_x, layout.front_x, layout.spine_width_px) == (0, 100, 100)
    assert layout.region(BookFace.BACK) == SourceRegion(Texture.FILL)
    assert layout.region(BookFace.SPINE).box == (0, 0, 100, 900)


def test_front_only_cover_takes_width_from_image():
    spec = CoverSpec(dpi=100, includes_back=False, includes_spine=False)
    layout, config = resolve_cover_layout((600, 900), spec, BookConfig(book_width=4, spine_width=0.5))
    assert config.book_width == pytest.approx(6.0)
    assert config.spine_width == pytest.approx(0.5)
    assert layout.spine_width_px == 50
    assert layout.front_x == 0
    assert layout.region(BookFace.SPINE) == SourceRegion(Texture.FILL)
    assert layout.region(BookFace.BACK) == SourceRegion(Texture.FILL)


def test_cover_too_narrow_for_book_width():
    with pytest.raises(BookConfigError, match="too narrow"):
        resolve_cover_layout((1100, 900), CoverSpec(dpi=100), BookConfig(book_width=6))


def test_cover_smaller_than_bleed():
    with pytest.raises(BookConfigError):
        resolve_cover_layout((30, 30), CoverSpec(bleed_pixels=20), BookConfig())


def test_fill_texture_is_gradient_of_front_edge_colour():
    cover = Image.new("RGB", (600, 900), (200, 100, 50))
    spec = CoverSpec(dpi=100, includes_back=False, includes_spine=False)
    layout, _ = resolve_cover_layout(cover.size, spec, BookConfig(spine_width=0.5))
    fill = make_fill_texture(cover, layout)
    assert fill.size == (50, 900)
    assert fill.mode == "RGBA"
    assert fill.getpixel((0, 10)) == (90, 45, 22, 255)
    assert fill.getpixel((49, 10)) == (140, 70, 35, 255)
