import pytest

from paperback.core.book_config import BookConfig, CoverSpec
from paperback.core.config_manager import ShadowStyle
from paperback.geometry.faces import BookFace
from paperback.media.box3d.compositor import Morphology, Sampling, SourceRegion, Texture
from paperback.media.box3d.cover import resolve_cover_layout
from paperback.media.box3d.renderer import project_book, render_book


class RecordingCompositor:
    def __init__(self):
        self.calls = []

    def paint_quad(self, source, corners, sampling):
        self.calls.append(("paint_quad", source, list(corners), sampling))

    def composite_down(self):
        self.calls.append(("composite_down",))

    def apply_levels_clamp(self, max_output):
        self.calls.append(("apply_levels_clamp", max_output))

    def apply_blur(self, radius):
        self.calls.append(("apply_blur", radius))

    def apply_morphology(self, op, radius):
        self.calls.append(("apply_morphology", op, radius))

    def set_layer_opacity(self, percent):
        self.calls.append(("set_layer_opacity", percent))

    def fill_solid(self, color):
        self.calls.append(("fill_solid", color))

    def names(self):
        return [call[0] for call in self.calls]


class FailingCompositor(RecordingCompositor):
    def composite_down(self):
        raise RuntimeError("merge failed")


@pytest.fixture
def layout():
    layout, _ = resolve_cover_layout((1300, 900), CoverSpec(dpi=100), BookConfig())
    return layout


def _face_calls(projection, face, source, level):
    corners = projection.face_corners(face)
    calls = [
        ("paint_quad", source, corners, Sampling.NEAREST),
        ("paint_quad", source, corners, Sampling.SMOOTH),
        ("composite_down",),
    ]
    if level < 255:
        calls += [("apply_levels_clamp", level), ("composite_down",)]
    return calls


def test_project_book_summary():
    projection = project_book(BookConfig())
    assert len(projection.points) == 16
    assert projection.order == (BookFace.TOP, BookFace.SPINE, BookFace.FRONT)
    assert set(projection.levels) == set(BookFace)
    assert projection.scale > 0
    data = projection.to_dict()
    assert data["render_order"] == ["TOP", "SPINE", "FRONT"]
    assert len(data["points"]) == 16


def test_project_book_is_deterministic():
    config = BookConfig(y_angle=-120, x_angle=10)
    assert project_book(config) == project_book(config)


def test_full_render_sequence(layout):
    projection = project_book(BookConfig())
    canvas = RecordingCompositor()
    render_book(projection, canvas, layout, background=(128, 128, 128), shadow=ShadowStyle())

    shadow = SourceRegion(Texture.SHADOW)
    quads = projection.shadow_quads()
    expected = [("fill_solid", (128, 128, 128))]
    for i, quad in enumerate(quads):
        expected.append(("paint_quad", shadow, quad, Sampling.NEAREST))
        if i:
            expected.append(("composite_down",))
    expected += [
        ("apply_morphology", Morphology.GROW, 1),
        ("apply_morphology", Morphology.SHRINK, 1),
        ("apply_blur", 20.0),
        ("set_layer_opacity", pytest.approx(20.0)),
    ]
    for face in projection.order:
        expected += _face_calls(projection, face, layout.region(face), projection.levels[face])

    assert canvas.calls == expected


def test_shadow_uses_ground_points(layout):
    projection = project_book(BookConfig())
    canvas = RecordingCompositor()
    render_book(projection, canvas, layout)
    painted = [call[2] for call in canvas.calls if call[0] == "paint_quad" and call[1].texture is Texture.SHADOW]
    assert len(painted) == 5
    ground = set(projection.points[8:])
    for quad in painted:
        assert set(quad) <= ground


def test_no_background_and_no_shadow(layout):
    projection = project_book(BookConfig(y_angle=0))
    canvas = RecordingCompositor()
    render_book(projection, canvas, layout, background=None, shadow=None)
    assert "fill_solid" not in canvas.names()
    assert "apply_blur" not in canvas.names()
    painted = [call[1] for call in canvas.calls if call[0] == "paint_quad"]
    assert painted == [
        SourceRegion(Texture.PAGES), SourceRegion(Texture.PAGES),
        layout.region(BookFace.FRONT), layout.region(BookFace.FRONT),
    ]


def test_fully_lit_faces_skip_levels(layout):
    projection = project_book(BookConfig(ambient_light=1.0))
    canvas = RecordingCompositor()
    render_book(projection, canvas, layout, shadow=None)
    assert "apply_levels_clamp" not in canvas.names()


def test_unlit_faces_are_clamped_to_black(layout):
    projection = project_book(BookConfig(ambient_light=0.0, diffuse_light=0.0))
    canvas = RecordingCompositor()
    render_book(projection, canvas, layout, shadow=None)
    clamps = [call for call in canvas.calls if call[0] == "apply_levels_clamp"]
    assert clamps == [("apply_levels_clamp", 0)] * len(projection.order)


def test_compositor_failure_aborts_render(layout):
    projection = project_book(BookConfig())
    canvas = FailingCompositor()
    with pytest.raises(RuntimeError, match="merge failed"):
        render_book(projection, canvas, layout, shadow=None)
    assert canvas.names() == ["paint_quad", "paint_quad"]
