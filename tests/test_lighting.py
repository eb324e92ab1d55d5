import itertools

import pytest

from paperback.geometry.vector import Vector3
from paperback.media.box3d.lighting import face_intensity, face_level

LIGHT = Vector3(10, 50, -40)


def test_face_toward_light_is_not_darkened():
    assert face_level(LIGHT.scale(3), LIGHT, 0.6, 0.7) == 255


def test_face_away_from_light_gets_ambient_only():
    assert face_level(LIGHT.scale(-1), LIGHT, 0.6, 0.7) == 153


def test_perpendicular_face_rounds_half_up():
    normal = Vector3(0, 0, 1)
    light = Vector3(0, 1, 0)
    assert face_intensity(normal, light, 0.5, 0.5) == pytest.approx(0.5)
    assert face_level(normal, light, 0.5, 0.5) == 128


def test_zero_normal_gets_ambient_only():
    assert face_intensity(Vector3(0, 0, 0), LIGHT, 0.3, 0.9) == pytest.approx(0.3)


def test_no_light_gives_black():
    assert face_level(Vector3(0, 1, 0), LIGHT, 0.0, 0.0) == 0


def test_full_level_when_lighting_reaches_one():
    # ambient + diffuse * dot >= 1
    assert face_level(Vector3(0, 1, 0), Vector3(0, 1, 0), 0.4, 0.6) == 255
    assert face_level(Vector3(0, 1, 0), Vector3(0, 1, 0), 0.2, 0.6) < 255


@pytest.mark.parametrize("ambient, diffuse", [(0.0, 0.5), (0.6, 0.7), (1.2, 0.3), (-0.5, 0.2)])
def test_levels_are_integers_in_range(ambient, diffuse):
    for x, y, z in itertools.product((-1, 0, 2), repeat=3):
        level = face_level(Vector3(x, y, z), LIGHT, ambient, diffuse)
        assert isinstance(level, int)
        assert 0 <= level <= 255
