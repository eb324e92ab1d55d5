import math

import pytest

from paperback.geometry.vector import (
    Matrix4,
    Vector3,
    rotation_matrix,
    scale_matrix,
    translation_matrix,
)


def _close(a: Vector3, b: Vector3, tol: float = 1e-9) -> bool:
    return all(math.isclose(p, q, abs_tol=tol) for p, q in zip(a.to_tuple(), b.to_tuple()))


def test_dot_and_cross():
    a = Vector3(1, 2, 3)
    b = Vector3(4, -5, 6)
    assert a.dot(b) == 12
    assert Vector3(1, 0, 0).cross(Vector3(0, 1, 0)) == Vector3(0, 0, 1)
    assert a.cross(b) == Vector3(27, 6, -13)


def test_cross2_uses_self_as_origin():
    origin = Vector3(1, 1, 1)
    normal = origin.cross2(Vector3(1, 2, 1), Vector3(2, 1, 1))
    assert normal == Vector3(0, 0, -1)


def test_normalize_zero_vector_returns_zero():
    assert Vector3(0, 0, 0).normalize() == Vector3(0, 0, 0)


def test_normalize_unit_length():
    n = Vector3(3, 0, 4).normalize()
    assert n.length() == pytest.approx(1.0)
    assert _close(n, Vector3(0.6, 0, 0.8))


def test_scale_and_scale_by_are_separate():
    v = Vector3(1, 2, 3)
    assert v.scale(2) == Vector3(2, 4, 6)
    assert v.scale_by(Vector3(2, 0, -1)) == Vector3(2, 0, -3)


def test_vectors_are_immutable():
    v = Vector3(1, 2, 3)
    with pytest.raises(AttributeError):
        v.x = 5


@pytest.mark.parametrize("vec", [
    Vector3(0, 0, 0),
    Vector3(0, 5e-5, 0),
    Vector3(3e-5, 0, -4e-5),
])
def test_near_zero_rotation_is_identity(vec):
    assert rotation_matrix(vec) == Matrix4.identity()


def test_rotation_about_height_axis_turns_width_into_depth():
    m = rotation_matrix(Vector3(0, 90, 0))
    assert _close(Vector3(1, 0, 0).apply(m), Vector3(0, 0, 1))
    assert _close(Vector3(0, 0, 1).apply(m), Vector3(-1, 0, 0))
    assert _close(Vector3(0, 1, 0).apply(m), Vector3(0, 1, 0))


def test_rotation_round_trip_with_negated_angle():
    axis = Vector3(1, 2, 3).normalize()
    forward = rotation_matrix(axis.scale(37))
    back = rotation_matrix(axis.scale(-37))
    p = Vector3(4, -2, 7)
    assert _close(p.apply(forward.multiply(back)), p)
    assert forward.multiply(back).is_close(Matrix4.identity())


def test_translation_and_scale_matrices():
    assert Vector3(1, 2, 3).apply(translation_matrix(Vector3(10, 20, 30))) == Vector3(11, 22, 33)
    assert Vector3(1, 1, 1).apply(scale_matrix(Vector3(2, 3, 4))) == Vector3(2, 3, 4)


def test_multiply_applies_left_matrix_first():
    rotate = rotation_matrix(Vector3(0, 90, 0))
    move = translation_matrix(Vector3(0, 0, 5))
    p = Vector3(1, 0, 0)
    assert _close(p.apply(rotate.multiply(move)), Vector3(0, 0, 6))
    assert _close(p.apply(move.multiply(rotate)), Vector3(-5, 0, 1))


def test_apply_divides_by_w():
    m = Matrix4((
        1, 0, 0, 0,
        0, 1, 0, 0,
        0, 0, 1, 0,
        0, 0, 0, 2,
    ))
    assert Vector3(2, 4, 6).apply(m) == Vector3(1, 2, 3)


def test_matrix_requires_sixteen_coefficients():
    with pytest.raises(ValueError):
        Matrix4((1, 0, 0))
