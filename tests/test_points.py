"""Tests for control-point geometry."""
import math

import numpy as np
import pytest

from fingerprint_registration.exceptions import InputValidationError
from fingerprint_registration.geometry import (
    CorrespondingPointPair,
    Point,
    PointPairScale,
    SameImagePointPair,
    ScaleFactorDirection,
    euclidean_distance,
    parse_control_points,
    rotation_matrix,
    transform_points,
    translation_matrix,
    compose,
)


def segment(x1, y1, x2, y2):
    return SameImagePointPair(Point(x1, y1), Point(x2, y2))


def test_horizontal_segment():
    s = segment(10, 10, 110, 10)
    assert s.segment_length == pytest.approx(100.0)
    assert s.angle_degrees == pytest.approx(0.0)
    assert s.side_x == 100
    assert s.side_y == 0


@pytest.mark.parametrize("x2, y2, expected", [
    (10, 10, -45.0),     # below-right
    (10, -10, 45.0),     # above-right
    (-10, -10, 135.0),   # above-left
    (-10, 10, -135.0),   # below-left
])
def test_quadrant_angles(x2, y2, expected):
    s = segment(0, 0, x2, y2)
    assert s.angle_degrees == pytest.approx(expected)


def test_slope_is_cartesian():
    # y grows downward, so a segment going down-right has negative slope
    assert segment(0, 0, 10, 5).slope == pytest.approx(-0.5)
    assert segment(0, 0, 10, -5).slope == pytest.approx(0.5)


def test_vertical_segments():
    down = segment(20, 20, 20, 120)
    up = segment(20, 120, 20, 20)

    assert down.angle_degrees == pytest.approx(-90.0)
    assert up.angle_degrees == pytest.approx(90.0)
    assert down.slope == -math.inf
    assert up.slope == math.inf
    assert down.segment_length == pytest.approx(100.0)


@pytest.mark.parametrize("p1, p2", [
    ((0, 0), (10, 10)),
    ((5, 7), (-3, 2)),
    ((10, 10), (110, 10)),
    ((20, 20), (20, 120)),
    ((3, 9), (4, -12)),
])
def test_swapping_points_turns_segment_around(p1, p2):
    forward = segment(*p1, *p2)
    backward = segment(*p2, *p1)

    assert backward.segment_length == pytest.approx(forward.segment_length)
    assert (forward.angle_degrees - backward.angle_degrees) % 360 == pytest.approx(180.0)


def test_angle_range():
    for x2 in range(-5, 6):
        for y2 in range(-5, 6):
            if x2 == 0 and y2 == 0:
                continue
            angle = segment(0, 0, x2, y2).angle_degrees
            assert -180.0 < angle <= 180.0
            assert angle == pytest.approx(math.degrees(math.atan2(-y2, x2)))


def test_coincident_points_rejected():
    with pytest.raises(InputValidationError):
        segment(42, 17, 42, 17)


def test_length_invariant_under_rigid_motion():
    s = segment(12, 30, 95, 71)
    motion = compose(translation_matrix(17, -4), rotation_matrix((50, 50), 33.0))

    moved = transform_points(motion, [s.point_one.as_tuple(), s.point_two.as_tuple()])

    assert euclidean_distance(moved[0], moved[1]) == pytest.approx(s.segment_length)


def test_to_text_mentions_kind():
    text = segment(0, 0, 3, 4).to_text("moving")
    assert "moving SLOPE" in text
    assert "segment_length: 5.000000" in text


def test_scale_factor_reciprocal():
    a = segment(0, 0, 30, 40)   # length 50
    b = segment(5, 5, 5, 105)   # length 100

    ab = PointPairScale(a, b)
    ba = PointPairScale(b, a)

    assert ab.scale_factor == pytest.approx(0.5)
    assert ab.scale_factor == pytest.approx(1.0 / ba.scale_factor)
    assert ab.scale_factor > 0


def test_scale_factor_direction():
    a = segment(0, 0, 30, 40)
    b = segment(5, 5, 5, 105)

    inverse = PointPairScale(a, b, ScaleFactorDirection.IMG2_TO_IMG1)

    assert inverse.scale_factor == pytest.approx(2.0)
    assert ScaleFactorDirection.IMG1_TO_IMG2.label() == "img1/img2"
    assert inverse.direction.label() == "img2/img1"


def test_corresponding_pair_distance():
    pair = CorrespondingPointPair(Point(3, 0), Point(0, 4))
    assert pair.distance() == pytest.approx(5.0)
    assert pair.to_text() == "(3, 0) X (0, 4)"


def test_point_formatting():
    p = Point(12, 34)
    assert p.to_string() == "12,34"
    assert p.as_tuple() == (12, 34)
    assert Point.from_sequence([1, 2]) == Point(1, 2)


def test_point_is_immutable():
    p = Point(1, 2)
    with pytest.raises(Exception):
        p.x = 5


def test_parse_control_points_order():
    unconstrained, constrained = parse_control_points([1, 2, 3, 4, 5, 6, 7, 8])

    assert unconstrained.moving == Point(1, 2)
    assert unconstrained.fixed == Point(3, 4)
    assert constrained.moving == Point(5, 6)
    assert constrained.fixed == Point(7, 8)


def test_parse_control_points_accepts_numpy():
    unconstrained, _ = parse_control_points(np.arange(8))
    assert unconstrained.fixed == Point(2, 3)


@pytest.mark.parametrize("coords", [None, [], [1, 2, 3], list(range(9))])
def test_parse_control_points_wrong_count(coords):
    with pytest.raises(InputValidationError):
        parse_control_points(coords)


def test_parse_control_points_non_integer():
    with pytest.raises(InputValidationError):
        parse_control_points([1, 2, 3, 4, 5, 6, 7, "eight"])


@pytest.mark.parametrize("coords", [
    [1.9, 2.9, 3, 4, 5, 6, 7, 8],
    [1, 2, 3, 4, 5, 6, 7, 8.5],
])
def test_parse_control_points_fractional(coords):
    with pytest.raises(InputValidationError):
        parse_control_points(coords)


def test_parse_control_points_integral_floats():
    unconstrained, _ = parse_control_points([1.0, 2.0, 3, 4, 5, 6, 7, 8])
    assert unconstrained.moving == Point(1, 2)
