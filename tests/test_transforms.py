"""Tests for affine transform helpers and canvas layout."""
import numpy as np
import pytest

from fingerprint_registration.exceptions import GeometryError
from fingerprint_registration.geometry import (
    Point,
    SameImagePointPair,
    compose,
    matrix_rows,
    rotation_matrix,
    transform_points,
    translation_matrix,
)
from fingerprint_registration.registration.canvas import (
    Padding,
    RegionOfInterest,
    compute_canvas_layout,
)


def test_translation_matrix():
    t = translation_matrix(5, -3)
    np.testing.assert_allclose(transform_points(t, [(1, 1)]), [[6, -2]])
    assert matrix_rows(t, as_int=True) == [[1, 0, 5], [0, 1, -3]]


def test_rotation_about_center_keeps_center():
    r = rotation_matrix((20, 20), 37.0)
    np.testing.assert_allclose(transform_points(r, [(20, 20)]), [[20, 20]], atol=1e-9)


def test_positive_angle_is_counter_clockwise_on_screen():
    r = rotation_matrix((0, 0), 90.0)
    # A point to the right of the center moves up (negative y)
    np.testing.assert_allclose(transform_points(r, [(10, 0)]), [[0, -10]], atol=1e-9)


def test_compose_order_matters():
    t = translation_matrix(10, 0)
    r = rotation_matrix((0, 0), 90.0)

    t_then_r = transform_points(compose(t, r), [(0, 0)])
    r_then_t = transform_points(compose(r, t), [(0, 0)])

    np.testing.assert_allclose(t_then_r, [[0, -10]], atol=1e-9)
    np.testing.assert_allclose(r_then_t, [[10, 0]], atol=1e-9)


def test_moving_segment_maps_onto_fixed_orientation():
    moving = SameImagePointPair(Point(10, 10), Point(110, 10))
    fixed = SameImagePointPair(Point(20, 20), Point(20, 120))

    angle_diff = fixed.angle_degrees - moving.angle_degrees
    assert abs(angle_diff) == pytest.approx(90.0)

    t = translation_matrix(20 - 10, 20 - 10)
    r = rotation_matrix((20, 20), angle_diff)
    registered = transform_points(compose(t, r), [(10, 10), (110, 10)])

    np.testing.assert_allclose(registered, [[20, 20], [20, 120]], atol=1e-9)
    np.testing.assert_allclose(r, [[0, -1, 40], [1, 0, 0]], atol=1e-9)


def test_canvas_identity():
    layout = compute_canvas_layout((100, 80), (100, 80), (0, 0), translation_matrix(0, 0))

    assert layout.size == (100, 80)
    assert layout.pad_fixed == Padding(0, 0, 0, 0)
    assert layout.pad_moving == Padding(0, 0, 0, 0)


def test_canvas_holds_translated_image():
    layout = compute_canvas_layout((100, 100), (50, 40), (-20, 70), translation_matrix(-20, 70))

    assert (layout.offset_x, layout.offset_y) == (20, 0)
    assert layout.size == (120, 110)
    assert layout.pad_fixed == Padding(top=0, bottom=10, left=20, right=0)
    assert layout.pad_moving == Padding(top=70, bottom=0, left=0, right=70)


def test_canvas_padding_reaches_canvas_size():
    registration = compose(translation_matrix(15, -5), rotation_matrix((40, 30), 45.0))
    layout = compute_canvas_layout((120, 90), (80, 100), (15, -5), registration)

    for padding, (w, h) in ((layout.pad_fixed, (120, 90)), (layout.pad_moving, (80, 100))):
        assert min(padding.top, padding.bottom, padding.left, padding.right) >= 0
        assert padding.left + w + padding.right == layout.width
        assert padding.top + h + padding.bottom == layout.height


def test_roi_properties():
    roi = RegionOfInterest(5, 6, 10, 20)

    assert roi.top_left == (5, 6)
    assert roi.bottom_right == (15, 26)
    assert roi.area == 200
    assert roi.corners() == ["5,6", "15,26"]
    assert roi.is_within(15, 26)
    assert not roi.is_within(14, 26)


@pytest.mark.parametrize("width, height", [(0, 5), (5, 0), (-1, 3)])
def test_empty_roi_rejected(width, height):
    with pytest.raises(GeometryError):
        RegionOfInterest(0, 0, width, height)
