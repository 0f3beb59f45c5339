"""Tests for the overlap engine and the OpenCV adapter."""
import cv2
import numpy as np
import pytest

from fingerprint_registration.exceptions import (
    GeometryError,
    InputValidationError,
    UnderlyingImageOperationError,
)
from fingerprint_registration.imaging import cv_ops
from fingerprint_registration.registration.overlap import DilationKernelParams, OverlapEngine

from .conftest import decode


@pytest.fixture
def ink_images():
    """Two white 100x100 canvases with one dark block each."""
    img1 = np.full((100, 100), 255, dtype=np.uint8)
    img2 = np.full((100, 100), 255, dtype=np.uint8)
    img1[20:40, 30:60] = 0
    img2[50:70, 10:20] = 0
    return img1, img2


def test_roi_is_union_of_ink_without_dilation(ink_images):
    engine = OverlapEngine(DilationKernelParams(shape="rect", size=0))
    roi = engine.compute(*ink_images)

    assert (roi.x, roi.y, roi.width, roi.height) == (10, 20, 50, 50)


def test_default_dilation_grows_roi_by_one(ink_images):
    engine = OverlapEngine()
    roi = engine.compute(*ink_images)

    assert (roi.x, roi.y, roi.width, roi.height) == (9, 19, 52, 52)
    assert engine.get_region_of_interest_corners() == ["9,19", "61,71"]


def test_roi_stays_inside_canvas():
    img = np.full((50, 60), 255, dtype=np.uint8)
    img[0:10, 0:10] = 0
    img[45:50, 55:60] = 0

    engine = OverlapEngine(DilationKernelParams(size=3))
    roi = engine.compute(img, img.copy())

    assert roi.is_within(60, 50)
    assert (roi.x, roi.y, roi.width, roi.height) == (0, 0, 60, 50)


def test_thresholds_are_per_image():
    # Same layout, very different gray levels
    light = np.full((40, 40), 250, dtype=np.uint8)
    dark = np.full((40, 40), 120, dtype=np.uint8)
    light[5:10, 5:10] = 200
    dark[30:35, 30:35] = 10

    roi = OverlapEngine(DilationKernelParams(size=0)).compute(light, dark)

    assert (roi.x, roi.y, roi.width, roi.height) == (5, 5, 30, 30)


def test_blank_images_raise_geometry_error():
    blank = np.full((30, 30), 255, dtype=np.uint8)
    with pytest.raises(GeometryError):
        OverlapEngine().compute(blank, blank.copy())


def test_unequal_sizes_rejected():
    with pytest.raises(InputValidationError):
        OverlapEngine().compute(np.zeros((10, 10), np.uint8), np.zeros((10, 11), np.uint8))


def test_color_input_rejected():
    with pytest.raises(InputValidationError):
        OverlapEngine().compute(np.zeros((10, 10, 3), np.uint8), np.zeros((10, 10, 3), np.uint8))


def test_png_blob_is_dilated_mask(ink_images):
    engine = OverlapEngine()
    engine.compute(*ink_images)

    mask = decode(engine.png_blob)
    np.testing.assert_array_equal(mask, engine.overlap_mask)
    assert set(np.unique(mask)) <= {0, 255}


def test_kernel_params_validation():
    with pytest.raises(ValueError):
        DilationKernelParams(shape="hexagon")
    with pytest.raises(ValueError):
        DilationKernelParams(size=-1)


def test_kernel_text():
    text = DilationKernelParams(shape="ellipse", size=2).to_text()
    assert "size: 2" in text
    assert "MORPH_ELLIPSE" in text


def test_engine_text(ink_images):
    engine = OverlapEngine()
    assert "not computed" in engine.to_text()

    engine.compute(*ink_images)
    text = engine.to_text()
    assert "Rect TopLeft: (9, 19)" in text
    assert "area:   2704" in text


def test_structuring_element_size():
    kernel = cv_ops.structuring_element(2, cv2.MORPH_RECT)
    assert kernel.shape == (5, 5)
    assert kernel.all()


def test_bounding_box_of_empty_mask():
    assert cv_ops.bounding_box(np.zeros((5, 5), np.uint8)) is None


def test_sum_keeps_ink_of_either_image():
    a = np.array([[255, 0, 255, 0]], dtype=np.uint8)
    b = np.array([[255, 255, 0, 0]], dtype=np.uint8)
    np.testing.assert_array_equal(cv_ops.sum_binary_images(a, b), [[255, 0, 0, 0]])


def test_to_grayscale_flags():
    gray = np.zeros((4, 4), np.uint8)
    color = np.zeros((4, 4, 3), np.uint8)
    rgba = np.zeros((4, 4, 4), np.uint8)

    assert cv_ops.to_grayscale(gray)[1] is False
    converted, flag = cv_ops.to_grayscale(color)
    assert flag is True and converted.shape == (4, 4)
    assert cv_ops.to_grayscale(rgba)[1] is True


def test_decode_rejects_garbage():
    with pytest.raises(InputValidationError):
        cv_ops.decode_image(b"")
    with pytest.raises(InputValidationError):
        cv_ops.decode_image(b"definitely not an image")


def test_cv_errors_are_wrapped():
    # Mismatched sizes make cv2.bitwise_and fail
    with pytest.raises(UnderlyingImageOperationError) as info:
        cv_ops.sum_binary_images(np.zeros((4, 4), np.uint8), np.zeros((5, 5), np.uint8))

    assert "binary sum" in str(info.value)
    assert isinstance(info.value.__cause__, cv2.error)


def test_merge_overlay_channels():
    moving = np.array([[0, 255]], dtype=np.uint8)
    fixed = np.array([[255, 0]], dtype=np.uint8)

    overlay = cv_ops.merge_overlay(moving, fixed)

    assert overlay.shape == (1, 2, 3)
    # Ink only in moving shows blue, only in fixed shows red (BGR)
    np.testing.assert_array_equal(overlay[0, 0], [255, 0, 0])
    np.testing.assert_array_equal(overlay[0, 1], [0, 0, 255])
