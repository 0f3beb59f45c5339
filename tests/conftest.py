"""Shared fixtures for registration tests."""
import cv2
import numpy as np
import pytest


def make_fingerprint(width=200, height=200, period=8.0, angle=0.6):
    """Dark sinusoidal ridges inside an ellipse on white paper."""
    yy, xx = np.mgrid[0:height, 0:width].astype(np.float64)
    phase = (xx * np.cos(angle) + yy * np.sin(angle)) * 2 * np.pi / period
    ridges = (0.5 + 0.5 * np.sin(phase)) * 200

    image = np.full((height, width), 255, dtype=np.uint8)
    mask = np.zeros((height, width), dtype=np.uint8)
    cv2.ellipse(
        mask,
        (width // 2, height // 2),
        (width // 2 - 15, height // 2 - 10),
        0, 0, 360, 1, -1
    )
    image[mask > 0] = ridges[mask > 0].astype(np.uint8)
    return image


def make_blocks(width=200, height=200):
    """A few solid dark shapes on white paper."""
    image = np.full((height, width), 255, dtype=np.uint8)
    cv2.rectangle(image, (30, 40), (90, 120), 20, -1)
    cv2.circle(image, (140, 70), 30, 40, -1)
    cv2.rectangle(image, (110, 140), (170, 175), 10, -1)
    return image


def encode(image):
    ok, buffer = cv2.imencode('.png', image)
    assert ok
    return buffer.tobytes()


def decode(data):
    return cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_UNCHANGED)


@pytest.fixture
def fingerprint():
    return make_fingerprint()


@pytest.fixture
def fingerprint_png(fingerprint):
    return encode(fingerprint)


@pytest.fixture
def rotated_pair():
    """
    Moving image and the same image rotated 90° counter-clockwise.

    A moving point (x, y) lands on (y, W - 1 - x) in the fixed image, so
    the control points are exact.
    """
    moving = make_blocks()
    fixed = cv2.rotate(moving, cv2.ROTATE_90_COUNTERCLOCKWISE)
    width = moving.shape[1]

    def to_fixed(x, y):
        return y, width - 1 - x

    m1, m2 = (60, 50), (140, 80)
    f1, f2 = to_fixed(*m1), to_fixed(*m2)
    points = [m1[0], m1[1], f1[0], f1[1], m2[0], m2[1], f2[0], f2[1]]
    return moving, fixed, points
