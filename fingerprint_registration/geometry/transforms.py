"""
Affine transforms for translate-then-rotate registration.

Matrices are 2x3 float64 arrays in the OpenCV ``warpAffine`` layout.
"""

from typing import List, Sequence, Tuple

import cv2
import numpy as np


# =============================================================================
# MATHEMATICAL BACKGROUND
# =============================================================================
#
# Translation by (tx, ty):
#
#   T = | 1  0  tx |
#       | 0  1  ty |
#
# Rotation by θ (degrees, counter-clockwise on screen) about center (cx, cy),
# as produced by cv2.getRotationMatrix2D with unit scale:
#
#   a = cos θ,  b = sin θ
#   R = |  a  b  (1 - a)·cx - b·cy |
#       | -b  a  b·cx + (1 - a)·cy |
#
# Registration applies T first and R second. The rotation center is the
# fixed image's first control point, i.e. a point of the translated frame,
# so the two do not commute.
# =============================================================================


def translation_matrix(tx: float, ty: float) -> np.ndarray:
    """
    Build a pure translation.

    Args:
        tx: Shift along x
        ty: Shift along y

    Returns:
        2x3 float64 matrix
    """
    return np.array([[1.0, 0.0, tx], [0.0, 1.0, ty]], dtype=np.float64)


def rotation_matrix(center: Tuple[float, float], angle_degrees: float) -> np.ndarray:
    """
    Build a pure rotation about ``center``.

    Args:
        center: (x, y) center of rotation
        angle_degrees: Counter-clockwise angle on screen

    Returns:
        2x3 float64 matrix
    """
    matrix = cv2.getRotationMatrix2D(
        (float(center[0]), float(center[1])), float(angle_degrees), 1.0
    )
    return matrix.astype(np.float64)


def to_homogeneous(matrix: np.ndarray) -> np.ndarray:
    """Extend a 2x3 affine matrix to 3x3."""
    return np.vstack([matrix, [0.0, 0.0, 1.0]])


def compose(first: np.ndarray, second: np.ndarray) -> np.ndarray:
    """
    Compose two affine transforms.

    Args:
        first: Transform applied first
        second: Transform applied second

    Returns:
        2x3 matrix equivalent to applying ``first`` then ``second``
    """
    return (to_homogeneous(second) @ to_homogeneous(first))[:2, :]


def transform_points(
    matrix: np.ndarray,
    points: Sequence[Tuple[float, float]]
) -> np.ndarray:
    """
    Apply an affine transform to a list of points.

    Args:
        matrix: 2x3 affine matrix
        points: Sequence of (x, y)

    Returns:
        Array of shape (N, 2) with transformed coordinates
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    ones = np.ones((pts.shape[0], 1), dtype=np.float64)
    return np.hstack([pts, ones]) @ matrix.T


def image_corners(width: int, height: int) -> List[Tuple[float, float]]:
    """Corner coordinates of a ``width`` x ``height`` pixel grid."""
    return [(0.0, 0.0), (width, 0.0), (width, height), (0.0, height)]


def matrix_rows(matrix: np.ndarray, as_int: bool = False) -> List[List[float]]:
    """
    Convert a matrix to nested lists for metadata.

    Args:
        matrix: 2x3 affine matrix
        as_int: Round entries to integers (translation matrices)

    Returns:
        List of rows
    """
    if as_int:
        return [[int(round(v)) for v in row] for row in matrix]
    return [[float(v) for v in row] for row in matrix]
