"""
Control-point geometry and affine transforms.

This package provides:
- Point types (same-image segments, cross-image correspondences)
- Scale factor between segments
- Translation / rotation matrices and point transformation
"""

from .points import (
    Point,
    SameImagePointPair,
    PointPairScale,
    CorrespondingPointPair,
    ScaleFactorDirection,
    euclidean_distance,
    parse_control_points
)
from .transforms import (
    translation_matrix,
    rotation_matrix,
    compose,
    transform_points,
    image_corners,
    matrix_rows
)

__all__ = [
    # Points
    'Point',
    'SameImagePointPair',
    'PointPairScale',
    'CorrespondingPointPair',
    'ScaleFactorDirection',
    'euclidean_distance',
    'parse_control_points',
    # Transforms
    'translation_matrix',
    'rotation_matrix',
    'compose',
    'transform_points',
    'image_corners',
    'matrix_rows',
]
