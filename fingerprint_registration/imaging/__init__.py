"""
Raster operations backed by OpenCV.
"""

from .cv_ops import (
    MAX_BINARY_VALUE,
    MORPH_SHAPES,
    PNG_STRATEGIES,
    INTERPOLATIONS,
    decode_image,
    to_grayscale,
    binarize_otsu,
    sum_binary_images,
    invert,
    structuring_element,
    dilate,
    bounding_box,
    warp_affine,
    pad,
    crop,
    encode_png,
    merge_overlay
)

__all__ = [
    'MAX_BINARY_VALUE',
    'MORPH_SHAPES',
    'PNG_STRATEGIES',
    'INTERPOLATIONS',
    'decode_image',
    'to_grayscale',
    'binarize_otsu',
    'sum_binary_images',
    'invert',
    'structuring_element',
    'dilate',
    'bounding_box',
    'warp_affine',
    'pad',
    'crop',
    'encode_png',
    'merge_overlay',
]
