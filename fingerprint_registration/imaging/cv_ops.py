"""
OpenCV adapter for the registration core.

Every raster primitive the registration needs goes through this module:
decoding, grayscale conversion, Otsu binarization, dilation, bounding
box extraction, affine warps, padding, cropping and PNG encoding.
Images are ``numpy`` arrays in OpenCV layout (rows x cols [x channels]).

Failures reported by OpenCV (``cv2.error``) are re-raised as
``UnderlyingImageOperationError`` so callers see a single error taxonomy.
"""

import functools
import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from ..exceptions import InputValidationError, UnderlyingImageOperationError

logger = logging.getLogger(__name__)


# White pixel in a binary/grayscale image
MAX_BINARY_VALUE = 255

MORPH_SHAPES = {
    'rect': cv2.MORPH_RECT,
    'cross': cv2.MORPH_CROSS,
    'ellipse': cv2.MORPH_ELLIPSE,
}

PNG_STRATEGIES = {
    'default': cv2.IMWRITE_PNG_STRATEGY_DEFAULT,
    'filtered': cv2.IMWRITE_PNG_STRATEGY_FILTERED,
    'huffman_only': cv2.IMWRITE_PNG_STRATEGY_HUFFMAN_ONLY,
    'rle': cv2.IMWRITE_PNG_STRATEGY_RLE,
    'fixed': cv2.IMWRITE_PNG_STRATEGY_FIXED,
}

INTERPOLATIONS = {
    'nearest': cv2.INTER_NEAREST,
    'linear': cv2.INTER_LINEAR,
    'cubic': cv2.INTER_CUBIC,
}


def wraps_cv_error(operation: str):
    """
    Decorator converting ``cv2.error`` into ``UnderlyingImageOperationError``.

    Args:
        operation: Name of the primitive, used in the error message
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except cv2.error as exc:
                raise UnderlyingImageOperationError(operation, str(exc)) from exc
        return wrapper
    return decorator


@wraps_cv_error("decode")
def decode_image(data: bytes) -> np.ndarray:
    """
    Decode an encoded image buffer (PNG, TIFF, BMP, JPEG, ...).

    Args:
        data: Encoded image bytes

    Returns:
        Decoded image, grayscale or color, original bit depth

    Raises:
        InputValidationError: If the buffer is empty or not a decodable image
    """
    if data is None or len(data) == 0:
        raise InputValidationError("Image buffer is empty")

    buffer = np.frombuffer(bytes(data), dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)

    if image is None:
        raise InputValidationError("Image buffer could not be decoded")

    return image


@wraps_cv_error("grayscale conversion")
def to_grayscale(image: np.ndarray) -> Tuple[np.ndarray, bool]:
    """
    Convert an image to single-channel grayscale.

    Args:
        image: 2-D grayscale or 3-D BGR/BGRA image

    Returns:
        Tuple of (grayscale image, whether a conversion took place)
    """
    if image.ndim == 2:
        return image, False

    if image.ndim == 3 and image.shape[2] == 1:
        return image[:, :, 0], False

    if image.ndim == 3 and image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY), True

    if image.ndim == 3 and image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY), True

    raise InputValidationError(f"Unsupported image shape: {image.shape}")


@wraps_cv_error("binarization")
def binarize_otsu(image: np.ndarray, max_value: int = MAX_BINARY_VALUE) -> np.ndarray:
    """
    Binarize with a global threshold selected by Otsu's method.

    Pixels above the threshold (paper) become ``max_value``, the rest
    (ridges/ink) become 0. The threshold is computed from this image's
    own histogram.

    Args:
        image: 8-bit grayscale image
        max_value: Value assigned to pixels above the threshold

    Returns:
        Binary uint8 image
    """
    threshold, binary = cv2.threshold(
        image, 0, max_value, cv2.THRESH_BINARY + cv2.THRESH_OTSU
    )
    logger.debug(f"Otsu threshold: {threshold}")
    return binary


@wraps_cv_error("binary sum")
def sum_binary_images(binary1: np.ndarray, binary2: np.ndarray) -> np.ndarray:
    """
    Combine two paper-white binaries so ink in either image stays ink.

    With paper = 255 and ink = 0 this is a bitwise AND, i.e. the logical
    OR of the two ink layers.

    Args:
        binary1: First binary image
        binary2: Second binary image, same size

    Returns:
        Combined binary image
    """
    return cv2.bitwise_and(binary1, binary2)


@wraps_cv_error("inversion")
def invert(image: np.ndarray) -> np.ndarray:
    """Bitwise NOT of an 8-bit image."""
    return cv2.bitwise_not(image)


def structuring_element(size: int, shape: int) -> np.ndarray:
    """
    Build a dilation kernel of ``(2*size + 1)`` pixels per side.

    Args:
        size: Kernel radius; 0 yields a single-pixel kernel
        shape: One of ``cv2.MORPH_RECT``, ``cv2.MORPH_CROSS``, ``cv2.MORPH_ELLIPSE``

    Returns:
        uint8 kernel anchored at its center
    """
    side = 2 * size + 1
    return cv2.getStructuringElement(shape, (side, side), (size, size))


@wraps_cv_error("dilation")
def dilate(image: np.ndarray, size: int, shape: int) -> np.ndarray:
    """
    Morphological dilation.

    Args:
        image: Binary image (foreground = non-zero)
        size: Kernel radius
        shape: OpenCV morphology shape

    Returns:
        Dilated image
    """
    kernel = structuring_element(size, shape)
    return cv2.dilate(image, kernel, anchor=(size, size))


@wraps_cv_error("bounding box")
def bounding_box(mask: np.ndarray) -> Optional[Tuple[int, int, int, int]]:
    """
    Axis-aligned bounding rectangle of all non-zero pixels.

    Args:
        mask: Single-channel image

    Returns:
        ``(x, y, width, height)`` or None if there is no non-zero pixel
    """
    points = cv2.findNonZero(mask)
    if points is None or len(points) == 0:
        return None

    x, y, w, h = cv2.boundingRect(points)
    return int(x), int(y), int(w), int(h)


@wraps_cv_error("affine warp")
def warp_affine(
    image: np.ndarray,
    matrix: np.ndarray,
    size: Tuple[int, int],
    border_value: int = MAX_BINARY_VALUE,
    interpolation: int = cv2.INTER_LINEAR
) -> np.ndarray:
    """
    Apply an affine transform onto a canvas of ``size``.

    Args:
        image: Source image
        matrix: 2x3 affine matrix mapping source to destination
        size: (width, height) of the destination canvas
        border_value: Fill for pixels without a source
        interpolation: OpenCV interpolation flag

    Returns:
        Warped image
    """
    return cv2.warpAffine(
        image,
        matrix,
        (int(size[0]), int(size[1])),
        flags=interpolation,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=border_value
    )


@wraps_cv_error("padding")
def pad(
    image: np.ndarray,
    top: int,
    bottom: int,
    left: int,
    right: int,
    value: int = MAX_BINARY_VALUE
) -> np.ndarray:
    """Add a constant border of the given widths."""
    return cv2.copyMakeBorder(
        image, top, bottom, left, right, cv2.BORDER_CONSTANT, value=value
    )


def crop(image: np.ndarray, x: int, y: int, width: int, height: int) -> np.ndarray:
    """Copy the ``width`` x ``height`` region starting at (x, y)."""
    return image[y:y + height, x:x + width].copy()


@wraps_cv_error("PNG encode")
def encode_png(image: np.ndarray, strategy: int = cv2.IMWRITE_PNG_STRATEGY_DEFAULT) -> bytes:
    """
    Losslessly encode an image as PNG.

    Args:
        image: Image to encode
        strategy: zlib strategy (``cv2.IMWRITE_PNG_STRATEGY_*``)

    Returns:
        PNG bytes
    """
    ok, buffer = cv2.imencode('.png', image, [cv2.IMWRITE_PNG_STRATEGY, strategy])
    if not ok:
        raise UnderlyingImageOperationError("PNG encode", "cv2.imencode returned False")
    return buffer.tobytes()


@wraps_cv_error("overlay")
def merge_overlay(moving: np.ndarray, fixed: np.ndarray) -> np.ndarray:
    """
    Composite two grayscale images into one BGR image.

    Blue = fixed, red = moving, green = darker of both. On a white
    background, ink only in the moving image shows blue, ink only in the
    fixed image shows red and common ink is black.

    Args:
        moving: Registered moving image
        fixed: Fixed image, same size

    Returns:
        3-channel uint8 image
    """
    return cv2.merge([fixed, np.minimum(moving, fixed), moving])
