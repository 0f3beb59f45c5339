"""
Overlap of registered images and the common crop region.

The registered moving image and the fixed image are binarized, their
ink layers combined, and the bounding rectangle of the (dilated) union
becomes the region of interest used to crop both images. The crops are
therefore always the same size.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

from ..exceptions import GeometryError, InputValidationError
from ..imaging import cv_ops
from .canvas import RegionOfInterest

logger = logging.getLogger(__name__)


# =============================================================================
# ALGORITHM
# =============================================================================
#
# 1. Binarize each image with its own Otsu threshold: paper = 255, ink = 0
# 2. "Sum" the binaries: ink in either image stays ink (AND of the
#    paper-white binaries)
# 3. Invert, so the union of ink is the non-zero foreground
# 4. Dilate with a small structuring element to close gaps
# 5. Bounding rectangle of all non-zero pixels = ROI
#
# Images must be the same size (both padded to the common canvas).
# =============================================================================


@dataclass(frozen=True)
class DilationKernelParams:
    """
    Structuring element used to dilate the summed overlap.

    Attributes:
        shape: ``rect``, ``cross`` or ``ellipse``
        size: Kernel radius; the kernel is ``2*size + 1`` pixels per side
    """
    shape: str = "rect"
    size: int = 1

    def __post_init__(self):
        if self.shape not in cv_ops.MORPH_SHAPES:
            raise ValueError(
                f"Unknown kernel shape '{self.shape}'. "
                f"Available: {sorted(cv_ops.MORPH_SHAPES)}"
            )
        if self.size < 0:
            raise ValueError(f"Kernel size must be >= 0, got {self.size}")

    @property
    def cv_shape(self) -> int:
        """OpenCV morphology constant for ``shape``."""
        return cv_ops.MORPH_SHAPES[self.shape]

    def to_text(self) -> str:
        """Describe the kernel for metadata reports."""
        return (
            " * Sum binaries dilation parameters for kernel:\n"
            f"    size: {self.size}\n"
            f"    type: {self.cv_shape} = cv2.MORPH_{self.shape.upper()}\n"
        )


class OverlapEngine:
    """
    Derives the crop ROI from two registered, padded grayscale images.

    Example:
        >>> engine = OverlapEngine()
        >>> roi = engine.compute(padded_moving, padded_fixed)
        >>> roi.corners()
        ['12,8', '410,502']
    """

    def __init__(
        self,
        kernel: Optional[DilationKernelParams] = None,
        png_strategy: int = cv2.IMWRITE_PNG_STRATEGY_DEFAULT
    ):
        """
        Initialize the overlap engine.

        Args:
            kernel: Dilation kernel (default: 3x3 rectangle)
            png_strategy: zlib strategy for the diagnostic PNG blob
        """
        self.kernel = kernel or DilationKernelParams()
        self.png_strategy = png_strategy

        self.region_of_interest: Optional[RegionOfInterest] = None
        self.overlap_mask: Optional[np.ndarray] = None
        self.png_blob: Optional[bytes] = None

    def compute(self, image1: np.ndarray, image2: np.ndarray) -> RegionOfInterest:
        """
        Compute the region of interest.

        Args:
            image1: Registered, padded grayscale image
            image2: Padded grayscale image, same size as ``image1``

        Returns:
            RegionOfInterest in canvas coordinates

        Raises:
            InputValidationError: If the images differ in size or are not 2-D
            GeometryError: If there is no foreground at all
            UnderlyingImageOperationError: If an OpenCV primitive fails
        """
        if image1.ndim != 2 or image2.ndim != 2:
            raise InputValidationError("Overlap requires single-channel images")
        if image1.shape != image2.shape:
            raise InputValidationError(
                f"Overlap requires equal-size images, got "
                f"{image1.shape[1]}x{image1.shape[0]} and {image2.shape[1]}x{image2.shape[0]}"
            )

        binary1 = cv_ops.binarize_otsu(image1, cv_ops.MAX_BINARY_VALUE)
        binary2 = cv_ops.binarize_otsu(image2, cv_ops.MAX_BINARY_VALUE)

        summed = cv_ops.sum_binary_images(binary1, binary2)
        inverted = cv_ops.invert(summed)
        dilated = cv_ops.dilate(inverted, self.kernel.size, self.kernel.cv_shape)

        self.overlap_mask = dilated
        self.png_blob = cv_ops.encode_png(dilated, self.png_strategy)

        rect = cv_ops.bounding_box(dilated)
        if rect is None:
            raise GeometryError("Registered images have no foreground in common canvas; ROI is empty")

        self.region_of_interest = RegionOfInterest(*rect)
        logger.debug(
            f"Overlap ROI: top-left {self.region_of_interest.top_left}, "
            f"size {self.region_of_interest.width}x{self.region_of_interest.height}"
        )
        return self.region_of_interest

    def get_region_of_interest_corners(self):
        """Top-left and bottom-right ROI corners as ``x,y`` strings."""
        if self.region_of_interest is None:
            return []
        return self.region_of_interest.corners()

    def to_text(self) -> str:
        """Describe the ROI and kernel for reports."""
        if self.region_of_interest is None:
            return "OverlapEngine: not computed\n" + self.kernel.to_text()

        roi = self.region_of_interest
        return (
            "OverlapEngine:\n"
            f" * Rect TopLeft: ({roi.top_left[0]}, {roi.top_left[1]})\n"
            f" * Rect BotRight: ({roi.bottom_right[0]}, {roi.bottom_right[1]})\n"
            " * Rect dimensions:\n"
            f"    width:  {roi.width}\n"
            f"    height: {roi.height}\n"
            f"    area:   {roi.area}\n"
            + self.kernel.to_text()
        )
