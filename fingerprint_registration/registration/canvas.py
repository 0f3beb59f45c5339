"""
Common canvas for the registered moving image and the fixed image.

Both images are placed on one padded canvas large enough to hold the
fixed image, the translated moving image and the translated-and-rotated
moving image without clipping. The overlap and crop stages work in this
canvas' coordinate space.
"""

import math
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from ..exceptions import GeometryError
from ..geometry.transforms import image_corners, transform_points


@dataclass(frozen=True)
class Padding:
    """
    Margins added around a source image to reach the canvas size.

    Attributes:
        top: Rows added above the image
        bottom: Rows added below the image
        left: Columns added to the left
        right: Columns added to the right
    """
    top: int = 0
    bottom: int = 0
    left: int = 0
    right: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {'top': self.top, 'bottom': self.bottom, 'left': self.left, 'right': self.right}


@dataclass(frozen=True)
class RegionOfInterest:
    """
    Axis-aligned rectangle in canvas coordinates.

    ``bottom_right`` is exclusive, matching OpenCV's ``Rect::br()``.
    """
    x: int
    y: int
    width: int
    height: int

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise GeometryError(
                f"Region of interest is empty ({self.width}x{self.height})"
            )

    @property
    def top_left(self) -> Tuple[int, int]:
        return (self.x, self.y)

    @property
    def bottom_right(self) -> Tuple[int, int]:
        return (self.x + self.width, self.y + self.height)

    @property
    def area(self) -> int:
        return self.width * self.height

    def corners(self) -> List[str]:
        """Top-left and bottom-right corners as ``x,y`` strings."""
        tl, br = self.top_left, self.bottom_right
        return [f"{tl[0]},{tl[1]}", f"{br[0]},{br[1]}"]

    def is_within(self, width: int, height: int) -> bool:
        """Whether the rectangle lies inside a ``width`` x ``height`` canvas."""
        return (
            self.x >= 0 and self.y >= 0
            and self.x + self.width <= width
            and self.y + self.height <= height
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {'x': self.x, 'y': self.y, 'width': self.width, 'height': self.height}


@dataclass(frozen=True)
class CanvasLayout:
    """
    Placement of both images on the common canvas.

    Attributes:
        width: Canvas width
        height: Canvas height
        offset_x: Canvas x of the fixed image's origin
        offset_y: Canvas y of the fixed image's origin
        pad_fixed: Margins around the fixed image
        pad_moving: Margins around the translated (not yet rotated) moving image
    """
    width: int
    height: int
    offset_x: int
    offset_y: int
    pad_fixed: Padding
    pad_moving: Padding

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)


def compute_canvas_layout(
    fixed_size: Tuple[int, int],
    moving_size: Tuple[int, int],
    translation: Tuple[int, int],
    registration: np.ndarray
) -> CanvasLayout:
    """
    Compute the smallest canvas holding both images unclipped.

    All geometry is expressed in the fixed image's frame; the canvas
    origin is shifted so every coordinate is non-negative.

    Args:
        fixed_size: (width, height) of the fixed image
        moving_size: (width, height) of the moving image
        translation: Integer (tx, ty) applied to the moving image
        registration: 2x3 matrix of translation followed by rotation

    Returns:
        CanvasLayout with canvas size and per-image padding
    """
    fixed_w, fixed_h = fixed_size
    moving_w, moving_h = moving_size
    tx, ty = translation

    moving_corners = image_corners(moving_w, moving_h)
    points = np.vstack([
        np.asarray(image_corners(fixed_w, fixed_h), dtype=np.float64),
        np.asarray(moving_corners, dtype=np.float64) + [tx, ty],
        transform_points(registration, moving_corners),
    ])
    # Rounding keeps float noise from adding a spurious row/column
    points = np.round(points, 6)

    min_x = int(math.floor(points[:, 0].min()))
    min_y = int(math.floor(points[:, 1].min()))
    max_x = int(math.ceil(points[:, 0].max()))
    max_y = int(math.ceil(points[:, 1].max()))

    offset_x = -min_x
    offset_y = -min_y
    width = max_x - min_x
    height = max_y - min_y

    pad_fixed = Padding(
        top=offset_y,
        bottom=height - fixed_h - offset_y,
        left=offset_x,
        right=width - fixed_w - offset_x
    )

    moving_left = offset_x + tx
    moving_top = offset_y + ty
    pad_moving = Padding(
        top=moving_top,
        bottom=height - moving_h - moving_top,
        left=moving_left,
        right=width - moving_w - moving_left
    )

    return CanvasLayout(width, height, offset_x, offset_y, pad_fixed, pad_moving)
