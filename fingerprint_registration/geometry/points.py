"""
Control-point geometry for rigid fingerprint registration.

This module defines the point types the registration is driven by:
points on a single image (segments) and points corresponding across
the moving and fixed images.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

from ..exceptions import InputValidationError


# =============================================================================
# MATHEMATICAL BACKGROUND
# =============================================================================
#
# Segment angle:
# --------------
# Two points P1, P2 on the same image define a segment (a "ray" from P1).
#
#   dx = x2 - x1,  dy = y2 - y1
#   L  = sqrt(dx² + dy²)
#
# Image origin is the top-left corner, so y grows downward. The slope in
# standard Cartesian orientation is therefore
#
#   m = -(dy / dx)
#
# acos(dx / L) only covers [0°, 180°]. The sign is recovered from the
# quadrant of P2 relative to P1:
#
#   P2 below-right  (dx > 0, m < 0)  ->  angle negative
#   P2 above-right  (dx > 0, m > 0)  ->  angle positive
#   P2 above-left   (dx < 0, m < 0)  ->  angle positive
#   P2 below-left   (dx < 0, m > 0)  ->  angle negative
#
# Vertical segments (dx = 0) take the limit of the same rule:
# +90° pointing up on screen, -90° pointing down.
#
# Scale factor:
# -------------
#   sf = L(image 1) / L(image 2)     (or the inverse, see direction)
# =============================================================================


class ScaleFactorDirection(Enum):
    """Which image segment is the numerator of the scale factor."""
    IMG1_TO_IMG2 = 1
    IMG2_TO_IMG1 = 2

    def label(self) -> str:
        """Return the ratio as text, e.g. ``img1/img2``."""
        if self is ScaleFactorDirection.IMG1_TO_IMG2:
            return "img1/img2"
        return "img2/img1"


@dataclass(frozen=True)
class Point:
    """
    Integer pixel coordinate.

    Attributes:
        x: Column, increasing to the right
        y: Row, increasing downward
    """
    x: int
    y: int

    def as_tuple(self) -> Tuple[int, int]:
        """Return ``(x, y)``."""
        return (self.x, self.y)

    def to_string(self) -> str:
        """Return the coordinates as ``x,y`` (no parentheses)."""
        return f"{self.x},{self.y}"

    @classmethod
    def from_sequence(cls, values) -> 'Point':
        """Create from any two-element sequence of integers."""
        if len(values) != 2:
            raise InputValidationError(
                f"A point needs exactly two coordinates, got {len(values)}"
            )
        return cls(int(values[0]), int(values[1]))


@dataclass(frozen=True)
class SameImagePointPair:
    """
    Two points on the same image defining a segment.

    Length, slope and angle from the horizontal are computed once at
    construction; the object is immutable afterwards.

    Attributes:
        point_one: First-selected point (origin of the segment)
        point_two: Second-selected point
        side_x: Horizontal displacement (point_two.x - point_one.x)
        side_y: Vertical displacement (point_two.y - point_one.y)
        segment_length: Euclidean length of the segment
        slope: Cartesian slope, -(side_y / side_x); ±inf for vertical segments
        angle_degrees: Signed angle from the horizontal in (-180, 180]

    Raises:
        InputValidationError: If both points are identical
    """
    point_one: Point
    point_two: Point
    side_x: int = field(init=False)
    side_y: int = field(init=False)
    segment_length: float = field(init=False)
    slope: float = field(init=False)
    angle_degrees: float = field(init=False)

    def __post_init__(self):
        side_x = self.point_two.x - self.point_one.x
        side_y = self.point_two.y - self.point_one.y
        length = math.sqrt(side_x ** 2 + side_y ** 2)

        if length == 0:
            raise InputValidationError(
                f"Control points on the same image are identical: "
                f"{self.point_one.as_tuple()}"
            )

        if side_x != 0:
            slope = -(side_y / side_x)
        else:
            slope = math.copysign(math.inf, -side_y)

        # Clamp guards against |dx / L| drifting past 1.0
        cosine = max(-1.0, min(1.0, side_x / length))
        angle = math.degrees(math.acos(cosine))

        if side_x > 0 and slope < 0:
            angle = -angle
        elif side_x < 0 and slope > 0:
            angle = -angle
        elif side_x == 0 and side_y > 0:
            angle = -angle

        # Frozen dataclass: computed fields are set through object.__setattr__
        object.__setattr__(self, 'side_x', side_x)
        object.__setattr__(self, 'side_y', side_y)
        object.__setattr__(self, 'segment_length', length)
        object.__setattr__(self, 'slope', slope)
        object.__setattr__(self, 'angle_degrees', angle)

    def points(self) -> List[Point]:
        """Return both points in selection order."""
        return [self.point_one, self.point_two]

    def to_text(self, kind: str) -> str:
        """
        Describe the segment for reports.

        Args:
            kind: Image label, e.g. ``moving`` or ``fixed``

        Returns:
            Multi-line description ending with a newline
        """
        return (
            f"({self.point_one.x}, {self.point_one.y}) * "
            f"({self.point_two.x}, {self.point_two.y})\n"
            f"{kind} side_x: {self.side_x}, side_y: {self.side_y}, "
            f"segment_length: {self.segment_length:.6f}\n"
            f"{kind} SLOPE: {self.slope:.6f}\n"
            f"{kind} Angle from horizontal: {self.angle_degrees:.6f} degrees\n"
        )


@dataclass(frozen=True)
class PointPairScale:
    """
    Scale factor between the segments of the two images.

    The value is reported as metadata only; pixel data is never rescaled.

    Attributes:
        pair_one: Segment on the first image (moving)
        pair_two: Segment on the second image (fixed)
        direction: Which segment is the numerator
    """
    pair_one: SameImagePointPair
    pair_two: SameImagePointPair
    direction: ScaleFactorDirection = ScaleFactorDirection.IMG1_TO_IMG2

    @property
    def scale_factor(self) -> float:
        """Ratio of segment lengths according to ``direction``."""
        if self.direction is ScaleFactorDirection.IMG1_TO_IMG2:
            return self.pair_one.segment_length / self.pair_two.segment_length
        return self.pair_two.segment_length / self.pair_one.segment_length

    def to_text(self) -> str:
        """Describe the scale factor for reports."""
        return f"Scale factor ({self.direction.label()}): {self.scale_factor:.6f}\n"


@dataclass(frozen=True)
class CorrespondingPointPair:
    """
    One point on the moving image and its counterpart on the fixed image.

    Attributes:
        moving: Point on the moving image
        fixed: Point on the fixed image
    """
    moving: Point
    fixed: Point

    def distance(self) -> float:
        """Euclidean distance between the two points."""
        return math.hypot(self.moving.x - self.fixed.x, self.moving.y - self.fixed.y)

    def to_text(self) -> str:
        """Return ``(mx, my) X (fx, fy)``."""
        return (
            f"({self.moving.x}, {self.moving.y}) X "
            f"({self.fixed.x}, {self.fixed.y})"
        )


def euclidean_distance(p: Tuple[float, float], q: Tuple[float, float]) -> float:
    """Euclidean distance between two (possibly fractional) coordinates."""
    return math.hypot(p[0] - q[0], p[1] - q[1])


def parse_control_points(coords) -> Tuple[CorrespondingPointPair, CorrespondingPointPair]:
    """
    Build the two corresponding pairs from eight integers.

    Order: ``[m1x, m1y, f1x, f1y, m2x, m2y, f2x, f2y]``. Pair one is the
    unconstrained (translation) pair, pair two the constrained (rotation)
    pair.

    Args:
        coords: Sequence of eight integer coordinates

    Returns:
        Tuple of (unconstrained pair, constrained pair)

    Raises:
        InputValidationError: If the sequence is missing or not eight integers
    """
    if coords is None:
        raise InputValidationError("Control points are missing")

    coords = list(coords)
    if len(coords) != 8:
        raise InputValidationError(
            f"Expected 8 control-point coordinates (4 points), got {len(coords)}"
        )

    try:
        values = [int(c) for c in coords]
    except (TypeError, ValueError) as exc:
        raise InputValidationError(f"Control points must be integers: {coords}") from exc

    # Reject values int() would truncate
    if any(value != c for value, c in zip(values, coords)):
        raise InputValidationError(f"Control points must be integral: {coords}")

    unconstrained = CorrespondingPointPair(
        moving=Point(values[0], values[1]),
        fixed=Point(values[2], values[3])
    )
    constrained = CorrespondingPointPair(
        moving=Point(values[4], values[5]),
        fixed=Point(values[6], values[7])
    )
    return unconstrained, constrained
