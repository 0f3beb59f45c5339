"""
Registration metadata.

Plain immutable records describing one registration run. Rendering to
XML or text lives in the ``export`` package.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from ..geometry.points import Point, ScaleFactorDirection
from .canvas import Padding
from .overlap import DilationKernelParams


Matrix = Tuple[Tuple[float, ...], ...]


@dataclass(frozen=True)
class ImageSize:
    """Width x height of an image."""
    width: int
    height: int

    def wxh(self) -> str:
        """Return ``WxH``."""
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class TranslationMetadata:
    """
    Translation applied to the moving image.

    Attributes:
        tx: Shift along x (fixed1.x - moving1.x)
        ty: Shift along y (fixed1.y - moving1.y)
        matrix: 2x3 translation matrix, integer entries
    """
    tx: int
    ty: int
    matrix: Matrix

    def matrix_rows(self) -> Tuple[str, ...]:
        """Each matrix row as space-separated text."""
        return tuple(" ".join(str(int(v)) for v in row) for row in self.matrix)


@dataclass(frozen=True)
class RotationMetadata:
    """
    Rotation applied to the translated moving image.

    Attributes:
        angle_diff_degrees: angle(fixed segment) - angle(moving segment)
        center_of_rotation: First control point of the fixed image
        matrix: 2x3 rotation matrix
    """
    angle_diff_degrees: float
    center_of_rotation: Point
    matrix: Matrix

    def matrix_rows(self) -> Tuple[str, ...]:
        """Each matrix row as space-separated text."""
        return tuple(" ".join(f"{v:.6f}" for v in row) for row in self.matrix)


@dataclass(frozen=True)
class ScaleFactorMetadata:
    """Ratio of segment lengths and which image is the numerator."""
    value: float
    direction: ScaleFactorDirection = ScaleFactorDirection.IMG1_TO_IMG2

    def direction_label(self) -> str:
        return self.direction.label()


@dataclass(frozen=True)
class ControlPointsMetadata:
    """
    Control points after registration.

    ``points`` maps ``pt1`` .. ``pt4`` to coordinates in the fixed image
    frame: pt1/pt3 are the registered moving points of pair one/two,
    pt2/pt4 the fixed points of pair one/two.

    Attributes:
        points: Control point coordinates keyed by ``ptN``
        unconstrained_distance: Post-registration distance of the
            translation pair
        constrained_distance: Post-registration distance of the rotation pair
    """
    points: Tuple[Tuple[str, Point], ...]
    unconstrained_distance: float
    constrained_distance: float

    def get_control_point(self, number: int) -> Point:
        """
        Args:
            number: 1, 2, 3 or 4

        Raises:
            KeyError: For any other number
        """
        key = f"pt{number}"
        for name, point in self.points:
            if name == key:
                return point
        raise KeyError(key)


@dataclass(frozen=True)
class GrayscaleConversion:
    """Whether each source image had to be converted to grayscale."""
    img1: bool = False
    img2: bool = False

    def any(self) -> bool:
        return self.img1 or self.img2

    @staticmethod
    def yes_no(flag: bool) -> str:
        return "YES" if flag else "NO"


@dataclass(frozen=True)
class RegistrationMetadata:
    """
    Snapshot of everything computed by one registration run.

    Attributes:
        translation: Translation values and matrix
        rotation: Rotation angle, center and matrix
        scale_factor: Ratio of segment lengths
        control_points: Registered control points and residual distances
        src_moving_size: Size of the source moving image
        src_fixed_size: Size of the source fixed image
        padded_size: Size of the common canvas
        registered_size: Size of the cropped outputs
        convert_to_grayscale: Grayscale conversion flags
        overlap_roi_corners: ROI top-left and bottom-right as ``x,y``
        dilation_kernel: Structuring element used for the overlap
        pad_moving: Margins of the moving image on the canvas
        pad_fixed: Margins of the fixed image on the canvas
    """
    translation: TranslationMetadata
    rotation: RotationMetadata
    scale_factor: ScaleFactorMetadata
    control_points: ControlPointsMetadata
    src_moving_size: ImageSize
    src_fixed_size: ImageSize
    padded_size: ImageSize
    registered_size: ImageSize
    convert_to_grayscale: GrayscaleConversion = field(default_factory=GrayscaleConversion)
    overlap_roi_corners: Tuple[str, str] = ("", "")
    dilation_kernel: DilationKernelParams = field(default_factory=DilationKernelParams)
    pad_moving: Padding = field(default_factory=Padding)
    pad_fixed: Padding = field(default_factory=Padding)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            'translation': {
                'tx': self.translation.tx,
                'ty': self.translation.ty,
                'matrix': [list(row) for row in self.translation.matrix],
            },
            'rotation': {
                'angle_diff_degrees': self.rotation.angle_diff_degrees,
                'center_of_rotation': list(self.rotation.center_of_rotation.as_tuple()),
                'matrix': [list(row) for row in self.rotation.matrix],
            },
            'scale_factor': {
                'value': self.scale_factor.value,
                'direction': self.scale_factor.direction_label(),
            },
            'control_points': {
                'points': {name: list(p.as_tuple()) for name, p in self.control_points.points},
                'euclidean_distance': {
                    'unconstrained': self.control_points.unconstrained_distance,
                    'constrained': self.control_points.constrained_distance,
                },
            },
            'image_sizes': {
                'src_moving': self.src_moving_size.wxh(),
                'src_fixed': self.src_fixed_size.wxh(),
                'padded': self.padded_size.wxh(),
                'registered': self.registered_size.wxh(),
            },
            'convert_to_grayscale': {
                'img1': self.convert_to_grayscale.img1,
                'img2': self.convert_to_grayscale.img2,
            },
            'overlap_roi_corners': list(self.overlap_roi_corners),
            'dilation_kernel': {
                'shape': self.dilation_kernel.shape,
                'size': self.dilation_kernel.size,
            },
            'padding': {
                'moving': self.pad_moving.to_dict(),
                'fixed': self.pad_fixed.to_dict(),
            },
        }
