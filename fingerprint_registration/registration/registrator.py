"""
Rigid registration of a fingerprint image pair.

The Registrator runs the whole pipeline for one pair of images and two
pairs of corresponding control points:

1. Validate inputs
2. Convert both images to grayscale
3. Translation: moving control point #1 onto fixed control point #1
4. Rotation: about fixed control point #1 by the segment angle difference
5. Warp the moving image (translation first, rotation second)
6. Pad both images to a common canvas
7. Overlap the registered images to find the common ROI
8. Crop both images to the ROI
9. Render a color overlay of the crops
10. Assemble the registration metadata

An instance is single-use: it holds the results of exactly one run.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import cv2
import numpy as np

from ..exceptions import (
    GeometryError,
    InputValidationError,
    RegistrationError,
    RegistrationStateError,
)
from ..export.xml_metadata import metadata_to_xml
from ..geometry.points import (
    CorrespondingPointPair,
    Point,
    PointPairScale,
    SameImagePointPair,
    ScaleFactorDirection,
    euclidean_distance,
    parse_control_points,
)
from ..geometry.transforms import (
    compose,
    matrix_rows,
    rotation_matrix,
    transform_points,
    translation_matrix,
)
from ..imaging import cv_ops
from ..utils.config import Config, DEFAULT_CONFIG, validate_config
from ..utils.io import write_bytes
from .canvas import CanvasLayout, Padding, RegionOfInterest, compute_canvas_layout
from .metadata import (
    ControlPointsMetadata,
    GrayscaleConversion,
    ImageSize,
    RegistrationMetadata,
    RotationMetadata,
    ScaleFactorMetadata,
    TranslationMetadata,
)
from .overlap import DilationKernelParams, OverlapEngine

logger = logging.getLogger(__name__)


ImageInput = Union[bytes, bytearray, memoryview, np.ndarray]
ControlPointsInput = Union[Sequence[int], Tuple[CorrespondingPointPair, CorrespondingPointPair]]


class Registrator:
    """
    Registers a moving fingerprint image onto a fixed one.

    Images may be given as encoded buffers (PNG, TIFF, BMP, ...) or as
    already decoded ``numpy`` arrays; both are copied at construction.
    Control points are eight integers
    ``[m1x, m1y, f1x, f1y, m2x, m2y, f2x, f2y]`` or two
    ``CorrespondingPointPair`` objects (unconstrained, constrained).

    Example:
        registrator = Registrator(moving_png, fixed_png, [10, 10, 20, 20, 110, 10, 20, 120])
        metadata = registrator.perform_registration()
        cropped = registrator.get_cropped_registered_image()
    """

    def __init__(
        self,
        moving_image: ImageInput,
        fixed_image: ImageInput,
        control_points: ControlPointsInput,
        config: Optional[Config] = None
    ):
        """
        Initialize the registrator.

        Args:
            moving_image: Image to be transformed
            fixed_image: Reference image
            control_points: Corresponding control points
            config: Configuration (default: DEFAULT_CONFIG)

        Raises:
            InputValidationError: If the configuration holds an unknown or
                out-of-range value
        """
        try:
            self.config = validate_config(config or DEFAULT_CONFIG)
        except ValueError as exc:
            raise InputValidationError(f"Invalid configuration: {exc}") from exc

        self._moving_input = self._copy_input(moving_image)
        self._fixed_input = self._copy_input(fixed_image)
        self._control_points = None if control_points is None else tuple(control_points)

        self.overlap_engine = OverlapEngine(
            kernel=DilationKernelParams(
                shape=self.config.overlap.kernel_shape,
                size=self.config.overlap.kernel_size
            ),
            png_strategy=self.config.overlap.png_strategy_flag
        )

        self._performed = False
        self._metadata: Optional[RegistrationMetadata] = None
        self._layout: Optional[CanvasLayout] = None
        self._roi: Optional[RegionOfInterest] = None

        self._padded_registered_moving: Optional[np.ndarray] = None
        self._padded_fixed: Optional[np.ndarray] = None
        self._cropped_registered: Optional[np.ndarray] = None
        self._cropped_fixed: Optional[np.ndarray] = None
        self._overlay: Optional[np.ndarray] = None

    @staticmethod
    def _copy_input(image: ImageInput):
        if image is None:
            return None
        if isinstance(image, np.ndarray):
            return image.copy()
        return bytes(image)

    # -------------------------------------------------------------------------
    # Pipeline
    # -------------------------------------------------------------------------

    def perform_registration(self) -> RegistrationMetadata:
        """
        Run the registration.

        Returns:
            The registration metadata

        Raises:
            InputValidationError: Missing/invalid image or control points
            GeometryError: Registered images do not overlap
            UnderlyingImageOperationError: An OpenCV primitive failed
            RegistrationStateError: The instance was already used
        """
        if self._performed:
            raise RegistrationStateError(
                "Registrator is single-use; create a new instance for another pair"
            )
        self._performed = True

        try:
            return self._run()
        except RegistrationError as exc:
            logger.error(f"Registration aborted: {type(exc).__name__}: {exc}")
            raise

    def _run(self) -> RegistrationMetadata:
        # 1. Validate inputs
        unconstrained, constrained = self._parse_points()
        moving_src = self._load_image(self._moving_input, "Moving")
        fixed_src = self._load_image(self._fixed_input, "Fixed")

        moving_segment = SameImagePointPair(unconstrained.moving, constrained.moving)
        fixed_segment = SameImagePointPair(unconstrained.fixed, constrained.fixed)
        scale = PointPairScale(moving_segment, fixed_segment, ScaleFactorDirection.IMG1_TO_IMG2)

        self._warn_points_outside(moving_segment.points(), moving_src, "moving")
        self._warn_points_outside(fixed_segment.points(), fixed_src, "fixed")

        # 2. Grayscale normalization
        moving, moving_converted = cv_ops.to_grayscale(moving_src)
        fixed, fixed_converted = cv_ops.to_grayscale(fixed_src)
        if moving_converted or fixed_converted:
            logger.info(
                f"Converted to grayscale: moving={moving_converted}, fixed={fixed_converted}"
            )

        moving_h, moving_w = moving.shape
        fixed_h, fixed_w = fixed.shape

        # 3. Translation
        tx = unconstrained.fixed.x - unconstrained.moving.x
        ty = unconstrained.fixed.y - unconstrained.moving.y
        translation = translation_matrix(tx, ty)
        center = unconstrained.fixed
        logger.debug(f"Translation: tx={tx}, ty={ty}")

        # 4. Rotation
        angle_diff = fixed_segment.angle_degrees - moving_segment.angle_degrees
        # Normalize to (-180, 180]
        while angle_diff > 180.0:
            angle_diff -= 360.0
        while angle_diff <= -180.0:
            angle_diff += 360.0
        rotation = rotation_matrix(center.as_tuple(), angle_diff)
        registration = compose(translation, rotation)
        logger.debug(
            f"Rotation: moving angle {moving_segment.angle_degrees:.6f}, "
            f"fixed angle {fixed_segment.angle_degrees:.6f}, diff {angle_diff:.6f} "
            f"about {center.as_tuple()}"
        )

        # 5-6. Warp onto the common canvas and pad the fixed image
        layout = compute_canvas_layout(
            (fixed_w, fixed_h), (moving_w, moving_h), (tx, ty), registration
        )
        self._layout = layout
        ox, oy = layout.offset_x, layout.offset_y
        logger.debug(
            f"Canvas: {layout.width}x{layout.height}, fixed origin at ({ox}, {oy})"
        )

        background = self.config.registration.background_value
        interpolation = self.config.registration.interpolation_flag

        canvas_translation = translation_matrix(tx + ox, ty + oy)
        canvas_rotation = rotation_matrix((center.x + ox, center.y + oy), angle_diff)

        translated = cv_ops.warp_affine(
            moving, canvas_translation, layout.size, background, interpolation
        )
        self._padded_registered_moving = cv_ops.warp_affine(
            translated, canvas_rotation, layout.size, background, interpolation
        )
        self._padded_fixed = cv_ops.pad(
            fixed,
            layout.pad_fixed.top,
            layout.pad_fixed.bottom,
            layout.pad_fixed.left,
            layout.pad_fixed.right,
            background
        )

        # 7. Overlap / ROI
        self._check_footprints_intersect(
            (moving_w, moving_h), (fixed_w, fixed_h),
            compose(canvas_translation, canvas_rotation), layout
        )
        roi = self.overlap_engine.compute(self._padded_registered_moving, self._padded_fixed)
        if not roi.is_within(layout.width, layout.height):
            raise GeometryError(f"ROI {roi.to_dict()} exceeds the padded canvas")
        self._roi = roi

        # 8. Crop
        self._cropped_registered = cv_ops.crop(
            self._padded_registered_moving, roi.x, roi.y, roi.width, roi.height
        )
        self._cropped_fixed = cv_ops.crop(
            self._padded_fixed, roi.x, roi.y, roi.width, roi.height
        )

        # 9. Overlay
        self._overlay = cv_ops.merge_overlay(self._cropped_registered, self._cropped_fixed)

        # 10. Metadata
        registered_moving = transform_points(
            registration,
            [unconstrained.moving.as_tuple(), constrained.moving.as_tuple()]
        )
        unconstrained_distance = euclidean_distance(
            registered_moving[0], unconstrained.fixed.as_tuple()
        )
        constrained_distance = euclidean_distance(
            registered_moving[1], constrained.fixed.as_tuple()
        )

        self._metadata = RegistrationMetadata(
            translation=TranslationMetadata(
                tx=tx, ty=ty,
                matrix=tuple(tuple(row) for row in matrix_rows(translation, as_int=True))
            ),
            rotation=RotationMetadata(
                angle_diff_degrees=angle_diff,
                center_of_rotation=center,
                matrix=tuple(tuple(row) for row in matrix_rows(rotation))
            ),
            scale_factor=ScaleFactorMetadata(scale.scale_factor, scale.direction),
            control_points=ControlPointsMetadata(
                points=(
                    ("pt1", self._round_point(registered_moving[0])),
                    ("pt2", unconstrained.fixed),
                    ("pt3", self._round_point(registered_moving[1])),
                    ("pt4", constrained.fixed),
                ),
                unconstrained_distance=unconstrained_distance,
                constrained_distance=constrained_distance
            ),
            src_moving_size=ImageSize(moving_w, moving_h),
            src_fixed_size=ImageSize(fixed_w, fixed_h),
            padded_size=ImageSize(layout.width, layout.height),
            registered_size=ImageSize(roi.width, roi.height),
            convert_to_grayscale=GrayscaleConversion(moving_converted, fixed_converted),
            overlap_roi_corners=tuple(roi.corners()),
            dilation_kernel=self.overlap_engine.kernel,
            pad_moving=layout.pad_moving,
            pad_fixed=layout.pad_fixed
        )

        logger.info(
            f"Registered {moving_w}x{moving_h} onto {fixed_w}x{fixed_h}: "
            f"t=({tx}, {ty}), angle={angle_diff:.3f}, sf={scale.scale_factor:.4f}, "
            f"ROI {roi.width}x{roi.height} at {roi.top_left}"
        )
        return self._metadata

    def _parse_points(self) -> Tuple[CorrespondingPointPair, CorrespondingPointPair]:
        points = self._control_points
        if points is None:
            raise InputValidationError("Control points are missing")

        if len(points) == 2 and all(isinstance(p, CorrespondingPointPair) for p in points):
            return points[0], points[1]

        return parse_control_points(points)

    @staticmethod
    def _load_image(image: Optional[ImageInput], label: str) -> np.ndarray:
        if image is None:
            raise InputValidationError(f"{label} image is missing")

        if isinstance(image, np.ndarray):
            decoded = image
        else:
            try:
                decoded = cv_ops.decode_image(image)
            except InputValidationError as exc:
                raise InputValidationError(f"{label} image: {exc}") from exc

        if decoded.size == 0 or decoded.ndim not in (2, 3):
            raise InputValidationError(f"{label} image is empty or not a 2-D raster")
        if decoded.dtype != np.uint8:
            raise InputValidationError(
                f"{label} image must be 8-bit, got {decoded.dtype}"
            )
        return decoded

    @staticmethod
    def _warn_points_outside(points: List[Point], image: np.ndarray, kind: str) -> None:
        height, width = image.shape[:2]
        for point in points:
            if not (0 <= point.x < width and 0 <= point.y < height):
                logger.warning(
                    f"Control point {point.as_tuple()} lies outside the "
                    f"{width}x{height} {kind} image"
                )

    @staticmethod
    def _check_footprints_intersect(
        moving_size: Tuple[int, int],
        fixed_size: Tuple[int, int],
        canvas_registration: np.ndarray,
        layout: CanvasLayout
    ) -> None:
        moving_w, moving_h = moving_size
        fixed_w, fixed_h = fixed_size

        footprint = cv_ops.warp_affine(
            np.ones((moving_h, moving_w), dtype=np.uint8),
            canvas_registration,
            layout.size,
            border_value=0,
            interpolation=cv2.INTER_NEAREST
        )
        ox, oy = layout.offset_x, layout.offset_y
        if not footprint[oy:oy + fixed_h, ox:ox + fixed_w].any():
            raise GeometryError(
                "Registered moving image does not overlap the fixed image"
            )

    @staticmethod
    def _round_point(xy) -> Point:
        return Point(int(round(float(xy[0]))), int(round(float(xy[1]))))

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    def _require(self, value, name: str):
        if value is None:
            state = "has not run" if not self._performed else "did not produce it"
            raise RegistrationStateError(f"{name} is not available: registration {state}")
        return value

    def _encode(self, image: Optional[np.ndarray], name: str) -> bytes:
        return cv_ops.encode_png(
            self._require(image, name), self.config.overlap.png_strategy_flag
        )

    def get_metadata(self) -> RegistrationMetadata:
        """Metadata of the completed run."""
        return self._require(self._metadata, "Metadata")

    def get_xml_metadata(self) -> List[str]:
        """Metadata of the completed run as a list of XML lines."""
        return metadata_to_xml(self.get_metadata())

    def get_region_of_interest(self) -> RegionOfInterest:
        """ROI in padded-canvas coordinates."""
        return self._require(self._roi, "Region of interest")

    def get_cropped_registered_image(self) -> bytes:
        """Registered, cropped moving image as PNG."""
        return self._encode(self._cropped_registered, "Cropped registered image")

    def get_cropped_fixed_image(self) -> bytes:
        """Cropped fixed image as PNG."""
        return self._encode(self._cropped_fixed, "Cropped fixed image")

    def get_padded_registered_moving_image(self) -> bytes:
        """Registered moving image on the padded canvas, before cropping, as PNG."""
        return self._encode(self._padded_registered_moving, "Padded registered moving image")

    def get_padded_fixed_image(self) -> bytes:
        """Fixed image on the padded canvas, before cropping, as PNG."""
        return self._encode(self._padded_fixed, "Padded fixed image")

    def get_color_overlaid_registered_images(self) -> bytes:
        """Color overlay of both cropped images as PNG."""
        return self._encode(self._overlay, "Color overlay")

    def get_png_blob(self) -> bytes:
        """Dilated overlap mask used to derive the ROI, as PNG."""
        return self._require(self.overlap_engine.png_blob, "Overlap mask")

    def get_cropped_registered_array(self) -> np.ndarray:
        return self._require(self._cropped_registered, "Cropped registered image").copy()

    def get_cropped_fixed_array(self) -> np.ndarray:
        return self._require(self._cropped_fixed, "Cropped fixed image").copy()

    def get_padded_registered_moving_array(self) -> np.ndarray:
        return self._require(
            self._padded_registered_moving, "Padded registered moving image"
        ).copy()

    def get_padded_fixed_array(self) -> np.ndarray:
        return self._require(self._padded_fixed, "Padded fixed image").copy()

    def get_color_overlay_array(self) -> np.ndarray:
        return self._require(self._overlay, "Color overlay").copy()

    def get_pad_diff_moving(self) -> Padding:
        """Margins of the (translated) moving image on the canvas."""
        return self._require(self._layout, "Padding").pad_moving

    def get_pad_diff_fixed(self) -> Padding:
        """Margins of the fixed image on the canvas."""
        return self._require(self._layout, "Padding").pad_fixed

    def get_moving_pad_size_left(self) -> int:
        return self.get_pad_diff_moving().left

    def get_moving_pad_size_top(self) -> int:
        return self.get_pad_diff_moving().top

    def get_fixed_pad_size_left(self) -> int:
        return self.get_pad_diff_fixed().left

    def get_fixed_pad_size_top(self) -> int:
        return self.get_pad_diff_fixed().top

    def save_cropped_registered_image_to_disk(self, path: Union[str, Path]) -> Path:
        """
        Write the registered, cropped moving image as PNG.

        Args:
            path: Destination file

        Returns:
            The destination path
        """
        return write_bytes(self.get_cropped_registered_image(), path)

    def save_cropped_fixed_image_to_disk(self, path: Union[str, Path]) -> Path:
        """
        Write the cropped fixed image as PNG.

        Args:
            path: Destination file

        Returns:
            The destination path
        """
        return write_bytes(self.get_cropped_fixed_image(), path)
