"""
Rigid registration of fingerprint image pairs from operator-selected
control points.

Typical use:

    from fingerprint_registration import Registrator

    registrator = Registrator(moving_png, fixed_png, [m1x, m1y, f1x, f1y, m2x, m2y, f2x, f2y])
    metadata = registrator.perform_registration()
    registrator.save_cropped_registered_image_to_disk("moving_registered.png")
"""

import cv2

from .exceptions import (
    RegistrationError,
    InputValidationError,
    GeometryError,
    UnderlyingImageOperationError,
    RegistrationStateError
)
from .geometry import (
    Point,
    SameImagePointPair,
    PointPairScale,
    CorrespondingPointPair,
    ScaleFactorDirection
)
from .registration import (
    Padding,
    RegionOfInterest,
    DilationKernelParams,
    OverlapEngine,
    RegistrationMetadata,
    Registrator
)
from .export import metadata_to_xml, metadata_to_text

__version__ = "0.1.0"


def print_version() -> str:
    """Return the versions of this package and of OpenCV."""
    return f"fingerprint-registration {__version__}, OpenCV {cv2.__version__}"


__all__ = [
    'RegistrationError',
    'InputValidationError',
    'GeometryError',
    'UnderlyingImageOperationError',
    'RegistrationStateError',
    'Point',
    'SameImagePointPair',
    'PointPairScale',
    'CorrespondingPointPair',
    'ScaleFactorDirection',
    'Padding',
    'RegionOfInterest',
    'DilationKernelParams',
    'OverlapEngine',
    'RegistrationMetadata',
    'Registrator',
    'metadata_to_xml',
    'metadata_to_text',
    'print_version',
    '__version__',
]
