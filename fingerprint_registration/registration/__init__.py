"""
Rigid registration pipeline.

This package provides:
- Common padded canvas and region-of-interest types
- Overlap engine deriving the crop ROI
- Registration metadata records
- The Registrator orchestrating a full run
"""

from .canvas import (
    Padding,
    RegionOfInterest,
    CanvasLayout,
    compute_canvas_layout
)
from .overlap import (
    DilationKernelParams,
    OverlapEngine
)
from .metadata import (
    ImageSize,
    TranslationMetadata,
    RotationMetadata,
    ScaleFactorMetadata,
    ControlPointsMetadata,
    GrayscaleConversion,
    RegistrationMetadata
)
from .registrator import Registrator

__all__ = [
    # Canvas
    'Padding',
    'RegionOfInterest',
    'CanvasLayout',
    'compute_canvas_layout',
    # Overlap
    'DilationKernelParams',
    'OverlapEngine',
    # Metadata
    'ImageSize',
    'TranslationMetadata',
    'RotationMetadata',
    'ScaleFactorMetadata',
    'ControlPointsMetadata',
    'GrayscaleConversion',
    'RegistrationMetadata',
    # Pipeline
    'Registrator',
]
