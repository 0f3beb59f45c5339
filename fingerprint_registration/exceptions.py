"""
Exception hierarchy for the fingerprint registration package.

Every failure raised by a registration run derives from
``RegistrationError`` so callers can treat any of them as
"registration did not complete for this image pair".
"""


class RegistrationError(Exception):
    """Base class for all registration errors."""
    pass


class InputValidationError(RegistrationError):
    """
    Raised for missing or malformed input.

    Covers empty or undecodable image buffers, an incomplete set of
    control points, and same-image points that define a degenerate
    (zero-length) segment.
    """
    pass


class GeometryError(RegistrationError):
    """Raised when the registered images do not overlap (empty ROI)."""
    pass


class UnderlyingImageOperationError(RegistrationError):
    """
    Raised when an OpenCV primitive fails.

    The original ``cv2.error`` is chained as ``__cause__`` and its
    message is kept in ``str(exc)``.
    """
    
    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"{operation} failed: {message}")


class RegistrationStateError(RegistrationError):
    """Raised when a Registrator is reused or read before producing output."""
    pass
