"""
Error handling for the Print-Ready Output Generator.

Provides specific exception types for each failure mode of a print job
and enough context for the caller to surface a useful message.
"""

from typing import Dict, List, Any, Tuple


class PrintReadyError(Exception):
    """Base exception for all print generation errors."""

    status_code = 500

    def __init__(self, message: str, details: Dict[str, Any] = None, suggestions: List[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.suggestions = suggestions or []

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'details': self.details,
            'suggestions': self.suggestions
        }


class ValidationError(PrintReadyError):
    """Raised when request fields are missing or malformed."""
    status_code = 400


class DecodeError(PrintReadyError):
    """Raised when image bytes cannot be decoded into a raster."""
    status_code = 422


class LayoutError(PrintReadyError):
    """Raised when an internal geometry invariant is violated."""
    status_code = 500


class EncodingError(PrintReadyError):
    """Raised when producing the final output bytes fails."""
    status_code = 500


class CapacityError(PrintReadyError):
    """Raised when the server is already running its maximum number of jobs."""
    status_code = 503


# Specific error classes for common failure modes

class InvalidRotationError(ValidationError):
    """Raised when a rotation is not one of the four right angles."""

    def __init__(self, rotation: Any):
        super().__init__(
            f"Invalid rotation: {rotation} (must be 0, 90, 180 or 270)",
            details={'rotation': rotation},
            suggestions=["Rotate the image in 90 degree steps in the designer"]
        )


class InvalidDimensionsError(ValidationError):
    """Raised when print dimensions are not positive."""

    def __init__(self, width: Any, height: Any):
        super().__init__(
            f"Invalid print dimensions: {width} x {height} inches",
            details={'width': width, 'height': height},
            suggestions=["Print width and height must both be greater than zero"]
        )


class InvalidZoomError(ValidationError):
    """Raised when zoom would require pixels outside the source image."""

    def __init__(self, zoom: Any):
        super().__init__(
            f"Invalid zoom: {zoom} (must be at least 1.0)",
            details={'zoom': zoom},
            suggestions=["Zoom out no further than 100% in the designer"]
        )


class CropOutOfBoundsError(ValidationError):
    """Raised under the 'reject' overflow policy when the crop window leaves the image."""

    def __init__(self, requested: Tuple[int, int, int, int], image_size: Tuple[int, int]):
        super().__init__(
            "Requested crop window extends outside the image",
            details={
                'requested_region': list(requested),
                'image_width': image_size[0],
                'image_height': image_size[1]
            },
            suggestions=[
                "Reduce the zoom or move the image back inside the frame",
                "Use a higher resolution source image"
            ]
        )


class OutputTooLargeError(ValidationError):
    """Raised when the target raster would exceed the configured pixel budget."""

    def __init__(self, target_size: Tuple[int, int], limit: int):
        width, height = target_size
        super().__init__(
            f"Print is too large to render: {width}x{height} pixels exceeds {limit} pixels",
            details={'target_width': width, 'target_height': height, 'max_pixels': limit},
            suggestions=["Choose a smaller print size"]
        )


class EmptyCropRegionError(LayoutError):
    """Raised when the clamped crop rectangle has no area."""

    def __init__(self, region: Tuple[int, int, int, int], image_size: Tuple[int, int]):
        super().__init__(
            f"Crop region {region} has zero area inside {image_size[0]}x{image_size[1]} image",
            details={
                'region': list(region),
                'image_width': image_size[0],
                'image_height': image_size[1]
            }
        )


class RasterSizeMismatchError(LayoutError):
    """Raised when a composed raster is not exactly the target pixel size."""

    def __init__(self, label: str, actual: Tuple[int, int], expected: Tuple[int, int]):
        super().__init__(
            f"{label} raster is {actual[0]}x{actual[1]}, expected {expected[0]}x{expected[1]}",
            details={
                'side': label,
                'actual': list(actual),
                'expected': list(expected)
            }
        )
