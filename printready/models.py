"""
Value types for a print job.

Everything here is immutable and validated on construction, so a job that
reaches the compositor is already known to be geometrically sound.
"""

import math
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from .errors import (
    ValidationError, InvalidRotationError, InvalidDimensionsError, InvalidZoomError
)
from .units import PRINT_DPI

VALID_ROTATIONS = (0, 90, 180, 270)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class ImageTransform:
    """Crop/zoom/rotate/pan chosen by the customer in the designer.

    pan_x/pan_y are source pixels measured after rotation and move the crop
    window's center, not the image.
    """
    rotation: int = 0
    zoom: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0

    def __post_init__(self):
        rotation = self.rotation
        if not _is_number(rotation) or not math.isfinite(rotation) or rotation != int(rotation):
            raise InvalidRotationError(rotation)
        if int(rotation) not in VALID_ROTATIONS:
            raise InvalidRotationError(rotation)
        object.__setattr__(self, 'rotation', int(rotation))

        if not _is_number(self.zoom) or not math.isfinite(self.zoom) or self.zoom < 1.0:
            raise InvalidZoomError(self.zoom)

        for name in ('pan_x', 'pan_y'):
            value = getattr(self, name)
            if not _is_number(value) or not math.isfinite(value):
                raise ValidationError(
                    f"Invalid {name}: {value}",
                    details={name: value},
                    suggestions=["Pan offsets must be finite numbers"]
                )


@dataclass(frozen=True)
class PrintDimensions:
    """Physical trim size in inches."""
    width: float
    height: float

    def __post_init__(self):
        for value in (self.width, self.height):
            if not _is_number(value) or not math.isfinite(value) or value <= 0:
                raise InvalidDimensionsError(self.width, self.height)
            # Pixel count must stay representable
            if not math.isfinite(value * PRINT_DPI):
                raise InvalidDimensionsError(self.width, self.height)


@dataclass(frozen=True)
class CropRegion:
    """Rectangle in rotated source-pixel space."""
    left: int
    top: int
    width: int
    height: int

    @property
    def box(self) -> Tuple[int, int, int, int]:
        """(left, upper, right, lower) as Pillow's crop() expects."""
        return (self.left, self.top, self.left + self.width, self.top + self.height)

    @property
    def area(self) -> int:
        return max(0, self.width) * max(0, self.height)


@dataclass(frozen=True)
class GenerationOptions:
    include_bleed: bool = False
    include_crop_marks: bool = False


@dataclass(frozen=True)
class PrintSide:
    """One face of a print: encoded image plus the transform applied to it."""
    image_data: Union[bytes, str]
    transform: ImageTransform
    label: str = "front"


@dataclass(frozen=True)
class PrintJob:
    """A complete generation request. Built per request and then discarded."""
    front: PrintSide
    dimensions: PrintDimensions
    options: GenerationOptions = field(default_factory=GenerationOptions)
    back: Optional[PrintSide] = None
    filename: Optional[str] = None

    @property
    def sides(self) -> Tuple[PrintSide, ...]:
        if self.back is None:
            return (self.front,)
        return (self.front, self.back)

    @property
    def is_double_sided(self) -> bool:
        return self.back is not None


@dataclass(frozen=True)
class ComposedRaster:
    """Print-resolution JPEG produced by the compositor for one side."""
    data: bytes
    width: int
    height: int
    label: str = "front"

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)
