"""
Unit tests for print job value types and their construction-time validation.
"""

import dataclasses
import math

import pytest

from printready.errors import (
    ValidationError, InvalidRotationError, InvalidDimensionsError, InvalidZoomError
)
from printready.models import (
    CropRegion, GenerationOptions, ImageTransform, PrintDimensions, PrintJob, PrintSide
)


class TestImageTransform:

    @pytest.mark.parametrize('rotation', [0, 90, 180, 270, 90.0])
    def test_valid_rotations(self, rotation):
        transform = ImageTransform(rotation=rotation)
        assert transform.rotation == int(rotation)
        assert isinstance(transform.rotation, int)

    @pytest.mark.parametrize('rotation', [45, -90, 360, 90.5, math.nan, '90', True])
    def test_invalid_rotations(self, rotation):
        with pytest.raises(InvalidRotationError):
            ImageTransform(rotation=rotation)

    @pytest.mark.parametrize('zoom', [0.99, 0, -1, math.inf, math.nan, '1.5'])
    def test_invalid_zoom(self, zoom):
        with pytest.raises(InvalidZoomError):
            ImageTransform(zoom=zoom)

    def test_zoom_of_one_is_allowed(self):
        assert ImageTransform(zoom=1).zoom == 1

    def test_non_finite_pan_rejected(self):
        with pytest.raises(ValidationError):
            ImageTransform(pan_x=math.inf)
        with pytest.raises(ValidationError):
            ImageTransform(pan_y=math.nan)

    def test_negative_pan_is_allowed(self):
        transform = ImageTransform(pan_x=-1e9, pan_y=1e9)
        assert transform.pan_x == -1e9

    def test_is_immutable(self):
        transform = ImageTransform()
        with pytest.raises(dataclasses.FrozenInstanceError):
            transform.zoom = 2.0


class TestPrintDimensions:

    @pytest.mark.parametrize('width,height', [(0, 10), (10, 0), (-1, 10), (math.inf, 10), (10, math.nan)])
    def test_invalid_dimensions(self, width, height):
        with pytest.raises(InvalidDimensionsError) as exc_info:
            PrintDimensions(width=width, height=height)
        assert exc_info.value.details['width'] == width or math.isnan(width)

    @pytest.mark.parametrize('width,height', [(1e307, 1), (1, 1e307)])
    def test_pixel_count_overflow_rejected(self, width, height):
        with pytest.raises(InvalidDimensionsError):
            PrintDimensions(width=width, height=height)

    def test_valid_dimensions(self):
        dims = PrintDimensions(width=24, height=36)
        assert (dims.width, dims.height) == (24, 36)


class TestCropRegion:

    def test_box_and_area(self):
        region = CropRegion(left=10, top=20, width=100, height=50)
        assert region.box == (10, 20, 110, 70)
        assert region.area == 5000

    def test_zero_area(self):
        assert CropRegion(0, 0, 0, 50).area == 0


class TestPrintJob:

    def test_single_sided(self):
        job = PrintJob(
            front=PrintSide(b'front', ImageTransform()),
            dimensions=PrintDimensions(1, 1),
        )
        assert not job.is_double_sided
        assert len(job.sides) == 1
        assert job.options == GenerationOptions()

    def test_double_sided_order(self):
        job = PrintJob(
            front=PrintSide(b'front', ImageTransform(), label='front'),
            back=PrintSide(b'back', ImageTransform(rotation=180), label='back'),
            dimensions=PrintDimensions(1, 1),
        )
        assert job.is_double_sided
        assert [side.label for side in job.sides] == ['front', 'back']
