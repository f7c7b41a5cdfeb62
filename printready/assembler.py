"""
Document assembler for the Print-Ready Output Generator.

This module handles:
- Computing page geometry in points (trim, bleed, image placement)
- Generating registration crop marks around the trim rectangle
- Drawing composed rasters onto PDF pages with ReportLab
- Serializing front and optional back pages into one document

All coordinates are PDF user space: points, origin at the bottom-left.
"""

import io
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from PIL import Image, UnidentifiedImageError
from reportlab import rl_config
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas
from loguru import logger

from .errors import PrintReadyError, LayoutError, EncodingError, RasterSizeMismatchError
from .models import ComposedRaster, GenerationOptions, PrintDimensions
from .units import (
    BLEED_INCHES, CROP_MARK_OFFSET_INCHES, CROP_MARK_LENGTH_INCHES, CROP_MARK_STROKE_PT,
    inches_to_points, page_size_points, target_pixel_size
)

# Embed JPEG rasters as raw binary DCT streams, not ASCII85 text
rl_config.useA85 = 0


@dataclass(frozen=True)
class CropMarkSegment:
    """One registration line. (x0, y0) is the end nearest the trim edge."""
    corner: str
    orientation: str  # 'horizontal' or 'vertical'
    x0: float
    y0: float
    x1: float
    y1: float

    @property
    def length(self) -> float:
        return math.hypot(self.x1 - self.x0, self.y1 - self.y0)


@dataclass(frozen=True)
class PageLayout:
    """Geometry of a single output page."""
    page_width: float
    page_height: float
    trim_width: float
    trim_height: float
    bleed: float
    crop_marks: Tuple[CropMarkSegment, ...] = ()

    @property
    def image_rect(self) -> Tuple[float, float, float, float]:
        """(x, y, width, height) of the drawn image; always the trim area."""
        return (self.bleed, self.bleed, self.trim_width, self.trim_height)

    @property
    def trim_box(self) -> Tuple[float, float, float, float]:
        return (self.bleed, self.bleed, self.bleed + self.trim_width, self.bleed + self.trim_height)

    @property
    def media_box(self) -> Tuple[float, float, float, float]:
        return (0.0, 0.0, self.page_width, self.page_height)


def crop_mark_segments(trim_x: float, trim_y: float, trim_width: float, trim_height: float,
                       offset: float = None, length: float = None) -> List[CropMarkSegment]:
    """
    Two marks per trim corner, each starting `offset` outside the trim edge
    and running `length` further outward along the edge's line.
    """
    if offset is None:
        offset = inches_to_points(CROP_MARK_OFFSET_INCHES)
    if length is None:
        length = inches_to_points(CROP_MARK_LENGTH_INCHES)

    corners = [
        # (name, corner_x, corner_y, h_dir, v_dir)
        ('bottom_left', trim_x, trim_y, -1, -1),
        ('bottom_right', trim_x + trim_width, trim_y, +1, -1),
        ('top_left', trim_x, trim_y + trim_height, -1, +1),
        ('top_right', trim_x + trim_width, trim_y + trim_height, +1, +1),
    ]

    segments = []
    for name, cx, cy, h_dir, v_dir in corners:
        segments.append(CropMarkSegment(
            corner=name, orientation='horizontal',
            x0=cx + offset * h_dir, y0=cy,
            x1=cx + (offset + length) * h_dir, y1=cy,
        ))
        segments.append(CropMarkSegment(
            corner=name, orientation='vertical',
            x0=cx, y0=cy + offset * v_dir,
            x1=cx, y1=cy + (offset + length) * v_dir,
        ))
    return segments


def compute_page_layout(dimensions: PrintDimensions, options: GenerationOptions) -> PageLayout:
    """Page size, image placement and crop marks for one side."""
    trim_width, trim_height = page_size_points(dimensions)
    bleed = inches_to_points(BLEED_INCHES) if options.include_bleed else 0.0

    marks: Tuple[CropMarkSegment, ...] = ()
    if options.include_crop_marks:
        marks = tuple(crop_mark_segments(bleed, bleed, trim_width, trim_height))

    return PageLayout(
        page_width=trim_width + 2 * bleed,
        page_height=trim_height + 2 * bleed,
        trim_width=trim_width,
        trim_height=trim_height,
        bleed=bleed,
        crop_marks=marks,
    )


def verify_raster(raster: ComposedRaster, expected: Tuple[int, int]) -> None:
    """Fail loudly if a raster is not exactly the target pixel size."""
    try:
        with Image.open(io.BytesIO(raster.data)) as header:
            actual = header.size
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
        raise LayoutError(
            f"{raster.label} raster bytes are not a readable image: {e}",
            details={'side': raster.label}
        )

    if actual != raster.size or actual != tuple(expected):
        raise RasterSizeMismatchError(raster.label, actual, expected)


class DocumentAssembler:
    """Lays composed rasters out on pages and serializes them to PDF."""

    def __init__(self, title: str = "Print-ready artwork"):
        self.title = title

    def _draw_page(self, pdf: canvas.Canvas, raster: ComposedRaster, layout: PageLayout) -> None:
        pdf.setPageSize((layout.page_width, layout.page_height))
        pdf.setTrimBox(layout.trim_box)
        pdf.setBleedBox(layout.media_box)

        x, y, width, height = layout.image_rect
        pdf.drawImage(ImageReader(io.BytesIO(raster.data)), x, y, width=width, height=height)

        if layout.crop_marks:
            pdf.saveState()
            pdf.setStrokeColorRGB(0, 0, 0)
            pdf.setLineWidth(CROP_MARK_STROKE_PT)
            for segment in layout.crop_marks:
                pdf.line(segment.x0, segment.y0, segment.x1, segment.y1)
            pdf.restoreState()

        pdf.showPage()

    def assemble(self, front: ComposedRaster, back: Optional[ComposedRaster],
                 dimensions: PrintDimensions, options: GenerationOptions) -> bytes:
        """Build the document: front page first, back page second when present."""
        expected = target_pixel_size(dimensions)
        rasters = [front] if back is None else [front, back]
        for raster in rasters:
            verify_raster(raster, expected)

        # Back pages reuse the front geometry; marks are not mirrored.
        layout = compute_page_layout(dimensions, options)

        buffer = io.BytesIO()
        try:
            pdf = canvas.Canvas(
                buffer,
                pagesize=(layout.page_width, layout.page_height),
                invariant=1,
                pageCompression=1,
            )
            pdf.setTitle(self.title)
            pdf.setCreator("printready")
            for raster in rasters:
                self._draw_page(pdf, raster, layout)
            pdf.save()
        except PrintReadyError:
            raise
        except Exception as e:
            raise EncodingError(
                f"Failed to write PDF document: {e}",
                details={'pages': len(rasters)}
            ) from e

        data = buffer.getvalue()
        logger.info(f"Assembled {len(rasters)} page(s) at {layout.page_width:.2f}x"
                    f"{layout.page_height:.2f}pt (bleed={layout.bleed}pt, "
                    f"crop_marks={len(layout.crop_marks)}) -> {len(data)} bytes")
        return data


def create_document_assembler(title: str = "Print-ready artwork") -> DocumentAssembler:
    """Factory function to create a DocumentAssembler instance."""
    return DocumentAssembler(title)


def assemble(front: ComposedRaster, back: Optional[ComposedRaster],
             dimensions: PrintDimensions, options: GenerationOptions) -> bytes:
    return DocumentAssembler().assemble(front, back, dimensions, options)
