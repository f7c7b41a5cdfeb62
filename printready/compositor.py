"""
Image compositor for the Print-Ready Output Generator.

This module handles:
- Decoding base64/data-URL or raw image payloads
- Applying the customer's right-angle rotation
- Computing the source crop window from zoom and pan
- Resampling the crop to exact 300 DPI print pixels
- Encoding the result as a full-quality 4:4:4 JPEG

Each stage is a plain function taking and returning an image so it can
be exercised on its own; ImageCompositor chains them for one print side.
"""

import base64
import binascii
import io
import re
import time
from typing import Optional, Tuple, Union

from PIL import Image, ImageOps, UnidentifiedImageError
from loguru import logger

from .config import AppConfig, get_config
from .errors import (
    DecodeError, EncodingError, InvalidRotationError,
    CropOutOfBoundsError, EmptyCropRegionError, OutputTooLargeError
)
from .models import ImageTransform, PrintDimensions, PrintSide, CropRegion, ComposedRaster
from .units import PRINT_DPI, round_half_up, target_pixel_size

DATA_URL_PREFIX = re.compile(r'^data:image/[\w.+-]+;base64,', re.IGNORECASE)

# Clockwise rotation in degrees -> lossless Pillow transpose
ROTATIONS = {
    90: Image.Transpose.ROTATE_270,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_90,
}


def configure_imaging(config: AppConfig) -> None:
    """Raise Pillow's decompression-bomb ceiling so full-size print rasters can be re-read."""
    Image.MAX_IMAGE_PIXELS = config.MAX_IMAGE_PIXELS


def decode_payload(data: Union[bytes, bytearray, str]) -> bytes:
    """Turn a data URL, bare base64 string or raw bytes into image file bytes."""
    if isinstance(data, (bytes, bytearray)):
        raw = bytes(data)
    elif isinstance(data, str):
        payload = DATA_URL_PREFIX.sub('', data.strip(), count=1)
        payload = ''.join(payload.split())
        try:
            raw = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(
                f"Image payload is not valid base64: {e}",
                suggestions=["Send the image as a data URL or plain base64 string"]
            )
    else:
        raise DecodeError(f"Unsupported image payload type: {type(data).__name__}")

    if not raw:
        raise DecodeError("Image payload is empty")
    return raw


def decode_image(raw: bytes, apply_exif_orientation: bool = True) -> Image.Image:
    """Decode image file bytes into a fully loaded Pillow image."""
    try:
        image = Image.open(io.BytesIO(raw))
        image.load()
    except Image.DecompressionBombError as e:
        raise DecodeError(
            f"Image has too many pixels to decode safely: {e}",
            suggestions=["Downscale the source image before uploading"]
        )
    except (UnidentifiedImageError, OSError, ValueError, SyntaxError) as e:
        raise DecodeError(
            f"Could not decode image: {e}",
            details={'payload_bytes': len(raw)},
            suggestions=[
                "Use a JPEG, PNG, WebP or TIFF image",
                "Ensure the file is not corrupted or truncated"
            ]
        )

    if image.width <= 0 or image.height <= 0:
        raise DecodeError(f"Decoded image has no pixels: {image.size}")

    logger.debug(f"Decoded {image.format or 'image'} {image.size} mode={image.mode}")

    if apply_exif_orientation:
        image = ImageOps.exif_transpose(image)
    return image


def normalize_mode(image: Image.Image) -> Image.Image:
    """Convert to RGB, flattening any transparency onto white."""
    has_alpha = image.mode in ('RGBA', 'LA', 'PA') or (
        image.mode == 'P' and 'transparency' in image.info
    )
    try:
        if has_alpha:
            rgba = image.convert('RGBA')
            flattened = Image.new('RGB', rgba.size, (255, 255, 255))
            flattened.paste(rgba, mask=rgba.getchannel('A'))
            return flattened
        if image.mode != 'RGB':
            return image.convert('RGB')
    except ValueError as e:
        raise DecodeError(f"Unsupported image mode {image.mode}: {e}")
    return image


def rotate_image(image: Image.Image, rotation: int) -> Image.Image:
    """Rotate clockwise by a right angle; 90/270 swap width and height."""
    if rotation == 0:
        return image
    if rotation not in ROTATIONS:
        raise InvalidRotationError(rotation)
    return image.transpose(ROTATIONS[rotation])


def requested_crop_region(image_width: int, image_height: int,
                          target_width: int, target_height: int,
                          zoom: float, pan_x: float, pan_y: float) -> CropRegion:
    """
    Crop window the customer asked for, before clamping.

    The window is the target size shrunk by zoom, centered on the image
    center minus the pan. Pan moves the visible frame opposite to the drag
    direction of the image, hence the subtraction.
    """
    visible_width = target_width / zoom
    visible_height = target_height / zoom

    center_x = image_width / 2 - pan_x
    center_y = image_height / 2 - pan_y

    return CropRegion(
        left=round_half_up(center_x - visible_width / 2),
        top=round_half_up(center_y - visible_height / 2),
        width=round_half_up(visible_width),
        height=round_half_up(visible_height),
    )


def clamp_crop_region(region: CropRegion, image_width: int, image_height: int) -> CropRegion:
    """Move, then shrink, a crop window so it lies fully inside the image."""
    left = max(0, min(region.left, image_width - region.width))
    top = max(0, min(region.top, image_height - region.height))
    width = min(region.width, image_width - left)
    height = min(region.height, image_height - top)
    return CropRegion(left=left, top=top, width=width, height=height)


def calculate_crop_region(image_width: int, image_height: int,
                          target_width: int, target_height: int,
                          zoom: float, pan_x: float, pan_y: float) -> CropRegion:
    requested = requested_crop_region(
        image_width, image_height, target_width, target_height, zoom, pan_x, pan_y
    )
    return clamp_crop_region(requested, image_width, image_height)


def extract_and_resample(image: Image.Image, region: CropRegion,
                         target_size: Tuple[int, int]) -> Image.Image:
    """Cut the crop region out and Lanczos-resample it to the exact target size."""
    cropped = image.crop(region.box)
    return cropped.resize(target_size, Image.Resampling.LANCZOS)


def encode_raster(image: Image.Image, quality: int = 100,
                  icc_profile: Optional[bytes] = None) -> bytes:
    """Encode as baseline JPEG with no chroma subsampling (4:4:4)."""
    save_kwargs = {
        'format': 'JPEG',
        'quality': quality,
        'subsampling': 0,
        'dpi': (PRINT_DPI, PRINT_DPI),
    }
    if icc_profile:
        save_kwargs['icc_profile'] = icc_profile

    buffer = io.BytesIO()
    try:
        image.save(buffer, **save_kwargs)
    except (OSError, ValueError) as e:
        raise EncodingError(
            f"Failed to encode print raster: {e}",
            details={'size': list(image.size), 'mode': image.mode}
        )
    return buffer.getvalue()


class ImageCompositor:
    """Produces the print-resolution raster for one side of a print."""

    def __init__(self, config: AppConfig = None):
        self.config = config or get_config()

    def plan_crop(self, image_size: Tuple[int, int], transform: ImageTransform,
                  target_size: Tuple[int, int], label: str = "front") -> CropRegion:
        """Crop region for an already-rotated image, applying the overflow policy."""
        image_width, image_height = image_size
        target_width, target_height = target_size

        requested = requested_crop_region(
            image_width, image_height, target_width, target_height,
            transform.zoom, transform.pan_x, transform.pan_y
        )
        region = clamp_crop_region(requested, image_width, image_height)

        if region != requested:
            if self.config.CROP_OVERFLOW_POLICY == 'reject':
                raise CropOutOfBoundsError(
                    (requested.left, requested.top, requested.width, requested.height),
                    image_size
                )
            logger.warning(f"{label}: crop window {requested} clamped to {region} "
                           f"inside {image_width}x{image_height} image, zoom/pan not fully honored")

        if region.area == 0:
            raise EmptyCropRegionError(
                (region.left, region.top, region.width, region.height), image_size
            )
        return region

    def compose(self, image_data: Union[bytes, str], transform: ImageTransform,
                dimensions: PrintDimensions, label: str = "front") -> ComposedRaster:
        """
        Run the full pipeline for one side.

        Order matters: rotation is applied before the crop is computed since
        pan offsets and the window are measured in rotated pixel space.
        """
        start = time.monotonic()
        target_size = target_pixel_size(dimensions)
        target_pixels = target_size[0] * target_size[1]
        if target_pixels > self.config.MAX_OUTPUT_PIXELS:
            raise OutputTooLargeError(target_size, self.config.MAX_OUTPUT_PIXELS)

        raw = decode_payload(image_data)
        decoded = decode_image(raw, self.config.APPLY_EXIF_ORIENTATION)
        icc_profile = decoded.info.get('icc_profile') if decoded.mode != 'CMYK' else None

        rgb = normalize_mode(decoded)
        rotated = rotate_image(rgb, transform.rotation)
        region = self.plan_crop(rotated.size, transform, target_size, label)
        resampled = extract_and_resample(rotated, region, target_size)
        data = encode_raster(resampled, self.config.JPEG_QUALITY, icc_profile)

        logger.info(f"Composed {label}: source {decoded.size} rotated {transform.rotation} -> "
                    f"{rotated.size}, crop {region.box} -> {target_size} "
                    f"({len(data)} bytes, {time.monotonic() - start:.2f}s)")

        return ComposedRaster(data=data, width=resampled.width, height=resampled.height, label=label)

    def compose_side(self, side: PrintSide, dimensions: PrintDimensions) -> ComposedRaster:
        """Compose one face of a (possibly double-sided) job."""
        return self.compose(side.image_data, side.transform, dimensions, label=side.label)


def create_compositor(config: AppConfig = None) -> ImageCompositor:
    """Factory function to create an ImageCompositor instance."""
    return ImageCompositor(config)


def compose(image_data: Union[bytes, str], transform: ImageTransform,
            dimensions: PrintDimensions, config: AppConfig = None) -> ComposedRaster:
    """Compose a single-sided raster with the given (or global) configuration."""
    return ImageCompositor(config).compose(image_data, transform, dimensions)
