"""
Pytest configuration and fixtures for the Print-Ready Output Generator tests.

Provides a test Flask app, a default configuration, and synthetic images
built with Pillow so no binary fixtures are needed.
"""

import base64
import io
import shutil
import tempfile
from pathlib import Path
from typing import Tuple

import pytest
from PIL import Image, ImageDraw

from printready import create_app
from printready.compositor import encode_raster
from printready.config import AppConfig
from printready.models import ComposedRaster, GenerationOptions, ImageTransform, PrintDimensions
from printready.units import target_pixel_size


def make_image_bytes(size: Tuple[int, int] = (400, 300), fmt: str = 'PNG',
                     color=(120, 160, 200), mode: str = 'RGB', **save_kwargs) -> bytes:
    """Encode a solid-colored test image."""
    img = Image.new(mode, size, color=color)
    buffer = io.BytesIO()
    img.save(buffer, fmt, **save_kwargs)
    return buffer.getvalue()


def make_pattern_image(size: Tuple[int, int] = (900, 600)) -> Image.Image:
    """Image with enough structure that crops at different offsets differ."""
    img = Image.new('RGB', size, color=(255, 255, 255))
    draw = ImageDraw.Draw(img)
    width, height = size
    step = 50
    for x in range(0, width, step):
        for y in range(0, height, step):
            shade = ((x * 7 + y * 3) // step) % 256
            draw.rectangle([x, y, x + step - 1, y + step - 1], fill=(shade, (x * 255) // width, (y * 255) // height))
    return img


def png_bytes(img: Image.Image) -> bytes:
    buffer = io.BytesIO()
    img.save(buffer, 'PNG')
    return buffer.getvalue()


def to_data_url(data: bytes, mime: str = 'image/png') -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def make_raster(dimensions: PrintDimensions, color=(200, 30, 30), label: str = 'front') -> ComposedRaster:
    """A correctly sized raster as the compositor would deliver it."""
    width, height = target_pixel_size(dimensions)
    data = encode_raster(Image.new('RGB', (width, height), color))
    return ComposedRaster(data=data, width=width, height=height, label=label)


@pytest.fixture(scope='session')
def log_dir():
    path = Path(tempfile.mkdtemp())
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture(scope='session')
def app(log_dir):
    """Create and configure a test Flask application."""
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-key',
        'DEBUG': True,
        'LOG_FILE': str(log_dir / 'test.log'),
        'MAX_CONCURRENT_JOBS': 2,
        'MAX_CONTENT_LENGTH': 5 * 1024 * 1024,
    })

    yield app


@pytest.fixture
def client(app):
    """Create a test client for the Flask application."""
    return app.test_client()


@pytest.fixture
def test_config():
    """Default configuration with logging kept out of the filesystem."""
    return AppConfig(LOG_FILE='', SECRET_KEY='test-key')


@pytest.fixture
def small_dimensions():
    """1 x 1.5 inch print: 300 x 450 pixels, 72 x 108 points."""
    return PrintDimensions(width=1.0, height=1.5)


@pytest.fixture
def identity_transform():
    return ImageTransform(rotation=0, zoom=1.0, pan_x=0, pan_y=0)


@pytest.fixture
def plain_options():
    return GenerationOptions()


@pytest.fixture
def sample_png():
    return make_image_bytes((400, 600), 'PNG')


@pytest.fixture
def sample_request(sample_png):
    """A valid GenerateRequest body for a small single-sided print."""
    return {
        'imageBase64': to_data_url(sample_png),
        'printDimensions': {'width': 1, 'height': 1.5},
        'transform': {'rotation': 0, 'zoom': 1, 'panX': 0, 'panY': 0},
        'includeBleed': False,
        'includeCropMarks': False,
    }
