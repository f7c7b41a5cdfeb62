"""
Configuration management for the Print-Ready Output Generator
Loads settings from YAML files with environment variable overrides
"""

import os
import yaml
from pathlib import Path
from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from loguru import logger


class AppConfig(BaseModel):
    """Main application configuration"""

    # Flask settings
    SECRET_KEY: str = Field(default_factory=lambda: os.urandom(24).hex())
    FLASK_ENV: str = "development"
    DEBUG: bool = True
    TESTING: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    # Request limits
    MAX_CONTENT_LENGTH: int = 200 * 1024 * 1024  # 200MB of base64 JSON
    CORS_ORIGINS: List[str] = ["http://localhost:8080"]
    DEFAULT_FILENAME: str = "print-ready.pdf"

    # Image processing
    JPEG_QUALITY: int = Field(default=100, ge=1, le=100)
    APPLY_EXIF_ORIENTATION: bool = True
    CROP_OVERFLOW_POLICY: str = "clamp"  # or "reject"

    # Resource bounds
    MAX_CONCURRENT_JOBS: int = Field(default=2, ge=1)
    JOB_ACQUIRE_TIMEOUT: float = 30.0  # seconds
    MAX_OUTPUT_PIXELS: int = 450_000_000  # 48x96in at 300 DPI is ~415MP
    MAX_IMAGE_PIXELS: int = 500_000_000  # Pillow decompression bomb threshold


def load_yaml_config(file_path: str) -> Dict:
    """Load configuration from YAML file"""
    path = Path(file_path)
    if not path.exists():
        logger.debug(f"Config file not found: {file_path}")
        return {}

    try:
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Error loading config file {file_path}: {e}")
        return {}


def load_config(environment: str = "development", overrides: Optional[Dict] = None) -> AppConfig:
    """Load configuration with environment-specific overrides"""

    # Load base settings
    base_config = load_yaml_config("config/settings.yaml")

    # Load environment-specific settings
    env_config = load_yaml_config(f"config/settings_{environment}.yaml")

    # Merge configurations (env overrides base)
    config_dict = {**base_config, **env_config}

    # Apply environment variable overrides
    env_overrides = {
        'FLASK_ENV': os.getenv('FLASK_ENV', environment),
        'LOG_LEVEL': os.getenv('LOG_LEVEL'),
        'LOG_FILE': os.getenv('LOG_FILE'),
        'SECRET_KEY': os.getenv('SECRET_KEY'),
        'CROP_OVERFLOW_POLICY': os.getenv('CROP_OVERFLOW_POLICY'),
        'MAX_CONCURRENT_JOBS': os.getenv('MAX_CONCURRENT_JOBS'),
        'JPEG_QUALITY': os.getenv('JPEG_QUALITY'),
    }

    # Only include non-None values
    env_overrides = {k: v for k, v in env_overrides.items() if v is not None}
    config_dict.update(env_overrides)

    cors_origins = os.getenv('CORS_ORIGINS')
    if cors_origins:
        config_dict['CORS_ORIGINS'] = [o.strip() for o in cors_origins.split(',') if o.strip()]

    # Special handling for boolean DEBUG flag
    if 'FLASK_ENV' in config_dict:
        config_dict['DEBUG'] = config_dict['FLASK_ENV'] == 'development'

    # Explicit overrides (tests, production bootstrap) win over everything
    if overrides:
        config_dict.update(overrides)

    try:
        config = AppConfig(**config_dict)
    except ValueError as e:
        logger.error(f"Configuration validation error: {e}")
        # Return default config on validation error
        return AppConfig()

    if config.CROP_OVERFLOW_POLICY not in ('clamp', 'reject'):
        logger.error(f"Unknown CROP_OVERFLOW_POLICY {config.CROP_OVERFLOW_POLICY!r}, using 'clamp'")
        config.CROP_OVERFLOW_POLICY = 'clamp'

    return config


# Global config instance
_config_instance = None

def get_config() -> AppConfig:
    """Get the global configuration instance"""
    global _config_instance
    if _config_instance is None:
        _config_instance = load_config(os.getenv('FLASK_ENV', 'development'))
    return _config_instance


def set_config(config: AppConfig) -> None:
    """Replace the global configuration instance (used by the app factory)"""
    global _config_instance
    _config_instance = config
