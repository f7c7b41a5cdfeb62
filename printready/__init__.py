"""
Print-Ready Output Generator - Flask Application Factory
Turns a customer's photo and on-screen crop into a production PDF for metal/acrylic prints
"""

import os
from pathlib import Path
from flask import Flask
from flask_cors import CORS
from loguru import logger
from dotenv import load_dotenv

from .config import load_config, set_config


def create_app(config_name=None):
    """Flask application factory

    ``config_name`` is either an environment name ('development',
    'production', ...) or a dict of config overrides.
    """

    # Load environment variables
    load_dotenv()

    app = Flask(__name__)

    overrides = config_name if isinstance(config_name, dict) else None
    environment = os.getenv('FLASK_ENV', 'development')
    if isinstance(config_name, str):
        environment = config_name

    # Load configuration
    config = load_config(environment, overrides)
    set_config(config)
    app.config.update(config.model_dump())

    # Configure logging
    setup_logging(app)

    CORS(app, origins=config.CORS_ORIGINS)

    # Shared job runner (bounds concurrent jobs across request threads)
    from .jobs import create_job_runner
    app.extensions['printready_runner'] = create_job_runner(config)

    # Register blueprints
    from . import routes
    app.register_blueprint(routes.bp)

    logger.info(f"Print-ready generator initialized in {config.FLASK_ENV} mode")

    return app


def setup_logging(app):
    """Configure loguru logging"""
    log_level = app.config.get('LOG_LEVEL', 'INFO')
    log_file = app.config.get('LOG_FILE', 'logs/app.log')

    if not log_file:
        return

    # Ensure logs directory exists
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_file,
        rotation="1 day",
        retention="30 days",
        level=log_level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} | {message}"
    )
