#!/usr/bin/env python3
"""
Production deployment configuration for the Print-Ready Output Generator.

This module provides the production WSGI application, environment checks
and a Waitress entry point.
"""

import os
import sys
import logging
from pathlib import Path
from typing import Dict, Any, List


def production_overrides() -> Dict[str, Any]:
    """Production configuration taken from the environment."""
    origins = os.environ.get('CORS_ORIGINS', 'https://swift-metal-prints.lovable.app')
    return {
        'SECRET_KEY': os.environ.get('SECRET_KEY', 'production-secret-key-change-me'),
        'FLASK_ENV': 'production',
        'DEBUG': False,
        'TESTING': False,
        'LOG_FILE': os.environ.get('LOG_FILE', '/var/log/printready/app.log'),
        'LOG_LEVEL': os.environ.get('LOG_LEVEL', 'INFO'),
        'CORS_ORIGINS': [o.strip() for o in origins.split(',') if o.strip()],
        'MAX_CONTENT_LENGTH': int(os.environ.get('MAX_CONTENT_LENGTH', str(200 * 1024 * 1024))),
        'MAX_CONCURRENT_JOBS': int(os.environ.get('MAX_CONCURRENT_JOBS', '2')),
    }


# Production WSGI application
def create_production_app():
    """Create production Flask application with proper configuration."""
    os.environ['FLASK_ENV'] = 'production'

    # Import after setting environment
    from printready import create_app

    config = production_overrides()
    app = create_app(config)

    # Suppress noisy loggers
    logging.getLogger('werkzeug').setLevel(logging.WARNING)

    return app


def check_production_requirements() -> List[str]:
    """Check that production requirements are met."""
    errors = []

    if sys.version_info < (3, 9):
        errors.append("Python 3.9 or higher required")

    required_env_vars = ['SECRET_KEY']
    for var in required_env_vars:
        if not os.environ.get(var):
            errors.append(f"Environment variable {var} is required")

    # Check write permissions for the log directory
    log_dir = Path(os.environ.get('LOG_FILE', '/var/log/printready/app.log')).parent
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        test_file = log_dir / 'test_write'
        test_file.write_text('test')
        test_file.unlink()
    except OSError:
        errors.append(f"No write permission to log folder: {log_dir}")

    return errors


if __name__ == '__main__':
    # Check requirements
    errors = check_production_requirements()
    if errors:
        print("❌ Production requirements not met:")
        for error in errors:
            print(f"  - {error}")
        sys.exit(1)

    print("✅ Production requirements check passed")

    app = create_production_app()

    from waitress import serve

    host = os.environ.get('HOST', '0.0.0.0')
    port = int(os.environ.get('PORT', '3001'))
    threads = int(os.environ.get('THREADS', '4'))

    print(f"🚀 Starting print-ready generator on {host}:{port}")
    print(f"   Threads: {threads}")
    print(f"   Max concurrent jobs: {app.config['MAX_CONCURRENT_JOBS']}")

    try:
        serve(
            app,
            host=host,
            port=port,
            threads=threads,
            channel_timeout=300,
            cleanup_interval=30,
            max_request_body_size=app.config['MAX_CONTENT_LENGTH'],
            url_scheme='https' if os.environ.get('HTTPS', '').lower() == 'true' else 'http'
        )
    except KeyboardInterrupt:
        print("\n👋 Shutting down gracefully...")
