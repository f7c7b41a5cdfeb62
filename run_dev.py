#!/usr/bin/env python3
"""
Print-Ready Output Generator - Development Runner
Run this script to start the development server
"""

import os
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

# Set environment defaults
os.environ.setdefault('FLASK_APP', 'printready')
os.environ.setdefault('FLASK_ENV', 'development')

from printready import create_app


def main():
    """Main entry point"""
    print("=" * 60)
    print("Print-Ready Output Generator - Development Server")
    print("=" * 60)

    app = create_app()

    # Print startup info
    print(f"Environment: {app.config.get('FLASK_ENV', 'unknown')}")
    print(f"Debug mode: {app.config.get('DEBUG', False)}")
    print(f"Log level: {app.config.get('LOG_LEVEL', 'INFO')}")
    print(f"Crop overflow policy: {app.config.get('CROP_OVERFLOW_POLICY')}")
    print(f"Max concurrent jobs: {app.config.get('MAX_CONCURRENT_JOBS')}")

    if not Path('config/settings.yaml').exists():
        print("ℹ️  No config/settings.yaml found, using built-in defaults")

    port = int(os.environ.get('PORT', '3001'))

    print("-" * 60)
    print("Starting development server...")
    print(f"Health check: http://localhost:{port}/api/health")
    print("Press Ctrl+C to stop")
    print("-" * 60)

    app.run(
        host='0.0.0.0',
        port=port,
        debug=app.config.get('DEBUG', True),
        use_reloader=True,
        threaded=True
    )


if __name__ == '__main__':
    main()
