#!/usr/bin/env python3
"""
Catalog PDF generator - Development Runner
Run this script to start the development server
"""

import os
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

# Set environment defaults
os.environ.setdefault('FLASK_APP', 'catalog')
os.environ.setdefault('FLASK_ENV', 'development')

from catalog import create_app


def main():
    """Main entry point"""
    print("=" * 60)
    print("Catalog PDF generator - Development Server")
    print("=" * 60)

    app = create_app()

    print(f"Environment: {app.config.get('FLASK_ENV', 'unknown')}")
    print(f"Debug mode: {app.config.get('DEBUG', False)}")
    print(f"Log level: {app.config.get('LOG_LEVEL', 'INFO')}")
    print(f"Image proxy: {app.config.get('IMAGE_PROXY_URL') or 'direct download'}")

    if not Path('config/settings.yaml').exists():
        print("Missing config/settings.yaml, using built-in defaults")

    print("-" * 60)
    print("POST product JSON to: http://localhost:5000/api/catalog")
    print("Press Ctrl+C to stop")
    print("-" * 60)

    app.run(
        host='0.0.0.0',
        port=5000,
        debug=app.config.get('DEBUG', True),
        use_reloader=True,
        threaded=True
    )


if __name__ == '__main__':
    main()
