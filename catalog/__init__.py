"""
Catalog PDF generator - Flask Application Factory
Back-office tool that renders product catalogs (single or grid layout) as PDF
"""

import os
from pathlib import Path
from typing import Dict, Optional

from flask import Flask
from loguru import logger
from dotenv import load_dotenv

from .config import load_config


def create_app(config_name: Optional[str] = None, overrides: Optional[Dict] = None):
    """Flask application factory"""

    # Load environment variables
    load_dotenv()

    app = Flask(__name__)

    # Load configuration
    environment = config_name or os.getenv('FLASK_ENV', 'development')
    config = load_config(environment, overrides)
    app.config.update(config.model_dump())
    app.extensions['catalog_config'] = config

    # Configure logging
    setup_logging(app)

    # Ensure output directories exist
    setup_directories(app)

    # Register blueprints
    from . import routes
    app.register_blueprint(routes.bp)

    logger.info(f"Catalog generator initialized in {environment} mode")

    return app


def setup_logging(app):
    """Configure loguru logging"""
    log_level = app.config.get('LOG_LEVEL', 'INFO')
    log_file = app.config.get('LOG_FILE', 'logs/app.log')

    # Ensure logs directory exists
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_file,
        rotation="1 day",
        retention="30 days",
        level=log_level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} | {message}"
    )


def setup_directories(app):
    """Ensure required directories exist"""
    dirs = [
        app.config.get('OUTPUT_FOLDER', 'output'),
        'logs'
    ]

    for dir_path in dirs:
        Path(dir_path).mkdir(parents=True, exist_ok=True)
