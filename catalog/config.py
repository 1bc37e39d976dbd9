"""
Configuration management for the catalog PDF generator
Loads settings from YAML files with environment variable overrides
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Optional
from pydantic import BaseModel, Field
from loguru import logger

from .errors import ConfigurationError


class AppConfig(BaseModel):
    """Main application configuration"""

    # Flask settings
    SECRET_KEY: str = Field(default_factory=lambda: os.urandom(24).hex())
    FLASK_ENV: str = "development"
    DEBUG: bool = True

    # Paths
    OUTPUT_FOLDER: str = "output"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    # Image fetching
    IMAGE_PROXY_URL: Optional[str] = None  # direct GET when unset
    IMAGE_PROXY_KEY: Optional[str] = None
    IMAGE_FETCH_TIMEOUT: Optional[float] = None

    # Branding
    LOGO_URL: Optional[str] = "https://hechopy.com/logo%20hecho%20colorida%20horizontal.png"
    LOGO_WIDTH_PX: int = 1080
    LOGO_HEIGHT_PX: int = 367
    SITE_LABEL: str = "www.hechopy.com"

    # Catalog content
    NO_CATEGORY_LABEL: str = "Sem Categoria"
    CURRENCY_PREFIX: str = "Gs."
    NEW_PRODUCT_DAYS: int = 21

    # Document metadata
    PDF_SUBJECT: str = "Catálogo de Produtos"
    PDF_AUTHOR: str = "Sistema de Gestão"
    PDF_KEYWORDS: str = "catálogo, produtos"
    PDF_CREATOR: str = "Sistema de Gestão de Produtos"


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
        raise ConfigurationError(
            f"Error loading config file {file_path}: {e}",
            details={'file_path': file_path},
            suggestions=["Check the YAML syntax of the settings file"]
        ) from e


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
        'SECRET_KEY': os.getenv('SECRET_KEY'),
        'OUTPUT_FOLDER': os.getenv('OUTPUT_FOLDER'),
        'IMAGE_PROXY_URL': os.getenv('IMAGE_PROXY_URL'),
        'IMAGE_PROXY_KEY': os.getenv('IMAGE_PROXY_KEY'),
        'IMAGE_FETCH_TIMEOUT': os.getenv('IMAGE_FETCH_TIMEOUT'),
        'LOGO_URL': os.getenv('LOGO_URL'),
        'SITE_LABEL': os.getenv('SITE_LABEL'),
    }

    # Only include non-None values
    env_overrides = {k: v for k, v in env_overrides.items() if v is not None}
    config_dict.update(env_overrides)

    # Special handling for boolean DEBUG flag
    if 'FLASK_ENV' in config_dict:
        config_dict['DEBUG'] = config_dict['FLASK_ENV'] == 'development'

    if overrides:
        config_dict.update(overrides)

    try:
        return AppConfig(**config_dict)
    except ValueError as e:
        logger.error(f"Configuration validation error: {e}")
        raise ConfigurationError(
            "Configuration validation failed",
            details={'errors': str(e)},
            suggestions=["Check config/settings.yaml and environment variables"]
        ) from e


# Global config instance
_config_instance = None

def get_config() -> AppConfig:
    """Get the global configuration instance"""
    global _config_instance
    if _config_instance is None:
        _config_instance = load_config(os.getenv('FLASK_ENV', 'development'))
    return _config_instance


def set_config(config: Optional[AppConfig]) -> None:
    """Replace the global configuration instance (None resets it)"""
    global _config_instance
    _config_instance = config
