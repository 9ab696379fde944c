"""
Configuration management module.

Loads configuration from YAML files and provides easy access.
"""

from .loader import ConfigLoader, get_app_config, reload_config
from .settings import AppConfig, CoinConfig, DatabaseConfig, SchemaNames, SystemConfig

__all__ = [
    'ConfigLoader',
    'get_app_config',
    'reload_config',
    'AppConfig',
    'CoinConfig',
    'DatabaseConfig',
    'SchemaNames',
    'SystemConfig',
]
