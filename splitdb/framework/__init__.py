"""
splitdb Framework
=================

Shared configuration for the dataset split tooling.
"""

from .config import Config, ConfigManager, DatabaseConfig, DatasetConfig

__all__ = [
    'Config',
    'ConfigManager',
    'DatabaseConfig',
    'DatasetConfig',
]
