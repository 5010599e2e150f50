"""
Configuration Management
========================

Hierarchical configuration system with support for:
- Base configuration
- An optional YAML file
- Environment variables
- Runtime overrides
"""

import os
import yaml
from typing import Dict, Any, Literal, Optional
from pathlib import Path
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


class DatabaseConfig(BaseModel):
    """Database configuration."""
    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=8529, description="Database port")
    username: str = Field(default="root", description="Database username")
    password: str = Field(default="", description="Database password")
    database: str = Field(default="datasets", description="Database name")


class DatasetConfig(BaseModel):
    """Dataset split configuration."""
    name: str = Field(default="dataset", description="Instance collection name")
    population_use: float = Field(default=1.0, gt=0.0, le=1.0, description="Fraction of instances in scope")
    default_bucket: Literal["train", "test"] = Field(default="train", description="Bucket used when none is given")


class Config(BaseModel):
    """Main configuration object."""
    backend: Literal["memory", "arango"] = Field(default="memory", description="Document store backend")
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    dataset: DatasetConfig = Field(default_factory=DatasetConfig)
    logging_level: str = Field(default="INFO", description="Logging level")


class ConfigManager:
    """
    Configuration hierarchy (highest to lowest priority):
    1. Runtime overrides
    2. Environment variables (ARANGO_*, SPLITDB_*)
    3. .env file
    4. Explicit YAML file
    5. Base config (configs/base.yaml)
    """

    @staticmethod
    def _load_yaml(file_path: Path) -> Dict[str, Any]:
        """Load YAML configuration file."""
        if not file_path.exists():
            return {}

        with open(file_path, 'r') as f:
            return yaml.safe_load(f) or {}

    @staticmethod
    def _load_base() -> Dict[str, Any]:
        """Load base configuration."""
        base_path = Path(__file__).parent.parent / "configs" / "base.yaml"
        return ConfigManager._load_yaml(base_path)

    @staticmethod
    def _load_env() -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config = {}

        # Database configuration from env
        if os.getenv("ARANGO_HOST"):
            config.setdefault("database", {})["host"] = os.getenv("ARANGO_HOST")
        if os.getenv("ARANGO_PORT"):
            config.setdefault("database", {})["port"] = int(os.getenv("ARANGO_PORT"))
        if os.getenv("ARANGO_USERNAME"):
            config.setdefault("database", {})["username"] = os.getenv("ARANGO_USERNAME")
        if os.getenv("ARANGO_PASSWORD"):
            config.setdefault("database", {})["password"] = os.getenv("ARANGO_PASSWORD")
        if os.getenv("ARANGO_DATABASE"):
            config.setdefault("database", {})["database"] = os.getenv("ARANGO_DATABASE")

        # Dataset configuration from env
        if os.getenv("SPLITDB_STORE_BACKEND"):
            config["backend"] = os.getenv("SPLITDB_STORE_BACKEND")
        if os.getenv("SPLITDB_DATASET_NAME"):
            config.setdefault("dataset", {})["name"] = os.getenv("SPLITDB_DATASET_NAME")
        if os.getenv("SPLITDB_POPULATION_USE"):
            config.setdefault("dataset", {})["population_use"] = float(os.getenv("SPLITDB_POPULATION_USE"))
        if os.getenv("SPLITDB_DEFAULT_BUCKET"):
            config.setdefault("dataset", {})["default_bucket"] = os.getenv("SPLITDB_DEFAULT_BUCKET")

        # Logging
        if os.getenv("SPLITDB_LOG_LEVEL"):
            config["logging_level"] = os.getenv("SPLITDB_LOG_LEVEL")

        return config

    @staticmethod
    def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = ConfigManager._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    @staticmethod
    def load(config_path: Optional[str] = None, override: Optional[Dict] = None) -> Config:
        """
        Load configuration with hierarchy.

        Args:
            config_path: Optional YAML file layered over the base config
            override: Runtime configuration overrides

        Returns:
            Loaded configuration object
        """
        # Start with base config
        config = ConfigManager._load_base()

        # Overlay the explicit config file
        if config_path:
            file_config = ConfigManager._load_yaml(Path(config_path))
            config = ConfigManager._deep_merge(config, file_config)

        # Overlay environment variables
        env_config = ConfigManager._load_env()
        config = ConfigManager._deep_merge(config, env_config)

        # Apply any runtime overrides
        if override:
            config = ConfigManager._deep_merge(config, override)

        return Config(**config)
