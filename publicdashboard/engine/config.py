"""
PublicDashboard Configuration — Load and validate publicdashboard.yaml at startup.

Usage:
    from publicdashboard.engine.config import load_config, get_config
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from publicdashboard.engine.errors import DashboardConfigError

CONFIG_FILENAME = "publicdashboard.yaml"


# ---------------------------------------------------------------------------
# Pydantic models for publicdashboard.yaml
# ---------------------------------------------------------------------------

class DatabaseConfig(BaseModel):
    url: str = "sqlite:///publicdashboard.db"
    pool_size: int = 10
    max_overflow: int = 20
    pool_timeout: int = 30
    pool_recycle: int = 1800
    pool_pre_ping: bool = True
    create_tables: bool = False


class RedisConfig(BaseModel):
    url: str = "redis://localhost:6379/0"
    enabled: bool = False


class SecurityConfig(BaseModel):
    session_timeout: int = 3600
    token_ttl: int = 3600


class LogAsyncQueueConfig(BaseModel):
    flush_interval_ms: int = 100
    flush_batch_size: int = 50
    max_queue_size: int = 10000


class LoggingConfig(BaseModel):
    level: str = "INFO"
    directory: str = ".publicdashboard/logs"
    async_queue: LogAsyncQueueConfig = LogAsyncQueueConfig()

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"invalid log level '{v}'")
        return level


class UIConfig(BaseModel):
    items_per_page: int = 10
    items_per_page_options: List[int] = Field(default_factory=lambda: [10, 25, 50])

    @field_validator("items_per_page")
    @classmethod
    def validate_items_per_page(cls, v: int) -> int:
        if v < 1:
            raise ValueError("items_per_page must be at least 1")
        return v


class PlatformConfig(BaseModel):
    """Root model for publicdashboard.yaml."""
    name: str = "PublicDashboard"
    environment: str = "dev"

    database: DatabaseConfig = DatabaseConfig()
    redis: RedisConfig = RedisConfig()
    security: SecurityConfig = SecurityConfig()
    logging: LoggingConfig = LoggingConfig()
    ui: UIConfig = UIConfig()
    components: List[str] = Field(default_factory=list)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        if v not in ("dev", "staging", "prod"):
            raise ValueError(f"environment must be dev/staging/prod, got '{v}'")
        return v


# ---------------------------------------------------------------------------
# Config Loading Functions
# ---------------------------------------------------------------------------

_config: Optional[PlatformConfig] = None


def _find_project_root() -> Path:
    """Find the project root by looking for publicdashboard.yaml."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        if (parent / CONFIG_FILENAME).exists():
            return parent
    return current


def get_project_root() -> Path:
    """Return the project root directory."""
    return _find_project_root()


def load_config(config_path: Optional[str] = None) -> PlatformConfig:
    """
    Load and validate publicdashboard.yaml.

    Args:
        config_path: Explicit path to the file. If None, auto-discovers.

    Returns:
        Validated PlatformConfig instance. Defaults when no file exists.

    Raises:
        DashboardConfigError: the file is not valid YAML or fails validation.
    """
    global _config

    if config_path is None:
        config_path = str(_find_project_root() / CONFIG_FILENAME)

    path = Path(config_path)
    if not path.exists():
        _config = PlatformConfig()
        return _config

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise DashboardConfigError(f"Invalid YAML in {path}: {e}", path=str(path)) from e

    if not isinstance(raw, dict):
        raise DashboardConfigError(f"Config root must be a mapping: {path}", path=str(path))

    # Allow a top-level "platform:" block for name/environment
    platform_data = raw.pop("platform", {}) or {}
    for key in ("name", "environment"):
        if key in platform_data and key not in raw:
            raw[key] = platform_data[key]

    try:
        _config = PlatformConfig(**raw)
    except ValidationError as e:
        raise DashboardConfigError(
            f"Invalid configuration in {path}",
            path=str(path),
            errors=e.errors(),
        ) from e
    return _config


def get_config() -> PlatformConfig:
    """Get the currently loaded config, loading if necessary."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def get_environment() -> str:
    return get_config().environment
