"""Application configuration helpers."""

from __future__ import annotations

from .blob_store import BlobStoreConfig, get_blob_store_config
from .env import env_flag, optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig
from .index_service import IndexServiceConfig, get_index_service_config
from .logging import configure_logging

__all__ = [
    "BlobStoreConfig",
    "ConfigurationError",
    "IndexServiceConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "configure_logging",
    "env_flag",
    "get_blob_store_config",
    "get_index_service_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]
