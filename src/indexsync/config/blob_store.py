"""Blob store (S3) configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_flag, optional_env_var
from .errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class BlobStoreConfig:
    region: str | None = None
    endpoint_url: str | None = None
    access_key_id: str | None = None
    secret_access_key: str | None = None
    verify_tls: bool = True


def get_blob_store_config() -> BlobStoreConfig:
    access_key_id = optional_env_var("AWS_ACCESS_KEY_ID")
    secret_access_key = optional_env_var("AWS_SECRET_ACCESS_KEY")
    if (access_key_id is None) != (secret_access_key is None):
        raise ConfigurationError(
            "AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY must be set together"
        )
    return BlobStoreConfig(
        region=optional_env_var("AWS_REGION"),
        endpoint_url=optional_env_var("S3_ENDPOINT_URL"),
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        verify_tls=env_flag("INDEXSYNC_VERIFY_TLS", default=True),
    )
