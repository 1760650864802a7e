"""Index service configuration values."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from .env import env_flag, optional_env_var, require_env_var
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig

CONFIG_ENV_VAR = "CONFIG_FILE"
INDEX_SERVICE_TIMEOUT_SECONDS = 30.0

_BOOL_FIELDS = (
    "extramural_bucket",
    "extramural_uploader_s3owner",
    "extramural_initial_mode",
    "extramural_fast_mode",
)
_OPTIONAL_STR_FIELDS = ("extramural_uploader", "extramural_uploader_manifest")


@dataclass(frozen=True, slots=True)
class IndexServiceConfig:
    """Connection details and behaviour flags for one index service."""

    url: str
    username: str = ""
    password: str = ""
    extramural_bucket: bool = False
    extramural_uploader: str | None = None
    extramural_uploader_s3owner: bool = False
    extramural_uploader_manifest: str | None = None
    extramural_initial_mode: bool = False
    extramural_fast_mode: bool = False
    verify_tls: bool = True
    timeout_seconds: float = INDEX_SERVICE_TIMEOUT_SECONDS
    ratelimit: RateLimit | None = None

    @classmethod
    def from_mapping(cls, data: Any, **overrides: Any) -> IndexServiceConfig:
        """Validate a decoded service descriptor."""

        if not isinstance(data, dict):
            raise ConfigurationError("Index service descriptor must be a JSON object")

        url = data.get("url")
        if not isinstance(url, str) or not url.strip():
            raise ConfigurationError("Index service descriptor is missing 'url'")

        values: dict[str, Any] = {"url": url.strip()}
        for name in ("username", "password"):
            value = data.get(name, "")
            if not isinstance(value, str):
                raise ConfigurationError(f"Index service field '{name}' must be a string")
            values[name] = value
        for name in _BOOL_FIELDS:
            value = data.get(name, False)
            if not isinstance(value, bool):
                raise ConfigurationError(f"Index service field '{name}' must be a boolean")
            values[name] = value
        for name in _OPTIONAL_STR_FIELDS:
            value = data.get(name)
            if value is not None and not isinstance(value, str):
                raise ConfigurationError(f"Index service field '{name}' must be a string")
            values[name] = value

        values.update(overrides)
        return cls(**values)

    def resilience(self) -> ResilienceConfig:
        auth = (self.username, self.password) if self.username else None
        return ResilienceConfig(
            name="indexd",
            base_url=_with_trailing_slash(self.url),
            timeout_seconds=self.timeout_seconds,
            ratelimit=self.ratelimit,
            default_headers={"Accept": "application/json"},
            verify=self.verify_tls,
            auth=auth,
        )


def _with_trailing_slash(url: str) -> str:
    return url if url.endswith("/") else f"{url}/"


def get_index_service_config() -> IndexServiceConfig:
    raw = require_env_var(CONFIG_ENV_VAR)
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        msg = f"Environment variable {CONFIG_ENV_VAR} is not valid JSON"
        raise ConfigurationError(msg) from exc

    overrides: dict[str, Any] = {"verify_tls": env_flag("INDEXSYNC_VERIFY_TLS", default=True)}
    max_calls = optional_env_var("INDEXSYNC_MAX_CALLS_PER_SECOND")
    if max_calls is not None:
        try:
            overrides["ratelimit"] = RateLimit(max_calls=int(max_calls), per_seconds=1.0)
        except ValueError as exc:
            raise ConfigurationError("INDEXSYNC_MAX_CALLS_PER_SECOND must be an integer") from exc
    return IndexServiceConfig.from_mapping(data, **overrides)
