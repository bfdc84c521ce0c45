"""Environment-driven configuration for the hero image pipeline."""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigurationError

REQUIRED_STORAGE_ENV_VARS = {
    "account_id": "ACCOUNT_ID",
    "access_key_id": "ACCESS_KEY_ID",
    "secret_access_key": "SECRET_ACCESS_KEY",
    "bucket_name": "BUCKET_NAME",
}

DEFAULT_CACHE_CONTROL = "public, max-age=31536000, immutable"
DEFAULT_MAX_WORKERS = 4

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("", "0", "false", "no", "off")


class StorageSettings(BaseModel):
    """Connection settings for the S3-compatible object store."""

    account_id: str
    access_key_id: str
    secret_access_key: str = Field(repr=False)
    bucket_name: str
    endpoint_url: Optional[str] = None
    region: str = "auto"

    @property
    def endpoint(self) -> str:
        """Explicit endpoint, or the Cloudflare R2 endpoint of the account."""
        if self.endpoint_url:
            return self.endpoint_url
        return f"https://{self.account_id}.r2.cloudflarestorage.com"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "StorageSettings":
        """
        Load storage settings from the environment.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            Populated settings

        Raises:
            ConfigurationError: If any required variable is missing or empty
        """
        env = os.environ if environ is None else environ

        missing = [
            env_name
            for env_name in REQUIRED_STORAGE_ENV_VARS.values()
            if not env.get(env_name)
        ]
        if missing:
            raise ConfigurationError(
                f"Required environment variable(s) not set: {', '.join(missing)}"
            )

        values = {
            field_name: env[env_name]
            for field_name, env_name in REQUIRED_STORAGE_ENV_VARS.items()
        }
        return cls(
            endpoint_url=env.get("STORAGE_ENDPOINT_URL") or None,
            region=env.get("STORAGE_REGION") or "auto",
            **values,
        )


class ProcessingSettings(BaseModel):
    """Tuning and policy options for one invocation."""

    max_workers: int = Field(default=DEFAULT_MAX_WORKERS, ge=1)
    fail_when_no_variants: bool = False
    cache_control: str = DEFAULT_CACHE_CONTROL

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ProcessingSettings":
        """
        Load processing settings from the environment.

        Environment Variables:
            MAX_WORKERS: Variant worker pool size (default 4)
            FAIL_WHEN_NO_VARIANTS: Raise when every variant fails (default false)
            CACHE_CONTROL: Cache-Control header stored with each variant

        Raises:
            ConfigurationError: If a value cannot be parsed
        """
        env = os.environ if environ is None else environ

        try:
            return cls(
                max_workers=int(env.get("MAX_WORKERS") or DEFAULT_MAX_WORKERS),
                fail_when_no_variants=_parse_bool(
                    "FAIL_WHEN_NO_VARIANTS", env.get("FAIL_WHEN_NO_VARIANTS", "")
                ),
                cache_control=env.get("CACHE_CONTROL") or DEFAULT_CACHE_CONTROL,
            )
        except (ValueError, ValidationError) as exc:
            raise ConfigurationError(f"Invalid processing settings: {exc}") from exc


def _parse_bool(name: str, value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")
