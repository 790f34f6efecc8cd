"""Configuration management for bucket-tools."""

from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings

from .exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    log_level: str = "WARNING"
    otel_enabled: bool = False
    otel_service_name: str = "bucket-tools"
    download_root: str = "downloads"
    max_workers: int = 4
    presign_expiry: int = 3600
    request_timeout: float = 60.0

    model_config = {
        "env_prefix": "BUCKET_TOOLS_",
        "case_sensitive": False,
    }


class StoreSettings(BaseSettings):
    """Credentials and location of the object store.

    Read from ``AWS_*`` environment variables, falling back to a ``.env`` file
    in the working directory.
    """

    access_key_id: str
    secret_access_key: str
    default_region: str
    bucket: str
    url: str
    endpoint_url: Optional[str] = None
    session_token: Optional[str] = None

    model_config = {
        "env_prefix": "AWS_",
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
    }


def load_store_settings(**overrides) -> StoreSettings:
    """Load store settings, raising ConfigurationError when any are missing."""
    try:
        return StoreSettings(**overrides)
    except PydanticValidationError as e:
        missing = [
            f"AWS_{'_'.join(str(part) for part in error['loc']).upper()}"
            for error in e.errors()
            if error["type"] == "missing"
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            ) from e
        raise ConfigurationError(f"Invalid store configuration: {e}") from e


settings = Settings()
