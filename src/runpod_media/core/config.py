"""Provider configuration loaded from ``RUNPOD_*`` environment variables."""

from __future__ import annotations

from typing import Dict

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..jobs.jobs_errors import ConfigError

DEFAULT_API_ROOT = "https://api.runpod.ai/v2"


class RunpodSettings(BaseSettings):
    """Pydantic settings container for the Runpod provider."""

    model_config = SettingsConfigDict(env_prefix="RUNPOD_", extra="ignore")

    api_key: str | None = Field(
        default=None,
        description="Runpod API key sent as a bearer token.",
    )
    base_url: str | None = Field(
        default=None,
        description="Endpoint base URL used for every model instead of the endpoint tables.",
    )
    api_root: str = Field(
        default=DEFAULT_API_ROOT,
        description="Root used to derive endpoint URLs for model ids missing from the tables.",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout applied to each HTTP request (seconds).",
    )
    headers: Dict[str, str] = Field(
        default_factory=dict,
        description="Extra headers merged into every request.",
    )

    def auth_headers(self) -> dict[str, str]:
        """Return request headers; raises :class:`ConfigError` without an API key."""

        if not self.api_key:
            raise ConfigError(
                "Runpod API key is missing. Pass api_key or set the RUNPOD_API_KEY environment variable."
            )
        return {"Authorization": f"Bearer {self.api_key}", **self.headers}


__all__ = ["RunpodSettings", "DEFAULT_API_ROOT"]
