"""Settings for schemakit, read from SCHEMAKIT_* environment variables.

This is the only place environment variables are read.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator


class SettingsError(Exception):
    """Raised when an environment variable holds an unusable value."""

    pass


class SchemakitSettings(BaseModel):
    """Runtime configuration.

    Pydantic coerces the raw environment strings ("30", "false", ...).
    """

    http_timeout: float = Field(
        default=30.0, gt=0, description="SCHEMAKIT_HTTP_TIMEOUT - Seconds per schema request"
    )
    follow_redirects: bool = Field(
        default=True, description="SCHEMAKIT_FOLLOW_REDIRECTS - Follow HTTP redirects"
    )
    schemas_root: str = Field(
        default="schemas", description="SCHEMAKIT_SCHEMAS_ROOT - Directory for named schemas"
    )
    log_level: str = Field(default="WARNING", description="SCHEMAKIT_LOG_LEVEL - CLI log level")

    @field_validator("log_level", mode="before")
    @classmethod
    def parse_log_level(cls, v: Any) -> str:
        """Upper-case and check against the logging module's level names."""
        level = str(v).strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level '{v}'")
        return level

    @property
    def log_level_number(self) -> int:
        return logging.getLevelNamesMapping()[self.log_level]

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SchemakitSettings:
        """Build settings from environment variables.

        Args:
            environ: Environment mapping (defaults to os.environ).

        Raises:
            SettingsError: If a variable can't be parsed.
        """
        if environ is None:
            environ = os.environ

        kwargs: dict[str, Any] = {}
        for field_name, env_var in ENV_VARS.items():
            value = environ.get(env_var)
            if value:
                kwargs[field_name] = value

        try:
            return cls(**kwargs)
        except ValidationError as e:
            raise SettingsError(f"Invalid schemakit environment: {e}") from e


# Environment variable names (single source of truth)
ENV_VARS = {
    "http_timeout": "SCHEMAKIT_HTTP_TIMEOUT",
    "follow_redirects": "SCHEMAKIT_FOLLOW_REDIRECTS",
    "schemas_root": "SCHEMAKIT_SCHEMAS_ROOT",
    "log_level": "SCHEMAKIT_LOG_LEVEL",
}
