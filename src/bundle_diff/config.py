"""Runtime settings read from the environment (and an optional .env file)."""

import os
from collections.abc import Mapping
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

ENV_PREFIX = "BUNDLE_DIFF_"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseModel):
    """Tunables for a comparison run. CLI flags take precedence over these."""

    toolbox_url: str = "https://www.ruby-toolbox.com/api"
    lockfile: str = "Gemfile.lock"
    source: str = "master"
    target: str = "HEAD"
    timeout: float = Field(default=30.0, gt=0)
    log_level: LogLevel = "INFO"
    log_format: Literal["console", "json"] = "console"

    @field_validator("log_level", "log_format", mode="before")
    @classmethod
    def _normalize_case(cls, value: object, info: ValidationInfo) -> object:
        if not isinstance(value, str):
            return value
        return value.upper() if info.field_name == "log_level" else value.lower()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``BUNDLE_DIFF_*`` variables, ignoring blanks."""
        env = os.environ if environ is None else environ
        values: dict[str, str] = {}
        for field in cls.model_fields:
            raw = env.get(f"{ENV_PREFIX}{field.upper()}", "").strip()
            if raw:
                values[field] = raw
        return cls.model_validate(values)
