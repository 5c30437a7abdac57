from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="AAS_CI_LINT_", env_file=".env", extra="ignore")

    # Template conformance
    template_dir: str | None = None
    cache_dir: str | None = None  # Overrides the platform cache root

    # External AAS Test Engines
    test_engines_executable: str = "aas_test_engines"
    test_engines_timeout: float = Field(default=120.0, gt=0)

    # Observability
    log_level: str = "WARNING"
    log_format: str = "console"  # console or json


def get_settings() -> Settings:
    """Load settings from the current environment.

    Settings are rebuilt on each call so that environment overrides made
    after import (CI step env, tests) are honored.
    """
    return Settings()
