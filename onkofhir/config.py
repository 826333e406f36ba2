# onkofhir/config.py
"""
ONKOFHIR Configuration — Single source of truth via Pydantic Settings.

Resolution order: constructor arguments > env vars (ONKOFHIR_*) > .env file > defaults.

The settings object is frozen: it is read once at process start and then
shared read-only by every processor, so concurrent reconciliation calls
never see it change.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OnkoConfig(BaseSettings):
    """Central configuration for the reconciliation core."""

    model_config = SettingsConfigDict(
        env_prefix="ONKOFHIR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # --- Identifier systems (also used as pseudonymization salts) ---
    patient_id_system: str = "urn:onkofhir:identifiers:patient-id"
    condition_id_system: str = "urn:onkofhir:identifiers:condition-id"
    observation_id_system: str = "urn:onkofhir:identifiers:observation-id"

    # --- Logging ---
    log_level: str = "INFO"
    home_dir: Path = Field(default_factory=lambda: Path.home() / ".onkofhir")

    @property
    def log_dir(self) -> Path:
        return self.home_dir / "logs"


@lru_cache(maxsize=1)
def get_config() -> OnkoConfig:
    """Return the config loaded once for entry points.

    Library code takes an :class:`OnkoConfig` argument instead of calling
    this.
    """
    return OnkoConfig()
