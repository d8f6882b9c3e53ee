import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from judging.models.enums import ScoreModelName, SchemaVersion, StoreBackend


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # Supabase Configuration
    supabase_url: Optional[str] = Field(
        None, description="URL for the Supabase project."
    )
    supabase_key: Optional[str] = Field(
        None, description="Anon key for the Supabase project."
    )
    supabase_service_key: Optional[str] = Field(
        None, description="Service role key for Supabase (use with caution!)."
    )

    # Storage
    store_backend: StoreBackend = Field(
        StoreBackend.SUPABASE,
        description="Which persistence store backs the registry and evaluations.",
    )
    # Resolved once at startup, never probed at runtime
    schema_version: SchemaVersion = Field(
        SchemaVersion.TEAM_ID,
        description="Team identity model of the evaluations table.",
    )

    # Scoring Configuration
    score_model: ScoreModelName = Field(
        ScoreModelName.LIKERT_5,
        description="Score model variant in effect (likert_5 or ai_tools).",
    )

    # Admin gate: SHA-256 hex digest of the shared admin passphrase
    admin_passphrase_sha256: Optional[str] = Field(
        None,
        min_length=64,
        max_length=64,
        description="Hex digest of the admin passphrase. Admin actions are locked when unset.",
    )

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def supabase_api_key(self) -> Optional[str]:
        """Key used for writes: the service key when present, else the anon key."""
        return self.supabase_service_key or self.supabase_key


def load_settings() -> AppSettings:
    """Loads and validates application settings."""
    try:
        settings = AppSettings()
        log_level_upper = settings.log_level.upper()
        # Validate log_level even if loaded from .env
        if log_level_upper not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            logging.warning(
                f"Invalid LOG_LEVEL '{settings.log_level}' found in .env or default. Using INFO."
            )
            settings.log_level = "INFO"
        else:
            settings.log_level = log_level_upper
        return settings
    except Exception as e:
        logging.exception(f"Error loading application settings: {e}")
        raise SystemExit("Failed to load application settings. Exiting.")


settings: AppSettings = load_settings()
