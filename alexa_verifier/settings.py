"""Verifier settings and configuration."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Verifier settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = "development"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    # Certificate chain retrieval
    cert_fetch_timeout_seconds: float = 10.0

    # Trust anchors (PEM bundle); falls back to the platform CA bundle
    trust_anchor_bundle_path: Optional[str] = None

    # HTTP guard
    verify_requests: bool = True

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment.lower() == "development"

    def validate_production_settings(self):
        """Validate settings for production environment."""
        env = self.environment.lower()
        if env not in ("development", "test", "dev"):
            if not self.verify_requests:
                raise ValueError(
                    "VERIFY_REQUESTS=false is not allowed outside development. "
                    "Alexa requests must be verified in production."
                )
            if self.cert_fetch_timeout_seconds <= 0:
                raise ValueError("CERT_FETCH_TIMEOUT_SECONDS must be positive.")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
