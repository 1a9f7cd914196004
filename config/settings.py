"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from decimal import Decimal
from functools import lru_cache

from config.pricing import DEFAULT_SIZE_PRICING_SUPPLIERS, TOTAL_DRIFT_TOLERANCE


class Settings(BaseSettings):
    """
    Engine settings.

    All values loaded from .env file or environment variables.
    Every field has a default, so the engine runs without any configuration.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ===================
    # PRICING
    # ===================
    total_drift_tolerance: Decimal = Field(
        default=TOTAL_DRIFT_TOLERANCE,
        ge=0,
        description="Stored order totals within this amount of the item sum are left alone"
    )
    size_pricing_suppliers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SIZE_PRICING_SUPPLIERS),
        description="Supplier name fragments that price per garment size"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
