"""Application configuration using Pydantic settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Logging
    log_level: str = "INFO"
    log_dir: str | None = None  # No file logging unless set
    log_json: bool = False  # JSON on the console instead of plain text

    # ==========================================================================
    # Change Detection Settings
    # ==========================================================================
    magnitude_large_threshold: float = 25.0  # Percent change above which a price move is "large"
    magnitude_medium_threshold: float = 10.0  # Percent change above which a price move is "medium"

    # ==========================================================================
    # Price Normalization Settings
    # ==========================================================================
    # Integral numbers at or above this are read as cent amounts
    cents_threshold: int = 100

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="STOREWATCH_",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
