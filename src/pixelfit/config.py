"""pixelfit configuration using pydantic-settings.

All configuration is strongly typed and supports environment variables
and .env files.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"  # "console" or "json"

    # Size targeting
    MAX_ITERATIONS: int = 20  # Encode attempts in the shrink regime
    INITIAL_QUALITY: float = 0.9  # Starting encoder quality (0-1)
    SIZE_TOLERANCE: float = 0.05  # +/- band around the target byte size
    DEVIATION_WARNING_PERCENT: float = 10.0  # Report threshold for results

    # Units and cropping
    DEFAULT_DPI: int = 96  # Screen DPI for unit conversion
    CROP_DPI: int = 300  # Print DPI for physical crops

    # Preview container (display space)
    PREVIEW_MAX_WIDTH: int = 600
    PREVIEW_MAX_HEIGHT: int = 600


# Singleton instance for import convenience
settings = Settings()
