"""Configuration module for the ice analytics project."""

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, ConfigDict
from pydantic_settings import BaseSettings

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Only the service layer (API, scripts, file loader) reads these. The
    analytics functions take their thresholds as call parameters.
    """

    # Data paths
    data_root: Path = Field(default=Path("./data"), alias="DATA_ROOT")
    game_feed_path: Path = Field(default=Path("./data/games"), alias="GAME_FEED_PATH")
    reports_path: Path = Field(default=Path("./data/reports"), alias="REPORTS_PATH")

    # API
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=8000, alias="API_PORT")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_file: Optional[Path] = Field(default=None, alias="LOG_FILE")

    # Defaults handed to the engine by the service layer
    default_rolling_window: int = Field(default=10, alias="DEFAULT_ROLLING_WINDOW")
    default_bucket_count: int = Field(default=16, alias="DEFAULT_BUCKET_COUNT")

    model_config = ConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True
    )


# Global settings instance
settings = Settings()


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    directories = [
        settings.data_root,
        settings.game_feed_path,
        settings.reports_path,
        settings.reports_path / "rolling",
        settings.reports_path / "shots",
    ]
    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)


if __name__ == "__main__":
    print("Configuration loaded successfully!")
    print(f"Data root: {settings.data_root}")
    print(f"Game feeds: {settings.game_feed_path}")
    print(f"Log level: {settings.log_level}")
    ensure_directories()
    print("All directories created successfully!")
