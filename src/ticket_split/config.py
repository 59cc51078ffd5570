"""Configuration management for TicketSplit."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .models import TradingPair


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TICKET_SPLIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database path
    database_path: Path = Path.home() / ".ticket_split" / "ticket_split.db"

    # Where exported ticket documents are written by default
    export_dir: Path = Field(default_factory=Path.cwd)

    # Pair preselected for new operations and listings
    default_pair: TradingPair = "USDT/BRL"

    def __init__(self, **kwargs):
        """Initialize settings and create database directory if needed."""
        super().__init__(**kwargs)
        self.database_path.parent.mkdir(parents=True, exist_ok=True)


def load_settings() -> Settings:
    """Load application settings from environment variables."""
    try:
        return Settings()
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load settings. Check the TICKET_SPLIT_* variables "
            f"in your environment or .env file.\n"
            f"Error: {e}"
        ) from e
