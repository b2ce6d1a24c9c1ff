from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the launcher.

    Values are loaded from environment variables and `.env`.

    Notes:
    - The menu tree itself lives in the YAML document at MENUWORKS_CONFIG;
      these settings only cover where things live and how the screen is laid out.
    - A relative MENUWORKS_LOG_DIR is resolved against the config file's directory.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Menu document
    MENUWORKS_CONFIG: Path = Field(default=Path.home() / ".menuworks" / "config.yaml")

    # Logging (file only while the full-screen menu is up)
    MENUWORKS_LOG_DIR: Path = Field(default=Path("logs"))
    MENUWORKS_LOG_LEVEL: str = Field(default="INFO")
    # Timed rotation retention count (days).
    MENUWORKS_LOG_BACKUP_COUNT: int = Field(default=7)

    # Screen layout
    MENUWORKS_MIN_WIDTH: int = Field(default=80)
    MENUWORKS_MIN_HEIGHT: int = Field(default=25)
    MENUWORKS_MENU_WIDTH: int = Field(default=60)
    MENUWORKS_MAX_VISIBLE_ITEMS: int = Field(default=14)

    # Timing
    MENUWORKS_SPLASH_MS: int = Field(default=400)
    MENUWORKS_NOTICE_SECONDS: float = Field(default=1.5)

    # Forces the platform used to pick command variants (windows, linux, mac).
    MENUWORKS_PLATFORM: str | None = Field(default=None)


def load_settings(**overrides) -> Settings:
    s = Settings(**overrides)
    s.MENUWORKS_CONFIG = s.MENUWORKS_CONFIG.expanduser()
    if s.MENUWORKS_PLATFORM:
        s.MENUWORKS_PLATFORM = s.MENUWORKS_PLATFORM.strip().lower()
    return s
