"""Application configuration."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pagebundler.core.models import RenderMode


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    directories: list[Path] = Field(default_factory=list)
    render_mode: RenderMode = RenderMode.PLAIN
    quiet: bool = False
    log_level: str = "INFO"
    require_title_match: bool = False
    isolate_errors: bool = False

    model_config = SettingsConfigDict(
        env_prefix="PAGEBUNDLER_",
        env_file=".env",
        env_file_encoding="utf-8",
    )


settings = Settings()
