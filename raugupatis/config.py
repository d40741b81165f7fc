"""
Application configuration using pydantic-settings.
"""
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RAUGUPATIS_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Raugupatis Log"
    environment: Literal["development", "test", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/raugupatis.db"

    # Sessions
    session_secret: str = Field(default="dev-secret-change-me-please", min_length=16)
    session_cookie_name: str = "raugupatis_session"
    session_ttl_hours: int = 24
    remember_me_ttl_hours: int = 120

    # Paths
    data_dir: Path = Path("./data")
    uploads_dir: Path = Path("./data/uploads")
    templates_dir: Path = Path(__file__).resolve().parent / "templates"

    # Uploads
    max_upload_bytes: int = 10 * 1024 * 1024  # 10 MiB

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # CORS
    cors_origins: list[str] = ["http://localhost:8000", "http://127.0.0.1:8000"]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def sqlite_path(self) -> Path | None:
        """Filesystem path of the SQLite database, None for in-memory URLs."""
        _, _, path = self.database_url.partition(":///")
        if not path or path.startswith(":memory:"):
            return None
        return Path(path)

    def ensure_dirs(self) -> None:
        """Create required directories if they don't exist."""
        dirs = [self.data_dir, self.uploads_dir]
        if self.sqlite_path is not None:
            dirs.append(self.sqlite_path.parent)
        for dir_path in dirs:
            dir_path.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()
    settings.ensure_dirs()
    return settings
