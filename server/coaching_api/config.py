"""Application configuration loaded from environment variables."""
import os
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Database location
    data_path: str = os.getenv("DATA_PATH", os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))
    database_file: str = "coaching.db"

    @property
    def database_path(self) -> str:
        return os.path.join(self.data_path, self.database_file)

    # API configuration
    api_host: str = "127.0.0.1"
    api_port: int = 8082

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Insights are recomputed once a cached report is older than this
    insights_cache_ttl_seconds: float = 300.0

    class Config:
        env_prefix = "COACHING_"


@lru_cache
def get_settings() -> Settings:
    return Settings()
