from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    app_name: str = "Creator Matching"
    database_url: str = "sqlite+aiosqlite:///./creator_matching.db"
    db_echo: bool = False

    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    log_level: str = "INFO"

    # Matching
    default_match_limit: int = 20
    recommendation_limit: int = 10

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
