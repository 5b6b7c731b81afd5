from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    POSTGRES_HOST: str = "postgres"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "tailor"
    POSTGRES_USER: str = "tailor"
    POSTGRES_PASSWORD: str = "tailor"
    # Full SQLAlchemy URL; overrides the POSTGRES_* parts when set (e.g. sqlite:///./designs.db)
    DATABASE_URL: Optional[str] = None

    SERVICE_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    RUN_MIGRATIONS: bool = False
    CORS_ORIGINS: list[str] = ["*"]
    RELEASE_ID: str = "unknown"
    # Readiness also pings this cache when set
    REDIS_URL: Optional[str] = None

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

@lru_cache
def get_settings() -> Settings:
    return Settings()
