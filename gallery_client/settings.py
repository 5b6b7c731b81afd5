from pydantic_settings import BaseSettings
from functools import lru_cache

class ClientSettings(BaseSettings):
    GALLERY_API_URL: str = "http://localhost:8000/api"
    GALLERY_API_TIMEOUT: float = 30.0

    class Config:
        env_file = ".env"
        extra = "ignore"

@lru_cache
def get_client_settings() -> ClientSettings:
    return ClientSettings()
