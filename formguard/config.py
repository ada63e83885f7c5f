"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    # Messages
    DEFAULT_LOCALE: str = "en"
    BUNDLE_DIRS: list[str] = []  # Searched after the built-in bundles, later wins
    MAX_INTERPOLATION_DEPTH: int = 5

    # Outcome responses
    BAD_REQUEST_STATUS: int = 400
    REDIRECT_STATUS: int = 303
    PAGE_STATUS: int = 200

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DEBUG: bool = False
    LOG_LEVEL: str = "info"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
