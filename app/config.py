from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # App
    secret_key: str = "change-me-to-a-random-string"
    debug: bool = False
    log_level: str = "INFO"

    # Google OAuth
    google_client_id: str = ""
    google_client_secret: str = ""
    google_redirect_uri: str = ""  # empty: <origin>/api/google-auth

    # Session cookie
    cookie_name: str = "google_auth"
    session_max_age: int = 30 * 24 * 60 * 60  # 30 days

    # Storage; empty disables sync persistence
    database_url: str = ""

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    return Settings()


# Singleton for easy access
settings = get_settings()
