from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    POSTGRES_HOST: str = "postgres"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "tracking"
    POSTGRES_USER: str = "tracking"
    POSTGRES_PASSWORD: str = "tracking"
    # Full SQLAlchemy URL; takes precedence over the POSTGRES_* parts (e.g. sqlite for local runs)
    DATABASE_URL: Optional[str] = None

    ADMIN_PASSWORD: str = "change-me"
    SESSION_SECRET: str = "change-me"
    SESSION_ALG: str = "HS256"
    SESSION_TTL_MINUTES: int = 480

    TRACKING_PREFIX: str = "GLX"
    DEFAULT_DELIVERY_DAYS: int = 7

    UPLOAD_DIR: str = "uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    SUPPORT_PHONE: str = "+44 7916 341577"
    SUPPORT_EMAIL: str = "support@example.com"

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

@lru_cache
def get_settings() -> Settings:
    return Settings()
