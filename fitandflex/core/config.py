import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _get_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings loaded from environment variables."""

    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "Fit & Flex Back Office")
    API_PREFIX: str = os.getenv("API_PREFIX", "/api")
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./fitandflex.db")
    SECRET_KEY: str = os.getenv("SECRET_KEY", "changeme")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))
    REFRESH_GRACE_DAYS: int = int(os.getenv("REFRESH_GRACE_DAYS", "7"))

    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "")
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "")
    ADMIN_NAME: str = os.getenv("ADMIN_NAME", "Super Admin")

    DEFAULT_CURRENCY: str = os.getenv("DEFAULT_CURRENCY", "USD")
    REFUND_WINDOW_DAYS: int = int(os.getenv("REFUND_WINDOW_DAYS", "30"))
    # Reservations historically never checked class capacity; kept off unless
    # the business asks for a hard limit.
    ENFORCE_RESERVATION_CAPACITY: bool = _get_bool("ENFORCE_RESERVATION_CAPACITY")

    CORS_ORIGINS: list[str] = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "*").split(",")
        if origin.strip()
    ]
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "text").lower()


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
