from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent.parent  # project root
ENV_PATH = BASE_DIR / ".env"

# Load .env into the process environment first; real env vars still win.
load_dotenv(dotenv_path=ENV_PATH)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=False,
    )

    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_ECHO: bool = False
    DB_QUERY_TIMEOUT_SECONDS: float = 10.0

    JWT_SECRET: str
    JWT_ALG: str = "HS256"

    LOG_LEVEL: str = "INFO"
    # Only honour X-Forwarded-For when running behind a trusted proxy
    TRUST_PROXY_HEADERS: bool = False

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    DEFAULT_PAGE_LIMIT: int = 50
    MAX_PAGE_LIMIT: int = 200

    RECENT_USERS_DAYS: int = 7
    ACTIVE_USERS_DAYS: int = 30
    TOP_USERS_LIMIT: int = 10

    # Placeholder list prices for the revenue estimate (not real billing data)
    PRICE_PREMIUM_MONTHLY: Decimal = Decimal("4.99")
    PRICE_PREMIUM_PLUS_MONTHLY: Decimal = Decimal("9.99")


settings = Settings()
