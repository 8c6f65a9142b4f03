"""Application configuration"""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "Cambio"
    DEBUG: bool = True
    API_V1_PREFIX: str = "/api/v1"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./cambio.db"

    # Conversion
    BRIDGE_CURRENCY: str = "USDT"
    # "FROM:TO" -> "forward" | "reverse"
    SUPPORTED_PAIRS: dict[str, str] = {
        "BRL:BOB": "forward",
        "BOB:BRL": "reverse",
    }
    RATE_INVARIANT: str = "buy_above_sell"
    MAX_SPREAD_PERCENT: float = 10.0

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )


settings = Settings()
