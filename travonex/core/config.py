from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"
    APP_NAME: str = "Travonex API"
    LOG_LEVEL: str = "INFO"
    # Comma-separated origins for CORS. If empty, uses localhost defaults.
    CORS_ORIGINS: str = ""

    DATABASE_URL: str = "sqlite:///./travonex.db"

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Render and others give postgres://; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[11:]
        return v
    REDIS_URL: str = "redis://localhost:6379/0"

    # Booking / cancellation policy
    CANCELLATION_BUFFER_HOURS: int = 24
    DEPARTURE_TIMEZONE: str = "Asia/Kolkata"
    CURRENCY: str = "INR"

    # Cost of unlocking one lead, in credits
    LEAD_UNLOCK_COST: int = 1

    # Celery beat
    WORKER_TIMEZONE: str = "Asia/Kolkata"


settings = Settings()
