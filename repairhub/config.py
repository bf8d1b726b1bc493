"""Client configuration from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    TELEGRAM_BOT_TOKEN: str = ""
    API_BASE_URL: str = "http://192.168.39.252:5500"
    REDIS_URL: str = "redis://redis:6379/0"
    HTTP_TIMEOUT_SECONDS: float = 30.0
    HTTP_LOG_BODIES: bool = False
    TOKEN_STORE: str = "memory"  # "memory" or "redis"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "allow"


settings = Settings()
