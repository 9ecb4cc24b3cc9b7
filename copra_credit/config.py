"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Remote stores (the dashboard's REST API)
    transaction_store_base: str = "http://localhost:5000/api"
    loan_store_base: str = "http://localhost:5000/api"

    # Service
    service_name: str = "copra-credit"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0


settings = Settings()
