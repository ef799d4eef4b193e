"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "iso-bridge"
    log_level: str = "INFO"

    # Request limits (characters of raw legacy text or XML)
    max_payload_chars: int = 1_000_000


settings = Settings()
