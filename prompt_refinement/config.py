from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Security: Read from .env, never hardcode defaults here
    OPENAI_API_KEY: str

    OPENAI_MODEL: str = "gpt-4"

    # Generation Parameters
    LLM_TEMPERATURE: float = 0.7
    LLM_MAX_TOKENS: int = 500
    # A provider call that exceeds this is treated as a failed call (fail-open)
    LLM_TIMEOUT_SECONDS: float = 30.0

    # Extra attempts when two refinements race for the same iteration number
    MAX_RETRIES: int = 2

    # Database Configuration
    DATABASE_URL: str

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # HTTP
    CORS_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    # Loads from a .env file in the root directory
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

# Singleton instance
settings = Settings()
