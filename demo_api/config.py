"""
Settings
========
Environment-driven settings for the demo API server.
Values are read from the process environment or a local `.env` file.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # App
    PROJECT_NAME: str = "Demo API Endpoints"
    SERVICE_NAME: str = "demo-api"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    API_PREFIX: str = "/api"
    FSC_PREFIX: str = "/api/fsc"
    LOG_LEVEL: str = "INFO"

    # Comma-separated origin list, used outside development
    CORS_ALLOWED_ORIGINS: str = ""

    # ----------------------------------------------------------------
    # Simulation timings (ms)
    # ----------------------------------------------------------------

    # Shared by every FSC endpoint's "timeout" scenario
    TIMEOUT_SCENARIO_DELAY_MS: int = 10_000

    # /api/delay
    DEFAULT_DELAY_MS: int = 1_000
    MAX_DELAY_MS: int = 30_000

    # /api/random-fail
    DEFAULT_FAILURE_RATE: float = 0.5

    # Access log slow_request threshold
    SLOW_REQUEST_MS: float = 500.0

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ALLOWED_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
