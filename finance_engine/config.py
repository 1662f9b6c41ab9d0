"""Service settings, read from FINANCE_ENGINE_* environment variables or .env"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FINANCE_ENGINE_",
        extra="ignore",
    )

    service_name: str = "finance-engine"
    log_level: str = "INFO"
    slow_operation_ms: float = Field(250.0, gt=0)

    # Default horizon when a projection request omits max_months
    projection_max_months: int = Field(36, ge=1, le=360)


settings = Settings()
