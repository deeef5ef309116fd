"""
Console Configuration
Pydantic Settings for environment-based configuration
"""

from typing import Literal
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Console settings from environment variables
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "KHW-Console"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"

    # Backend API Client
    api_client: Literal["mock", "http"] = "mock"
    api_base_url: str = Field(
        default="http://localhost:8000",
        description="KHW backend base URL (without /api/v1)",
    )
    api_v1_prefix: str = "/api/v1"
    api_timeout_seconds: float = 30.0
    api_access_token: str | None = None

    # Similar Manual Search (상담 입력 → 관련 메뉴얼 자동 조회)
    similar_search_debounce_ms: int = Field(default=1000, ge=0)
    similar_search_min_length: int = Field(default=4, ge=0)
    similar_search_top_k: int = Field(default=3, ge=1, le=50)
    similar_search_status: str = "APPROVED"

    # Mock client
    mock_latency_seconds: float = 0.05

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = False  # Structured JSON logging

    @property
    def api_url(self) -> str:
        """Base URL including API version prefix"""
        return self.api_base_url.rstrip("/") + self.api_v1_prefix


# Global settings instance
settings = Settings()
