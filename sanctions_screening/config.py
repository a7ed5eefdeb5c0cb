"""Configuration settings for the Sanctions Screening service."""

from pydantic_settings import BaseSettings
from pydantic import Field, model_validator
from typing import Optional
from functools import lru_cache
from enum import Enum


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_name: str = "Sanctions Screening API"
    app_version: str = "0.1.0"
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False

    # API Server
    host: str = "0.0.0.0"
    port: int = 8000
    api_prefix: str = "/v1"

    # Screening
    per_source_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Seconds each source may take before it is marked as timed out"
    )
    batch_max_concurrent: int = Field(default=10, ge=1)

    # Match thresholds
    admission_threshold: float = Field(
        default=0.6,
        ge=0.0,
        le=1.0,
        description="Candidates must score strictly above this to be considered"
    )
    medium_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    high_threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    critical_threshold: float = Field(default=0.9, ge=0.0, le=1.0)

    # HTTP client used by source adapters
    http_timeout: float = 30.0
    user_agent: str = "Sanctions-Screening/0.1"

    # Sources
    ofac_api_endpoint: str = "https://api.ofac-api.com/v4/search"
    ofac_api_key: Optional[str] = None

    eu_sanctions_endpoint: str = (
        "https://webgate.ec.europa.eu/fsd/fsf/public/files/xmlFullSanctionsList_1_1/content"
    )
    eu_sanctions_api_key: Optional[str] = None

    un_sanctions_endpoint: str = "https://scsanctions.un.org/resources/xml/en/consolidated.xml"
    un_sanctions_api_key: Optional[str] = None

    uk_sanctions_endpoint: str = (
        "https://ofsistorage.blob.core.windows.net/publishlive/2022format/ConList.json"
    )
    uk_sanctions_api_key: Optional[str] = None

    moov_watchman_endpoint: str = "https://api.moov.io/watchman"
    moov_public_key: Optional[str] = None
    moov_private_key: Optional[str] = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @model_validator(mode="after")
    def check_tier_order(self) -> "Settings":
        if not (self.medium_threshold <= self.high_threshold <= self.critical_threshold):
            raise ValueError(
                "risk thresholds must satisfy medium <= high <= critical"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
