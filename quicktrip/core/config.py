from typing import List
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "QuickTrip API"
    VERSION: str = "0.1.0"
    API_V1_STR: str = "/api/v1"

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    OVERPASS_URL: str = "https://overpass-api.de/api/interpreter"
    OVERPASS_QUERY_TIMEOUT: int = 25
    OVERPASS_REQUEST_TIMEOUT: float = 30.0
    OVERPASS_USER_AGENT: str = "QuickTrip/1.0"
    OVERPASS_MAX_ATTEMPTS: int = 1

    OPENROUTESERVICE_URL: str = "https://api.openrouteservice.org/v2"
    OPENROUTESERVICE_API_KEY: str | None = None
    ROUTING_REQUEST_TIMEOUT: float = 10.0
    ROUTING_CONCURRENCY: int = 20

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    @field_validator("OVERPASS_MAX_ATTEMPTS", "ROUTING_CONCURRENCY")
    @classmethod
    def at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be >= 1")
        return v


settings = Settings()
