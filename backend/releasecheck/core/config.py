from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "ReleaseCheck API"
    database_url: str = "sqlite+pysqlite:///./releasecheck.db"
    host: str = "0.0.0.0"
    port: int = 5000
    allowed_origins: str = ""
    releasecheck_api_url: str = "http://localhost:5000/api"
    client_timeout_seconds: float = 10.0

    @property
    def cors_allowed_origins(self) -> list[str]:
        origins = [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]
        return origins or ["*"]


@lru_cache
def get_settings() -> Settings:
    return Settings()
