from pathlib import Path
import os
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repo root

ENV_FILE = os.getenv("ENV_FILE", str(BASE_DIR / ".env"))

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=ENV_FILE, extra="ignore")

    APP_ENV: str = "local"
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    STORE_BACKEND: str = "auto"  # auto | file | sql
    DATABASE_URL: str | None = None
    STORE_CREDENTIALS_PATH: str | None = None
    DATA_FILE: str = str(BASE_DIR / "data" / "db.json")

    FRONTEND_URL: str = "http://127.0.0.1:5500"  # Comma-separated list of allowed origins
    AUTH_MODE: str = "local"  # local | external

    RATE_LIMIT_MAX: int = 200
    RATE_LIMIT_WINDOW_SECONDS: int = 60
    MAX_BODY_BYTES: int = 10 * 1024 * 1024

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse FRONTEND_URL into a list, handling '*' for development"""
        if self.FRONTEND_URL == "*":
            return ["*"]
        return [origin.strip() for origin in self.FRONTEND_URL.split(",") if origin.strip()]

    @property
    def external_auth(self) -> bool:
        return self.AUTH_MODE.lower() == "external"

    def resolved_backend(self) -> str:
        backend = self.STORE_BACKEND.lower()
        if backend != "auto":
            return backend
        if self.DATABASE_URL or self.STORE_CREDENTIALS_PATH:
            return "sql"
        return "file"

settings = Settings()
