from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    environment: str = "dev"
    secret_key: str = "change-me"

    database_url: str = "sqlite:///./expense_tracker.db"

    cors_origins: list[str] = ["http://localhost:5173"]

    # OCR is optional: without a key, uploads that need OCR degrade to manual entry.
    ocr_space_api_key: str | None = None
    ocr_space_url: str = "https://api.ocr.space/parse/image"
    ocr_timeout_seconds: float = 60.0

    max_upload_bytes: int = 10 * 1024 * 1024

    access_token_exp_minutes: int = 60 * 24


settings = Settings()
