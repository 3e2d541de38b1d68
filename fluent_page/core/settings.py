"""
Centralized settings (environment variables / .env).
"""
# @file purpose: Centralized settings using Pydantic Settings.

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="FLUENT_PAGE_", env_file=".env", extra="ignore")

    headless: bool = True
    proxy: str | None = None
    browser: Literal["chromium", "firefox", "webkit"] = "chromium"
    default_timeout_ms: int = 30_000
    slow_mo_ms: int = 0
    log_level: str = "INFO"


settings = Settings()
