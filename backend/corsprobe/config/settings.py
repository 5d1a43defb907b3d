from __future__ import annotations

"""backend/corsprobe/config/settings.py

Application configuration using environment-driven settings.

This module centralizes:
- database connection URL (request history and favorites)
- CORS configuration for the API itself
- outbound request defaults (timeout)
- diagnostic capture defaults
- logging level
- optional Statsig telemetry secret
"""
import logging
from functools import lru_cache
from typing import List

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
  app_name: str = "cors-probe"
  environment: str = "development"

  # Database (history + favorites only; diagnoses are never stored)
  database_url: str = "sqlite:///./corsprobe.db"

  # CORS
  allowed_origins: List[AnyHttpUrl] = [
      "http://localhost:3000",
      "http://127.0.0.1:3000",
      "http://localhost:5173",
      "http://127.0.0.1:5173",
  ]

  # Outbound requests
  request_timeout_seconds: float = 30.0

  # Newest successful requests kept in history
  history_limit: int = 20

  # Arm the signal interceptor when the API starts ("debug mode")
  capture_on_startup: bool = True

  log_level: str = "INFO"

  statsig_server_secret: str | None = None

  model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Return a cached Settings instance."""
  return Settings()


def configure_logging(settings: Settings | None = None) -> None:
  """Install a basic root handler at the configured level."""
  settings = settings or get_settings()
  logging.basicConfig(
      level=settings.log_level.upper(),
      format="%(asctime)s %(levelname)s %(name)s: %(message)s",
  )
