import os
from functools import lru_cache
from typing import List

DEFAULT_META_CORRECTED_AD_NAME = "BBSEG | SEGURO RESIDENCIAL | META | VIDEO | 15 (12122025)"


class Settings:
  """Centralized configuration pulled from environment variables."""

  app_name: str = "Campaign Dashboard Backend"
  app_version: str = os.getenv("APP_VERSION", "0.0.1")

  sheets_api_base_url: str
  sheets_spreadsheet_id: str
  benchmark_spreadsheet_id: str
  sheets_timeout_seconds: float

  media_api_base_url: str | None

  supabase_url: str | None
  supabase_service_role: str | None

  allowed_origins: List[str]
  usage_logging_enabled: bool

  meta_corrected_ad_name: str | None
  whatsapp_cutoff_date: str

  def __init__(self) -> None:
    self.sheets_api_base_url = os.getenv("SHEETS_API_BASE_URL", "http://localhost:8080").rstrip("/")
    self.sheets_spreadsheet_id = os.getenv("SHEETS_SPREADSHEET_ID", "")
    self.benchmark_spreadsheet_id = os.getenv(
        "BENCHMARK_SPREADSHEET_ID",
        "1wNHPGsPX3wQuUCBs3an7iBzBY6Y7THYV7V1GijXZo44",
    )
    self.sheets_timeout_seconds = float(os.getenv("SHEETS_TIMEOUT_SECONDS", "30"))

    media_url = os.getenv("MEDIA_API_BASE_URL")
    self.media_api_base_url = media_url.rstrip("/") if media_url else None

    self.supabase_url = os.getenv("SUPABASE_URL")
    self.supabase_service_role = os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv(
        "SUPABASE_SERVICE_ROLE"
    )

    default_allowed = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]
    allowed = os.getenv("BACKEND_ALLOWED_ORIGINS")
    if allowed:
      self.allowed_origins = [origin.strip() for origin in allowed.split(",") if origin.strip()]
    else:
      self.allowed_origins = default_allowed

    self.usage_logging_enabled = os.getenv("ENABLE_USAGE_LOGGING", "0") == "1"

    # the Meta page shows a single corrected ad; an empty value shows every ad
    self.meta_corrected_ad_name = (
        os.getenv("META_CORRECTED_AD_NAME", DEFAULT_META_CORRECTED_AD_NAME).strip() or None
    )
    self.whatsapp_cutoff_date = os.getenv("WHATSAPP_CUTOFF_DATE", "2025-12-08")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  return Settings()


settings = get_settings()
