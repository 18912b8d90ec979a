"""
Application configuration management.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Record store (Supabase / PostgREST)
    supabase_url: Optional[str] = None
    supabase_service_role_key: Optional[str] = None
    error_log_table: str = "function_errors"
    runs_table: str = "function_runs"
    audit_config_table: str = "audit_config"

    # Discord
    discord_bot_token: Optional[str] = None
    discord_channel_id: Optional[str] = None
    discord_application_id: Optional[str] = None
    discord_public_key: Optional[str] = None
    discord_api_base_url: str = "https://discord.com/api/v10"

    # Job re-invocation
    functions_base_url: Optional[str] = None
    function_invoke_key: Optional[str] = None

    # Application
    project_name: str = "Unknown Project"
    log_level: str = "INFO"
    http_timeout_seconds: float = 10.0
    job_invoke_timeout_seconds: float = 150.0
    interaction_store_timeout_seconds: float = 2.5

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def store_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_role_key)

    @property
    def chat_configured(self) -> bool:
        return bool(self.discord_bot_token and self.discord_channel_id)

    @property
    def job_invoker_configured(self) -> bool:
        return bool(self.functions_base_url and self.function_invoke_key)


@lru_cache
def get_settings() -> Settings:
    """Build the process-wide settings once and reuse them."""
    return Settings()
