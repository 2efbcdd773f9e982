"""
Configuration Management for the Net Worth engine

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every external collaborator (record API, goal spreadsheet, session polling)
is configured through one of the classes below and validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseSettings):
    """Record API (per-category CRUD services) configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="NETWORTH_API_",
        extra="ignore"
    )
    
    base_url: str = Field(
        default="http://localhost:3001/api",
        description="Base URL of the record services"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Per-request timeout applied by the HTTP record providers"
    )
    
    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Paths are joined with a leading slash."""
        return v.rstrip("/")


class MonitorSettings(BaseSettings):
    """Identity monitor configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="NETWORTH_MONITOR_",
        extra="ignore"
    )
    
    poll_interval_seconds: float = Field(
        default=0.5,
        gt=0,
        le=60,
        description="How often the session is sampled when it cannot push changes"
    )
    token_key: str = Field(
        default="accessToken",
        description="Session key holding the access token"
    )
    user_key: str = Field(
        default="user",
        description="Session key holding the JSON-encoded user"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration (goals and audit trail)."""
    
    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )
    
    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )
    
    # Sheet names within the spreadsheet
    goals_sheet_name: str = Field(
        default="Goals",
        description="Name of the sheet holding one active goal per user"
    )
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Name of the sheet for audit logs"
    )
    
    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.
    
    Loads configuration from environment variables and .env file.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    # Valuation policy
    wallet_account_type: str = Field(
        default="Wallet",
        min_length=1,
        description="Bank account type that is reported as a wallet"
    )


class Settings(BaseSettings):
    """
    Root settings container.
    
    Aggregates all sub-settings for easy access.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    # Sub-settings are loaded lazily to allow partial configuration
    
    @property
    def api(self) -> ApiSettings:
        return ApiSettings()
    
    @property
    def monitor(self) -> MonitorSettings:
        return MonitorSettings()
    
    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()
    
    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).
    
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.
    
    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}
    
    settings = get_settings()
    
    for name in ("api", "monitor", "google_sheets", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)
    
    return results
