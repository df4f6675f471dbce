# File: secreq_api/core/config.py
import sys
import logging
from typing import List, Optional
from pydantic import Field, field_validator, ValidationError, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_prefix='SECREQ_',
        case_sensitive=False,
        env_file_encoding='utf-8',
        extra='ignore'
    )

    PROJECT_NAME: str = "SecReq API"
    SERVICE_NAME: str = "secreq-api"
    SERVICE_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    API_V1_STR: str = "/api/v1"
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = Field(default="json", description="json for log shipping, console for local development.")

    # --- Supabase (identity + invites) ---
    SUPABASE_URL: str = Field(default="http://localhost:54321", description="Supabase project URL.")
    SUPABASE_ANON_KEY: SecretStr = Field(default=SecretStr(""), description="Anon key used for auth.get_user.")
    SUPABASE_SERVICE_ROLE_KEY: Optional[SecretStr] = Field(default=None, description="Service key for invite/membership tables.")

    # --- Google Gemini ---
    GOOGLE_API_KEY: Optional[SecretStr] = None
    GENERATION_MODEL_NAME: str = "gemini-2.5-flash"
    GENERATION_TEMPERATURE: float = 0.2
    EMBEDDING_MODEL_NAME: str = "gemini-embedding-001"
    EMBEDDING_TASK_TYPE: str = "RETRIEVAL_QUERY"
    EMBEDDING_MAX_CONCURRENCY: int = Field(default=8, ge=1)

    # --- Slack signup notifications ---
    SLACK_WEBHOOK_URL: Optional[str] = None
    SIGNUP_NOTIFY_WINDOW_SECONDS: int = 30
    SIGNUP_MESSAGE_PREFIX: str = "secreq"

    # --- Invite emails ---
    APP_URL: str = Field(default="http://localhost:3000", description="Public web app URL; invite links point at its /accept-invite page.")
    RESEND_API_KEY: Optional[SecretStr] = None
    INVITE_EMAIL_FROM: str = "SecReq <no-reply@secreq.io>"

    # --- HTTP ---
    HTTP_CLIENT_TIMEOUT: int = 30
    CORS_ALLOWED_ORIGINS: List[str] = ["*"]

    @field_validator('LOG_LEVEL')
    @classmethod
    def check_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        normalized_v = v.upper()
        if normalized_v not in valid_levels:
            raise ValueError(f"Invalid LOG_LEVEL '{v}'. Must be one of {valid_levels}")
        return normalized_v

    @field_validator("LOG_FORMAT")
    @classmethod
    def check_log_format(cls, v: str) -> str:
        normalized_v = v.lower()
        if normalized_v not in ("json", "console"):
            raise ValueError(f"Invalid LOG_FORMAT '{v}'. Must be json or console")
        return normalized_v

    @field_validator('SLACK_WEBHOOK_URL')
    @classmethod
    def blank_webhook_is_missing(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


@lru_cache()
def get_settings() -> Settings:
    temp_log = logging.getLogger("secreq_api.config.loader")
    if not temp_log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
        temp_log.addHandler(handler)
        temp_log.setLevel(logging.INFO)

    temp_log.info("Loading SecReq API settings...")
    try:
        settings_instance = Settings()
        temp_log.info("--- SecReq API Settings Loaded ---")
        temp_log.info(f"  PROJECT_NAME: {settings_instance.PROJECT_NAME}")
        temp_log.info(f"  LOG_LEVEL: {settings_instance.LOG_LEVEL}")
        temp_log.info(f"  SUPABASE_URL: {settings_instance.SUPABASE_URL}")
        temp_log.info(f"  GENERATION_MODEL_NAME: {settings_instance.GENERATION_MODEL_NAME}")
        temp_log.info(f"  EMBEDDING_MODEL_NAME: {settings_instance.EMBEDDING_MODEL_NAME}")
        temp_log.info(f"  SLACK_WEBHOOK_URL set: {bool(settings_instance.SLACK_WEBHOOK_URL)}")
        temp_log.info(f"  APP_URL: {settings_instance.APP_URL}")
        temp_log.info(f"  RESEND_API_KEY set: {bool(settings_instance.RESEND_API_KEY)}")
        temp_log.info("----------------------------------")
        return settings_instance
    except ValidationError as e:
        temp_log.critical("! FATAL: Error validating SecReq API settings: %s", e)
        sys.exit("FATAL: Invalid SecReq API configuration. Check logs.")

settings = get_settings()
