"""Configuration module for the WhatsApp transfer agent."""

import os
from typing import List
from pydantic import Field
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application Configuration
    app_name: str = Field(default="Bambu WhatsApp Transfers", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # DEMO synthesizes transfer results, PRODUCTION calls Wise
    mode: str = Field(default="DEMO", alias="MODE")

    # FastAPI Configuration
    api_host: str = Field(default="127.0.0.1", alias="API_HOST")
    api_port: int = Field(default=3000, alias="API_PORT")
    api_reload: bool = Field(default=True, alias="API_RELOAD")
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"],
        alias="CORS_ORIGINS"
    )

    # WhatsApp Cloud API Configuration
    whatsapp_access_token: str = Field(default="", alias="WHATSAPP_ACCESS_TOKEN")
    whatsapp_phone_number_id: str = Field(default="", alias="WHATSAPP_PHONE_NUMBER_ID")
    whatsapp_api_url: str = Field(default="https://graph.facebook.com/v18.0", alias="WHATSAPP_API_URL")
    webhook_verify_token: str = Field(default="my_verify_token", alias="WEBHOOK_VERIFY_TOKEN")

    # Wise API Configuration
    wise_api_key: str = Field(default="", alias="WISE_API_KEY")
    wise_profile_id: str = Field(default="", alias="WISE_PROFILE_ID")
    wise_api_url: str = Field(default="https://api.sandbox.transferwise.tech", alias="WISE_API_URL")
    wise_timeout: float = Field(default=15.0, alias="WISE_TIMEOUT")  # stays within Meta's 20s webhook window

    # Language model fallback
    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o-mini", alias="OPENAI_MODEL")
    openai_base_url: str = Field(default="", alias="OPENAI_BASE_URL")

    # Sessions
    session_timeout_minutes: int = Field(default=30, alias="SESSION_TIMEOUT_MINUTES")
    session_sweep_interval_seconds: int = Field(default=300, alias="SESSION_SWEEP_INTERVAL_SECONDS")

    # Rate limits
    webhook_rate_limit: str = Field(default="100/minute", alias="WEBHOOK_RATE_LIMIT")
    user_rate_limit: str = Field(default="20/minute", alias="USER_RATE_LIMIT")

    # Phone verification
    verification_code_expiry_minutes: int = Field(default=10, alias="VERIFICATION_CODE_EXPIRY_MINUTES")
    verification_max_attempts: int = Field(default=3, alias="VERIFICATION_MAX_ATTEMPTS")
    verification_max_resends_per_hour: int = Field(default=3, alias="VERIFICATION_MAX_RESENDS_PER_HOUR")
    verification_resend_cooldown_seconds: int = Field(default=60, alias="VERIFICATION_RESEND_COOLDOWN_SECONDS")

    # Logging
    log_file: str = Field(default="logs/app.log", alias="LOG_FILE")
    log_rotation: str = Field(default="10 MB", alias="LOG_ROTATION")
    log_retention: str = Field(default="30 days", alias="LOG_RETENTION")

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore"
    }

    @property
    def is_production(self) -> bool:
        """Whether real transfers should be sent through Wise."""
        return self.mode.upper() == "PRODUCTION"

    @property
    def wise_configured(self) -> bool:
        return bool(self.wise_api_key and self.wise_profile_id)

    @property
    def whatsapp_configured(self) -> bool:
        return bool(self.whatsapp_access_token and self.whatsapp_phone_number_id)


# Create global settings instance
settings = Settings()

# Ensure logs directory exists
try:
    log_dir = os.path.dirname(settings.log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
except OSError as e:
    print(f"Warning: Could not create logs directory: {e}")
