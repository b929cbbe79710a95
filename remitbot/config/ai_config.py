"""AI Configuration module for the conversational fallback."""

from typing import Optional
from openai import AsyncOpenAI
from remitbot.utils.config import settings
from remitbot.utils.logger import get_logger

logger = get_logger("ai_config")

_ai_client: Optional[AsyncOpenAI] = None
_ai_enabled = False
_ai_model: Optional[str] = None
_initialized = False


def initialize_ai_services():
    """Initialize AI services based on configuration."""
    global _ai_client, _ai_enabled, _ai_model, _initialized
    _initialized = True

    if not settings.openai_api_key:
        logger.warning("OpenAI API key not configured - conversational fallback will use static replies")
        logger.info("Set OPENAI_API_KEY in .env file to enable conversational features")
        _ai_enabled = False
        _ai_client = None
        _ai_model = None
        return

    try:
        _ai_client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url or None,
        )
        _ai_model = settings.openai_model
        _ai_enabled = True
        logger.info(f"AI fallback enabled with model: {settings.openai_model}")
    except Exception as e:
        logger.error(f"Failed to initialize OpenAI client: {e}")
        _ai_enabled = False
        _ai_client = None
        _ai_model = None


def get_ai_client() -> Optional[AsyncOpenAI]:
    """Get the initialized AI client."""
    if not _initialized:
        initialize_ai_services()
    return _ai_client


def get_ai_model() -> Optional[str]:
    """Get the configured AI model."""
    if not _initialized:
        initialize_ai_services()
    return _ai_model


def is_ai_enabled() -> bool:
    """Check if AI services are enabled."""
    if not _initialized:
        initialize_ai_services()
    return _ai_enabled
