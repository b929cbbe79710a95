"""Service validation utilities to ensure all services are properly configured."""

from typing import Any, Dict
from remitbot.utils.config import settings
from remitbot.utils.logger import get_logger

logger = get_logger("service_validator")


def validate_whatsapp_config() -> Dict[str, Any]:
    """Validate WhatsApp Cloud API configuration."""
    issues = []
    warnings = []

    if not settings.whatsapp_access_token:
        issues.append("WHATSAPP_ACCESS_TOKEN is not configured - replies cannot be delivered")

    if not settings.whatsapp_phone_number_id:
        issues.append("WHATSAPP_PHONE_NUMBER_ID is not configured - replies cannot be delivered")

    if not settings.webhook_verify_token or settings.webhook_verify_token == "my_verify_token":
        warnings.append("WEBHOOK_VERIFY_TOKEN is using the default value")

    return {
        "valid": len(issues) == 0,
        "issues": issues,
        "warnings": warnings
    }


def validate_wise_config() -> Dict[str, Any]:
    """Validate Wise API configuration against the selected mode."""
    issues = []
    warnings = []

    missing = []
    if not settings.wise_api_key:
        missing.append("WISE_API_KEY")
    if not settings.wise_profile_id:
        missing.append("WISE_PROFILE_ID")

    if missing:
        message = f"{', '.join(missing)} not configured"
        if settings.is_production:
            issues.append(f"{message} - PRODUCTION mode will fall back to demo transfers")
        else:
            warnings.append(f"{message} - demo transfers only")

    if settings.is_production and "sandbox" in settings.wise_api_url:
        warnings.append("MODE=PRODUCTION is pointed at the Wise sandbox")

    return {
        "valid": len(issues) == 0,
        "issues": issues,
        "warnings": warnings
    }


def validate_ai_config() -> Dict[str, Any]:
    """Validate language model fallback configuration."""
    issues = []
    warnings = []

    if not settings.openai_api_key:
        warnings.append("OPENAI_API_KEY is not configured - fallback replies will be static")

    if not settings.openai_model:
        warnings.append("OPENAI_MODEL is not configured - using default")

    return {
        "valid": len(issues) == 0,
        "issues": issues,
        "warnings": warnings,
        "ai_enabled": bool(settings.openai_api_key)
    }


def validate_all_services() -> Dict[str, Any]:
    """Validate all service configurations."""
    results = {
        "whatsapp": validate_whatsapp_config(),
        "wise": validate_wise_config(),
        "ai": validate_ai_config(),
        "overall_valid": True
    }

    if not results["whatsapp"]["valid"] or not results["wise"]["valid"]:
        results["overall_valid"] = False

    for service_name, result in results.items():
        if service_name == "overall_valid":
            continue
        for warning in result.get("warnings", []):
            logger.warning(f"⚠️  {service_name.upper()}: {warning}")
        for issue in result.get("issues", []):
            logger.error(f"❌ {service_name.upper()}: {issue}")

    return results


def log_service_status() -> Dict[str, Any]:
    """Log the status of all services for debugging."""
    logger.info("=" * 60)
    logger.info("Service Configuration Status")
    logger.info("=" * 60)

    results = validate_all_services()

    logger.info(f"Mode: {settings.mode.upper()}")
    logger.info(f"WhatsApp: {'✅ Configured' if results['whatsapp']['valid'] else '❌ Not configured'}")
    logger.info(f"Wise: {'✅ Configured' if settings.wise_configured else '⚠️  Demo only'}")
    logger.info(f"AI fallback: {'✅ Enabled' if results['ai']['ai_enabled'] else '⚠️  Disabled'}")
    logger.info(f"Overall: {'✅ All critical services valid' if results['overall_valid'] else '❌ Some services have issues'}")
    logger.info("=" * 60)
    return results
