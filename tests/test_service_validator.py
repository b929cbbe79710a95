"""Tests for startup configuration checks."""

from remitbot.utils import service_validator
from remitbot.utils.config import settings


def test_demo_mode_without_wise_only_warns(monkeypatch):
    monkeypatch.setattr(settings, "mode", "DEMO")
    monkeypatch.setattr(settings, "wise_api_key", "")

    result = service_validator.validate_wise_config()

    assert result["valid"]
    assert any("demo transfers only" in warning for warning in result["warnings"])


def test_production_without_wise_is_an_issue(monkeypatch):
    monkeypatch.setattr(settings, "mode", "PRODUCTION")
    monkeypatch.setattr(settings, "wise_api_key", "")

    result = service_validator.validate_wise_config()

    assert not result["valid"]
    assert "WISE_API_KEY" in result["issues"][0]


def test_production_against_sandbox_warns(monkeypatch):
    monkeypatch.setattr(settings, "mode", "PRODUCTION")
    monkeypatch.setattr(settings, "wise_api_key", "key")
    monkeypatch.setattr(settings, "wise_profile_id", "P1")
    monkeypatch.setattr(settings, "wise_api_url", "https://api.sandbox.transferwise.tech")

    result = service_validator.validate_wise_config()

    assert result["valid"]
    assert result["warnings"] == ["MODE=PRODUCTION is pointed at the Wise sandbox"]


def test_missing_whatsapp_credentials(monkeypatch):
    monkeypatch.setattr(settings, "whatsapp_access_token", "")

    result = service_validator.validate_whatsapp_config()

    assert not result["valid"]


def test_overall_status(monkeypatch):
    monkeypatch.setattr(settings, "mode", "DEMO")
    monkeypatch.setattr(settings, "whatsapp_access_token", "token")
    monkeypatch.setattr(settings, "whatsapp_phone_number_id", "PN1")
    monkeypatch.setattr(settings, "openai_api_key", "")

    results = service_validator.log_service_status()

    assert results["overall_valid"]
    assert results["ai"]["ai_enabled"] is False
