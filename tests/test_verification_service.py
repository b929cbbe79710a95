"""Tests for WhatsApp phone verification codes."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from conftest import FakeWhatsApp
from remitbot.services.verification_service import VerificationService

PHONE = "5215512345678"


class Clock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def whatsapp():
    return FakeWhatsApp()


@pytest.fixture
def service(clock, whatsapp):
    return VerificationService(
        whatsapp_service=whatsapp,
        expiry_minutes=10,
        max_attempts=3,
        max_resends_per_hour=3,
        resend_cooldown_seconds=60,
        clock=clock,
    )


def _send(service, language="en"):
    return asyncio.run(service.send_code(PHONE, language))


def _code(service):
    return service._codes[PHONE].code


def test_generated_codes_are_six_digits():
    for _ in range(50):
        code = VerificationService.generate_code()
        assert len(code) == 6
        assert code.isdigit()
        assert code[0] != "0"


def test_send_code_delivers_over_whatsapp(service, whatsapp):
    allowance = _send(service)

    assert allowance.allowed
    to, message = whatsapp.sent[0]
    assert to == PHONE
    assert _code(service) in message
    assert "expires in 10 minutes" in message


def test_spanish_message(service, whatsapp):
    _send(service, "es")

    assert "Tu código de verificación" in whatsapp.last


def test_resend_cooldown(service, clock, whatsapp):
    _send(service)
    clock.advance(seconds=20)

    allowance = _send(service)

    assert not allowance.allowed
    assert allowance.retry_after == 40
    assert allowance.reason == "Please wait 40 seconds before requesting another code"
    assert len(whatsapp.sent) == 1


def test_hourly_limit(service, clock):
    for _ in range(3):
        assert _send(service).allowed
        clock.advance(seconds=61)

    allowance = _send(service)

    assert not allowance.allowed
    assert allowance.reason == "Too many requests. Try again in 60 minutes"
    assert allowance.retry_after == 3600


def test_hourly_limit_is_per_phone(service, clock, whatsapp):
    for _ in range(3):
        _send(service)
        clock.advance(seconds=61)

    assert asyncio.run(service.send_code("5215599999999")).allowed
    assert whatsapp.sent[-1][0] == "5215599999999"


def test_correct_code_verifies_once(service):
    _send(service)
    code = _code(service)

    assert service.verify_code(PHONE, code).valid
    again = service.verify_code(PHONE, code)
    assert not again.valid
    assert again.reason.startswith("Code already used")


def test_wrong_codes_count_down_then_lock_out(service):
    _send(service)

    first = service.verify_code(PHONE, "000000")
    assert first.attempts_left == 2
    assert first.reason == "Invalid code. 2 attempts remaining."
    assert service.verify_code(PHONE, "000000").reason == "Invalid code. 1 attempt remaining."
    service.verify_code(PHONE, "000000")

    locked = service.verify_code(PHONE, _code(service))
    assert not locked.valid
    assert locked.reason.startswith("Too many failed attempts")
    assert service.get_status(PHONE) == {"exists": False}


def test_expired_code(service, clock):
    _send(service)
    code = _code(service)
    clock.advance(minutes=11)

    result = service.verify_code(PHONE, code)

    assert not result.valid
    assert result.reason.startswith("Code expired")


def test_unknown_phone(service):
    result = service.verify_code("999", "123456")

    assert not result.valid
    assert result.reason.startswith("No verification code found")


def test_new_code_replaces_old_one(service, clock):
    _send(service)
    old = _code(service)
    clock.advance(seconds=61)
    _send(service)

    if old != _code(service):
        assert not service.verify_code(PHONE, old).valid
    assert service.verify_code(PHONE, _code(service)).valid


def test_status_and_sweep(service, clock):
    _send(service)

    status = service.get_status(PHONE)
    assert status["exists"] and not status["expired"]
    assert status["attempts_left"] == 3
    assert status["expires_in"] == 600

    assert service.sweep_expired() == 0
    clock.advance(minutes=11)
    assert service.sweep_expired() == 1
    assert service.get_status(PHONE) == {"exists": False}
