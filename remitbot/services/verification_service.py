"""Phone verification service: one-time codes delivered over WhatsApp."""

import math
import secrets
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional
from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter
from remitbot.schemas.core import (
    VerificationAllowance,
    VerificationCode,
    VerificationResult,
)
from remitbot.utils.config import settings
from remitbot.utils.logger import get_logger

logger = get_logger("verification_service")

VERIFICATION_MESSAGES = {
    "en": (
        "🔐 *Bambu Verification*\n\n"
        "Your verification code is: *{code}*\n\n"
        "This code expires in {minutes} minutes.\n"
        "Never share this code with anyone."
    ),
    "es": (
        "🔐 *Verificación Bambu*\n\n"
        "Tu código de verificación es: *{code}*\n\n"
        "Este código expira en {minutes} minutos.\n"
        "Nunca compartas este código con nadie."
    ),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VerificationService:
    """In-memory verification codes with resend throttling."""

    def __init__(
        self,
        whatsapp_service=None,
        expiry_minutes: Optional[int] = None,
        max_attempts: Optional[int] = None,
        max_resends_per_hour: Optional[int] = None,
        resend_cooldown_seconds: Optional[int] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.whatsapp_service = whatsapp_service
        self.expiry = timedelta(minutes=expiry_minutes or settings.verification_code_expiry_minutes)
        self.max_attempts = max_attempts or settings.verification_max_attempts
        self.max_resends_per_hour = max_resends_per_hour or settings.verification_max_resends_per_hour
        self.resend_cooldown = timedelta(
            seconds=resend_cooldown_seconds or settings.verification_resend_cooldown_seconds
        )
        self._clock = clock

        self._codes: Dict[str, VerificationCode] = {}
        self._last_sent: Dict[str, datetime] = {}
        self.hourly_limit = parse(f"{self.max_resends_per_hour}/hour")
        self._send_limiter = MovingWindowRateLimiter(MemoryStorage())

    @staticmethod
    def generate_code() -> str:
        """Six-digit code, never starting with zero."""
        return str(100000 + secrets.randbelow(900000))

    def can_request(self, phone_number: str) -> VerificationAllowance:
        now = self._clock()

        last_sent = self._last_sent.get(phone_number)
        if last_sent is not None:
            elapsed = (now - last_sent).total_seconds()
            cooldown = self.resend_cooldown.total_seconds()
            if elapsed < cooldown:
                retry_after = math.ceil(cooldown - elapsed)
                return VerificationAllowance(
                    allowed=False,
                    reason=f"Please wait {retry_after} seconds before requesting another code",
                    retry_after=retry_after,
                )

        if not self._send_limiter.test(self.hourly_limit, "verification", phone_number):
            stats = self._send_limiter.get_window_stats(self.hourly_limit, "verification", phone_number)
            minutes = max(1, math.ceil((stats.reset_time - time.time()) / 60))
            return VerificationAllowance(
                allowed=False,
                reason=f"Too many requests. Try again in {minutes} minutes",
                retry_after=minutes * 60,
            )

        return VerificationAllowance(allowed=True)

    def _record_sent(self, phone_number: str) -> None:
        self._last_sent[phone_number] = self._clock()
        self._send_limiter.hit(self.hourly_limit, "verification", phone_number)

    def issue_code(self, phone_number: str) -> VerificationCode:
        """Create and store a fresh code, replacing any previous one."""
        now = self._clock()
        record = VerificationCode(
            code=self.generate_code(),
            phone_number=phone_number,
            created_at=now,
            expires_at=now + self.expiry,
        )
        self._codes[phone_number] = record
        logger.info(f"📱 Verification code issued for {phone_number}")
        return record

    def format_message(self, code: str, language: str = "en") -> str:
        template = VERIFICATION_MESSAGES.get(language, VERIFICATION_MESSAGES["en"])
        return template.format(code=code, minutes=int(self.expiry.total_seconds() // 60))

    async def send_code(self, phone_number: str, language: str = "en") -> VerificationAllowance:
        """Issue a code and deliver it over WhatsApp, honoring the resend limits."""
        allowance = self.can_request(phone_number)
        if not allowance.allowed:
            logger.warning(f"Verification request throttled for {phone_number}: {allowance.reason}")
            return allowance

        record = self.issue_code(phone_number)
        self._record_sent(phone_number)

        if self.whatsapp_service is not None:
            await self.whatsapp_service.send_message(phone_number, self.format_message(record.code, language))

        return allowance

    def verify_code(self, phone_number: str, code: str) -> VerificationResult:
        record = self._codes.get(phone_number)
        if record is None:
            return VerificationResult(valid=False, reason="No verification code found. Please request a new code.")

        if self._clock() > record.expires_at:
            del self._codes[phone_number]
            return VerificationResult(valid=False, reason="Code expired. Please request a new code.")

        if record.verified:
            return VerificationResult(valid=False, reason="Code already used. Please request a new code.")

        record.attempts += 1
        if record.attempts > self.max_attempts:
            del self._codes[phone_number]
            return VerificationResult(valid=False, reason="Too many failed attempts. Please request a new code.")

        if secrets.compare_digest(record.code, code.strip()):
            record.verified = True
            logger.info(f"✅ Phone verified: {phone_number}")
            return VerificationResult(valid=True)

        attempts_left = self.max_attempts - record.attempts
        plural = "" if attempts_left == 1 else "s"
        return VerificationResult(
            valid=False,
            reason=f"Invalid code. {attempts_left} attempt{plural} remaining.",
            attempts_left=attempts_left,
        )

    def get_status(self, phone_number: str) -> Dict:
        record = self._codes.get(phone_number)
        if record is None:
            return {"exists": False}

        now = self._clock()
        expired = now > record.expires_at
        return {
            "exists": True,
            "expired": expired,
            "verified": record.verified,
            "attempts_left": self.max_attempts - record.attempts,
            "expires_in": 0 if expired else math.ceil((record.expires_at - now).total_seconds()),
        }

    def sweep_expired(self) -> int:
        """Drop expired codes. Returns how many were removed."""
        now = self._clock()
        expired = [phone for phone, record in self._codes.items() if now > record.expires_at]
        for phone in expired:
            del self._codes[phone]

        if expired:
            logger.info(f"🧹 Cleaned up {len(expired)} expired verification code(s)")
        return len(expired)
