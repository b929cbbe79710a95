"""Per-phone-number rate limiting for inbound chat messages."""

from typing import Optional
from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter
from remitbot.utils.config import settings
from remitbot.utils.logger import get_logger

logger = get_logger("rate_limiter")


class UserRateLimiter:
    """Moving-window limiter keyed by sender phone number."""

    def __init__(self, limit: Optional[str] = None):
        self.limit_string = limit or settings.user_rate_limit
        self.limit = parse(self.limit_string)
        self._limiter = MovingWindowRateLimiter(MemoryStorage())

    def hit(self, phone_number: str) -> bool:
        """Consume one message from the phone's allowance. False when over the limit."""
        allowed = self._limiter.hit(self.limit, "chat", phone_number)
        if not allowed:
            logger.warning(f"Rate limit {self.limit_string} exceeded for {phone_number}")
        return allowed

    def remaining(self, phone_number: str) -> int:
        return self._limiter.get_window_stats(self.limit, "chat", phone_number).remaining

    def reset(self, phone_number: str) -> None:
        self._limiter.clear(self.limit, "chat", phone_number)
