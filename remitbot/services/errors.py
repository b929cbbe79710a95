"""Exceptions shared by the external provider services."""

from typing import Optional


class ProviderError(Exception):
    """An external provider (Wise, WhatsApp, LLM) failed to complete a call."""

    def __init__(self, message: str, status_code: Optional[int] = None, response_data: Optional[dict] = None):
        self.message = message
        self.status_code = status_code
        self.response_data = response_data
        super().__init__(self.message)
