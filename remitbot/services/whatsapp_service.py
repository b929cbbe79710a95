"""
WhatsApp service integration using the WhatsApp Cloud API.
Handles the webhook handshake, parses incoming messages and sends replies for the transfer agent.
"""

from typing import Any, Dict, List, Optional
import httpx
from pydantic import ValidationError
from remitbot.schemas.core import WhatsAppWebhook
from remitbot.services.errors import ProviderError
from remitbot.utils.config import settings
from remitbot.utils.logger import get_logger

logger = get_logger("whatsapp_service")

# Cloud API rejects text bodies above 4096 characters
MAX_MESSAGE_LENGTH = 4096


class WhatsAppAPIError(ProviderError):
    """Custom exception for WhatsApp Cloud API errors."""


class WhatsAppService:
    """WhatsApp service using the Cloud API (Graph API)."""

    def __init__(
        self,
        access_token: Optional[str] = None,
        phone_number_id: Optional[str] = None,
        api_url: Optional[str] = None,
        verify_token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.access_token = access_token if access_token is not None else settings.whatsapp_access_token
        self.phone_number_id = phone_number_id if phone_number_id is not None else settings.whatsapp_phone_number_id
        self.api_url = (api_url or settings.whatsapp_api_url).rstrip("/")
        self.verify_token = verify_token if verify_token is not None else settings.webhook_verify_token
        self._transport = transport

        if not self.is_configured:
            logger.warning("WhatsApp Cloud API credentials not configured, outbound messages will be logged only")
        else:
            logger.info("WhatsApp Cloud API client configured")

    @property
    def is_configured(self) -> bool:
        return bool(self.access_token and self.phone_number_id)

    async def _post_message(self, to: str, message: str) -> Dict[str, Any]:
        """POST one text message. Raises WhatsAppAPIError on any failure."""
        url = f"{self.api_url}/{self.phone_number_id}/messages"
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }
        payload = {
            "messaging_product": "whatsapp",
            "to": to,
            "type": "text",
            "text": {"body": message[:MAX_MESSAGE_LENGTH]},
        }

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=15) as client:
                response = await client.post(url, headers=headers, json=payload)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            raise WhatsAppAPIError(
                message=f"WhatsApp API error: {e.response.text[:200]}",
                status_code=e.response.status_code,
            )
        except httpx.RequestError as e:
            raise WhatsAppAPIError(message=f"Network error: {str(e)}")

    async def send_message(self, to: str, message: str) -> Dict[str, Any]:
        """
        Send a WhatsApp text message.

        Never raises: delivery failures are logged and reported in the
        returned dict so a failed reply cannot break the conversation flow.
        """
        if not self.is_configured:
            logger.info(f"[not sent] Message to {to}: {message[:80]}")
            return {"success": False, "error": "WhatsApp Cloud API not configured"}

        try:
            data = await self._post_message(to, message)
        except WhatsAppAPIError as e:
            logger.error(f"Failed to send WhatsApp message to {to}: {e.message}")
            return {"success": False, "error": e.message}

        message_ids = [m.get("id") for m in data.get("messages", [])]
        logger.info(f"Message sent to {to}: {message_ids}")
        return {"success": True, "message_ids": message_ids}

    def verify_webhook(self, mode: Optional[str], token: Optional[str], challenge: Optional[str]) -> Optional[str]:
        """Meta subscription handshake. Returns the challenge to echo, or None when rejected."""
        if mode == "subscribe" and token and token == self.verify_token:
            logger.info("Webhook verified")
            return challenge or ""

        logger.warning("Webhook verification failed")
        return None

    def extract_messages(self, request_data: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        Flatten a Cloud API webhook payload into simple message dicts.

        Status callbacks and malformed payloads yield an empty list.
        """
        try:
            webhook = WhatsAppWebhook.model_validate(request_data)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed webhook payload: {e.error_count()} error(s)")
            return []

        messages = []
        for message in webhook.iter_messages():
            messages.append({
                "phone_number": message.from_,
                "message_id": message.id,
                "type": message.type,
                "text": message.body if message.type == "text" else None,
            })

        if messages:
            logger.info(f"Webhook carried {len(messages)} message(s)")
        return messages
