"""Shared fixtures and fakes for the transfer agent tests."""

import os

# Pin configuration before anything imports remitbot.utils.config
os.environ["MODE"] = "DEMO"
os.environ["OPENAI_API_KEY"] = ""
os.environ["WHATSAPP_ACCESS_TOKEN"] = ""
os.environ["WHATSAPP_PHONE_NUMBER_ID"] = ""
os.environ["WISE_API_KEY"] = ""
os.environ["WISE_PROFILE_ID"] = ""
os.environ["WEBHOOK_VERIFY_TOKEN"] = "test-verify-token"
os.environ["USER_RATE_LIMIT"] = "1000/minute"
os.environ["LOG_LEVEL"] = "WARNING"

import asyncio
from types import SimpleNamespace

import pytest

from remitbot.agents.ai_handler import AIHandler
from remitbot.agents.session_store import InMemorySessionStore
from remitbot.agents.transfer_agent import TransferAgent

PHONE = "5215512345678"


class FakeWhatsApp:
    """Records outbound messages instead of calling the Cloud API."""

    is_configured = True

    def __init__(self):
        self.sent = []

    async def send_message(self, to, message):
        self.sent.append((to, message))
        return {"success": True}

    @property
    def last(self):
        return self.sent[-1][1] if self.sent else None

    def messages_to(self, phone):
        return [message for to, message in self.sent if to == phone]


class FakeTransferService:
    """Stands in for WiseService.submit_transfer."""

    def __init__(self, result=None, error=None, is_configured=True):
        self.result = result
        self.error = error
        self.is_configured = is_configured
        self.calls = []

    async def submit_transfer(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.result


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_ai_client(content=None, error=None):
    return SimpleNamespace(chat=SimpleNamespace(completions=FakeCompletions(content, error)))


def converse(agent, *messages, phone=PHONE):
    """Send messages one after another in a single event loop; returns the final session."""
    async def _run():
        session = None
        for message in messages:
            session = await agent.handle_incoming_message(phone, message)
        return session

    return asyncio.run(_run())


@pytest.fixture
def whatsapp():
    return FakeWhatsApp()


@pytest.fixture
def store():
    return InMemorySessionStore(timeout_minutes=30)


@pytest.fixture
def agent(store, whatsapp):
    return TransferAgent(
        session_store=store,
        whatsapp_service=whatsapp,
        ai_handler=AIHandler(),
        production=False,
    )
