"""
Session Store Module
Holds per-phone-number dialogue sessions for multi-turn transfer collection.
"""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from remitbot.utils.corridors import Corridor
from remitbot.utils.logger import get_logger

logger = get_logger("session_store")

HISTORY_LIMIT = 5


def _now() -> datetime:
    return datetime.now(timezone.utc)


class DialogueState(str, Enum):
    IDLE = "idle"
    COLLECTING_AMOUNT = "collecting_amount"
    COLLECTING_COUNTRY = "collecting_country"
    COLLECTING_RECIPIENT = "collecting_recipient"
    COLLECTING_BANK_DETAILS = "collecting_bank_details"
    CONFIRMING = "confirming"


class ConversationEntry(BaseModel):
    role: str
    text: str
    timestamp: datetime = Field(default_factory=_now)


class Session(BaseModel):
    """Conversational state for one phone number."""

    phone_number: str
    state: DialogueState = DialogueState.IDLE
    amount: Optional[float] = None
    country: Optional[str] = None
    currency: Optional[str] = None
    recipient_name: Optional[str] = None
    bank_details: Dict[str, str] = Field(default_factory=dict)
    language: Optional[str] = None
    conversation_history: List[ConversationEntry] = Field(default_factory=list)
    # When the current transfer flow left idle; context lookups ignore older messages
    flow_started_at: Optional[datetime] = None
    last_activity: datetime = Field(default_factory=_now)

    def set_corridor(self, corridor: Corridor) -> None:
        """Set country and its derived currency together."""
        self.country = corridor.country
        self.currency = corridor.currency

    def clear_transfer(self) -> None:
        """Drop all collected transfer fields and return to idle."""
        self.state = DialogueState.IDLE
        self.amount = None
        self.country = None
        self.currency = None
        self.recipient_name = None
        self.bank_details = {}
        self.flow_started_at = None

    def start_flow(self) -> None:
        """Mark the latest recorded message as the start of a transfer flow."""
        if self.conversation_history:
            self.flow_started_at = self.conversation_history[-1].timestamp
        else:
            self.flow_started_at = _now()

    def record(self, role: str, text: str) -> None:
        self.conversation_history.append(ConversationEntry(role=role, text=text))
        del self.conversation_history[:-HISTORY_LIMIT]

    def recent_messages(self, role: Optional[str] = None, since: Optional[datetime] = None) -> List[str]:
        return [
            entry.text for entry in self.conversation_history
            if (role is None or entry.role == role)
            and (since is None or entry.timestamp >= since)
        ]

    def touch(self) -> None:
        self.last_activity = _now()

    def is_expired(self, timeout: timedelta, now: Optional[datetime] = None) -> bool:
        return ((now or _now()) - self.last_activity) > timeout


class SessionStore(ABC):
    """Storage contract the dialogue manager depends on."""

    @abstractmethod
    def get_or_create(self, phone_number: str) -> Session:
        """Return the live session for a phone, starting a fresh one if absent or timed out."""

    @abstractmethod
    def get(self, phone_number: str) -> Optional[Session]:
        """Return the session if one exists, without creating or touching it."""

    @abstractmethod
    def delete(self, phone_number: str) -> bool:
        """Remove a session. Returns True if one was removed."""

    @abstractmethod
    def sweep_expired(self) -> int:
        """Drop every timed-out session. Returns how many were removed."""

    @abstractmethod
    def lock(self, phone_number: str) -> asyncio.Lock:
        """Lock serializing message handling for one phone."""


class InMemorySessionStore(SessionStore):
    """Process-local session map. Sessions are lost on restart."""

    def __init__(self, timeout_minutes: int = 30):
        self.timeout = timedelta(minutes=timeout_minutes)
        self._sessions: Dict[str, Session] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def get_or_create(self, phone_number: str) -> Session:
        session = self._sessions.get(phone_number)

        if session is not None and session.is_expired(self.timeout):
            logger.info(f"Session for {phone_number} timed out in state {session.state.value}, starting fresh")
            session = None

        if session is None:
            session = Session(phone_number=phone_number)
            self._sessions[phone_number] = session

        session.touch()
        return session

    def get(self, phone_number: str) -> Optional[Session]:
        return self._sessions.get(phone_number)

    def delete(self, phone_number: str) -> bool:
        self._locks.pop(phone_number, None)
        return self._sessions.pop(phone_number, None) is not None

    def sweep_expired(self) -> int:
        now = _now()
        expired = [
            phone for phone, session in self._sessions.items()
            if session.is_expired(self.timeout, now)
        ]
        removed = 0
        for phone in expired:
            lock = self._locks.get(phone)
            if lock is not None and lock.locked():
                continue
            self.delete(phone)
            removed += 1

        if removed:
            logger.debug(f"Swept {removed} expired session(s)")
        return removed

    def lock(self, phone_number: str) -> asyncio.Lock:
        if phone_number not in self._locks:
            self._locks[phone_number] = asyncio.Lock()
        return self._locks[phone_number]

    def __len__(self) -> int:
        return len(self._sessions)
