#!/usr/bin/env python3
"""
Message Processor Module
Handles language detection, command/intent detection and entity extraction for the transfer agent.
"""

import re
from typing import Iterable, List, Optional
from remitbot.utils.corridors import Corridor, find_corridor_in_text
from remitbot.utils.logger import get_logger

logger = get_logger("message_processor")

MIN_AMOUNT = 1
MAX_AMOUNT = 10000

# 1,000.50 or 1000.50 or 100
_NUMBER = r"(\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?)"

# Currency-marked: $100, 100 USD, 100 dollars / dólares
CURRENCY_AMOUNT_PATTERNS = [
    re.compile(r"\$\s*" + _NUMBER),
    re.compile(_NUMBER + r"\s*(?:usd|dollars?|d[oó]lares?)\b", re.IGNORECASE),
]

# A message that is nothing but an amount: "100", "$100", "100 usd."
AMOUNT_ONLY = re.compile(r"\s*\$?\s*" + _NUMBER + r"\s*(?:usd|dollars?|d[oó]lares?)?\s*[.!]?\s*", re.IGNORECASE)

# Tried in order, first match wins
AMOUNT_PATTERNS = CURRENCY_AMOUNT_PATTERNS + [
    # Verb-prefixed: send 100, enviar 100
    re.compile(r"\b(?:send|transfer|enviar|envia|envía|transferir|mandar|manda)\s+" + _NUMBER, re.IGNORECASE),
    # Preposition-prefixed: 100 to, 100 a, 100 para
    re.compile(_NUMBER + r"\s+(?:to|a|para)\s", re.IGNORECASE),
    # Bare standalone number
    re.compile(r"(?<![\w.,])" + _NUMBER + r"(?![\w.,]*\d)"),
]

SPANISH_PATTERNS = [
    re.compile(
        r"\b(hola|buenos|buenas|días|dias|tardes|noches|gracias|por favor|ayuda|necesito|quiero|"
        r"cuánto|cuanto|dónde|donde|cómo|como|qué|enviar|dinero|transferencia|transferir|mandar|pesos|sí)\b",
        re.IGNORECASE,
    ),
    re.compile(r"[áéíóúñ¿¡]", re.IGNORECASE),
]


class MessageProcessor:
    """Detects language, commands and transfer entities in user messages."""

    def __init__(self):
        self.intent_patterns = {
            "cancel": [r"\bcancel\b", r"\bcancelar\b", r"\bstop\b", r"\bparar\b", r"\bdetener\b",
                       r"\breset\b", r"\breiniciar\b", r"\bstart over\b", r"\bempezar de nuevo\b"],
            "help": [r"\bhelp\b", r"\bayuda\b", r"\bcommands\b", r"\bcomandos\b"],
            "greeting": [r"\bhi\b", r"\bhello\b", r"\bhey\b", r"\bhola\b", r"\bbuenos d[ií]as\b",
                         r"\bbuenas tardes\b", r"\bbuenas noches\b", r"\bbuenas\b", r"\bgood morning\b",
                         r"\bgood afternoon\b", r"\bgood evening\b"],
            "rate": [r"\brates?\b", r"\bexchange\b", r"\btasa\b", r"\btipo de cambio\b", r"\bcambio\b"],
            "transfer": [r"\bsend\b", r"\btransfer\b", r"\bremit\b", r"\benviar\b", r"\benv[ií]a\b",
                         r"\btransferir\b", r"\bmandar\b", r"\bmanda\b"],
            "confirm": [r"\bconfirm\b", r"\bconfirmar\b", r"\bconfirmo\b", r"\byes\b", r"\bs[ií]\b",
                        r"\bsend\b", r"\benviar\b"],
            # Replies that point back at something already said
            "reference": [r"\byes\b", r"\bs[ií]\b", r"\bok(?:ay)?\b", r"\bthat\b", r"\bsame\b",
                          r"\bthere\b", r"\bes[ae]\b", r"\best[ae]\b", r"\bel mismo\b", r"\bah[ií]\b",
                          r"\ball[ií]\b", r"\bclaro\b"],
        }
        self._compiled = {
            intent: [re.compile(pattern, re.IGNORECASE) for pattern in patterns]
            for intent, patterns in self.intent_patterns.items()
        }

    def matches(self, intent: str, message: str) -> bool:
        """Check whether a message triggers a given intent."""
        return any(pattern.search(message) for pattern in self._compiled[intent])

    def is_cancel(self, message: str) -> bool:
        return self.matches("cancel", message)

    def is_help(self, message: str) -> bool:
        return self.matches("help", message)

    def is_greeting(self, message: str) -> bool:
        return self.matches("greeting", message)

    def is_rate_query(self, message: str) -> bool:
        return self.matches("rate", message)

    def has_transfer_intent(self, message: str) -> bool:
        return self.matches("transfer", message)

    def is_confirmation(self, message: str) -> bool:
        return self.matches("confirm", message)

    def refers_back(self, message: str) -> bool:
        """'yes', 'that one', 'ese': the user means something from earlier."""
        return self.matches("reference", message)

    @staticmethod
    def is_amount_message(message: str) -> bool:
        """The message is about money: a currency-marked amount or an amount on its own."""
        message = message or ""
        if AMOUNT_ONLY.fullmatch(message):
            return True
        return any(pattern.search(message) for pattern in CURRENCY_AMOUNT_PATTERNS)

    @staticmethod
    def detect_language(message: str) -> str:
        """'es' if the text shows Spanish function words or diacritics, else 'en'."""
        for pattern in SPANISH_PATTERNS:
            if pattern.search(message or ""):
                return "es"
        return "en"

    @staticmethod
    def extract_amount(message: str) -> Optional[float]:
        """Extract a USD amount. Range is not checked here."""
        if not message:
            return None

        for pattern in AMOUNT_PATTERNS:
            match = pattern.search(message)
            if match:
                amount = float(match.group(1).replace(",", ""))
                logger.debug(f"Amount {amount} matched by pattern {pattern.pattern!r}")
                return amount

        return None

    @staticmethod
    def is_valid_amount(amount: Optional[float]) -> bool:
        return amount is not None and MIN_AMOUNT <= amount <= MAX_AMOUNT

    @staticmethod
    def extract_country(message: str) -> Optional[Corridor]:
        return find_corridor_in_text(message)

    @classmethod
    def extract_country_from_context(cls, messages: Iterable[str]) -> Optional[Corridor]:
        """Most recent corridor mentioned in earlier messages."""
        for text in reversed(list(messages)):
            corridor = cls.extract_country(text)
            if corridor:
                return corridor
        return None

    @staticmethod
    def extract_recipient_name(message: str) -> Optional[str]:
        """A full name needs at least two words and three characters."""
        name = " ".join((message or "").split())
        tokens: List[str] = name.split(" ")
        if len(name) >= 3 and len(tokens) >= 2:
            return name
        return None
