#!/usr/bin/env python3
"""
Corridor Table
Static mapping from recognized country names to settlement currency and delivery time.
Single source of truth for the countries users can send money to.
"""

from typing import Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict
from remitbot.utils.logger import get_logger

logger = get_logger("corridors")


class Corridor(BaseModel):
    """A supported (country, currency) transfer destination."""

    model_config = ConfigDict(frozen=True)

    country: str
    country_es: str
    currency: str
    delivery_time: str
    delivery_time_es: str
    flag: str
    keys: Tuple[str, ...]

    def display_name(self, language: str = "en") -> str:
        return self.country_es if language == "es" else self.country

    def delivery(self, language: str = "en") -> str:
        return self.delivery_time_es if language == "es" else self.delivery_time


# Declaration order is the substring scan order: overlapping keys
# ("uk" / "united kingdom") resolve to whichever is declared first.
CORRIDORS: Tuple[Corridor, ...] = (
    Corridor(
        country="Mexico", country_es="México", currency="MXN", flag="🇲🇽",
        delivery_time="1-2 business days", delivery_time_es="1-2 días hábiles",
        keys=("mexico",),
    ),
    Corridor(
        country="Colombia", country_es="Colombia", currency="COP", flag="🇨🇴",
        delivery_time="1-3 business days", delivery_time_es="1-3 días hábiles",
        keys=("colombia",),
    ),
    Corridor(
        country="Brazil", country_es="Brasil", currency="BRL", flag="🇧🇷",
        delivery_time="1-3 business days", delivery_time_es="1-3 días hábiles",
        keys=("brazil", "brasil"),
    ),
    Corridor(
        country="United Kingdom", country_es="Reino Unido", currency="GBP", flag="🇬🇧",
        delivery_time="Same day", delivery_time_es="Mismo día",
        keys=("uk", "united kingdom", "reino unido"),
    ),
    Corridor(
        country="Europe", country_es="Europa", currency="EUR", flag="🇪🇺",
        delivery_time="1 business day", delivery_time_es="1 día hábil",
        keys=("europe", "europa"),
    ),
    Corridor(
        country="Argentina", country_es="Argentina", currency="ARS", flag="🇦🇷",
        delivery_time="1-3 business days", delivery_time_es="1-3 días hábiles",
        keys=("argentina",),
    ),
    Corridor(
        country="Chile", country_es="Chile", currency="CLP", flag="🇨🇱",
        delivery_time="1-3 business days", delivery_time_es="1-3 días hábiles",
        keys=("chile",),
    ),
)

# Match key -> corridor, in declaration order
TRANSFER_CORRIDORS: Dict[str, Corridor] = {
    key: corridor for corridor in CORRIDORS for key in corridor.keys
}

# Spanish spellings checked before the general key scan
SPANISH_COUNTRY_NAMES: Dict[str, str] = {
    "méxico": "mexico",
    "mejico": "mexico",
    "brasil": "brasil",
    "reino unido": "reino unido",
    "europa": "europa",
}

# Demo / fallback exchange rates, 1 USD = rate
EXCHANGE_RATES: Dict[str, float] = {
    "MXN": 17.2,
    "COP": 3750.0,
    "BRL": 5.1,
    "GBP": 0.79,
    "EUR": 0.92,
    "ARS": 350.0,
    "CLP": 900.0,
}

DEMO_FEE_RATE = 0.03


def resolve_corridor(matched_key: str) -> Optional[Corridor]:
    """Resolve a match key or display country name to its corridor."""
    if not matched_key:
        return None

    key = matched_key.lower().strip()
    key = SPANISH_COUNTRY_NAMES.get(key, key)

    if key in TRANSFER_CORRIDORS:
        return TRANSFER_CORRIDORS[key]

    for corridor in CORRIDORS:
        if corridor.country.lower() == key or corridor.country_es.lower() == key:
            return corridor

    return None


def find_corridor_in_text(text: str) -> Optional[Corridor]:
    """
    Find the first corridor mentioned anywhere in free text.

    Spanish-specific names are checked first, then every corridor key by
    case-insensitive substring containment. First match wins.
    """
    if not text:
        return None

    text_lower = text.lower()

    for spanish_name, key in SPANISH_COUNTRY_NAMES.items():
        if spanish_name in text_lower:
            return TRANSFER_CORRIDORS[key]

    for key, corridor in TRANSFER_CORRIDORS.items():
        if key in text_lower:
            logger.debug(f"Matched corridor key '{key}' -> {corridor.country}")
            return corridor

    return None


def get_exchange_rate(currency: str) -> Optional[float]:
    return EXCHANGE_RATES.get(currency.upper()) if currency else None


def estimate_target_amount(amount: float, currency: str) -> Optional[float]:
    """Rough recipient amount after the demo fee."""
    rate = get_exchange_rate(currency)
    if rate is None:
        return None
    return round(amount * (1 - DEMO_FEE_RATE) * rate, 2)


def supported_countries(language: str = "en") -> List[str]:
    return [corridor.display_name(language) for corridor in CORRIDORS]
