#!/usr/bin/env python3
"""
Field Extractor Module
Pulls labeled bank-detail values out of loosely structured user text.

Users paste details in many shapes:

    Bank account number: 78800058952   -
    Account type: SAVINGS - Phone: 3136379718
    Address: Calle 110 #45-47, City: Bogota

A value runs from its label up to the next field boundary. A boundary is a
hyphen or comma (with optional whitespace either side) followed by a letter,
a newline, or the end of the text. Hyphens inside digit or word runs
("#45-47", "12345678-9") are kept as part of the value.

Identifiers must start at a word edge. This is deliberately stricter than
plain substring matching: short aliases such as "ID" or "CC" would otherwise
fire inside "Account" or "Valid". The cost is that glued labels like
"MyPhone: 313..." are not recognized.
"""

import re
from abc import ABC, abstractmethod
from typing import Dict, Mapping, Optional
from remitbot.utils.bank_requirements import BankFieldRequirement, CountryBankRequirements
from remitbot.utils.logger import get_logger

logger = get_logger("field_extractor")

# Separator then a letter starts the next field; [^\W\d_] is any letter
FIELD_BOUNDARY = r"(?=\s*[-,]\s*[^\W\d_]|\n|$)"
# Identifiers only start at a word edge, so "CC" never matches inside "Account"
IDENTIFIER_EDGE = r"(?<![^\W_])"
TRAILING_JUNK = re.compile(r"[\s\-,;]+$")


class FieldExtractor(ABC):
    """Strategy for turning free text into bank detail values."""

    @abstractmethod
    def extract(
        self,
        text: str,
        requirements: CountryBankRequirements,
        existing: Optional[Mapping[str, str]] = None,
    ) -> Dict[str, str]:
        """
        Return a new details map: the existing values plus any newly found ones.

        Fields already present in ``existing`` are never overwritten. Only
        names from ``requirements`` may appear as keys.
        """


class RegexFieldExtractor(FieldExtractor):
    """
    Label-driven regex extraction.

    Fields are tried in catalog order and, within a field, identifiers in
    [name, label, *aliases] order. The first identifier producing a non-empty
    value wins. Overlapping identifiers are not disambiguated any further.
    """

    def __init__(self):
        self._pattern_cache: Dict[str, re.Pattern] = {}

    def _pattern_for(self, identifier: str) -> re.Pattern:
        pattern = self._pattern_cache.get(identifier)
        if pattern is None:
            pattern = re.compile(
                IDENTIFIER_EDGE + re.escape(identifier) + r"\s*:?\s*([^:\n]+?)" + FIELD_BOUNDARY,
                re.IGNORECASE,
            )
            self._pattern_cache[identifier] = pattern
        return pattern

    @staticmethod
    def clean_value(raw: str) -> str:
        """Trim and drop trailing whitespace/hyphen/comma/semicolon runs."""
        return TRAILING_JUNK.sub("", raw.strip()).strip()

    def extract_field(self, text: str, field: BankFieldRequirement) -> Optional[str]:
        """Find a value for one field, or None."""
        for identifier in field.identifiers:
            match = self._pattern_for(identifier).search(text)
            if not match:
                continue

            value = self.clean_value(match.group(1))
            if value:
                logger.debug(f"Field '{field.name}' matched via identifier '{identifier}'")
                return value

        if field.bare_pattern:
            match = re.search(field.bare_pattern, text)
            if match:
                logger.debug(f"Field '{field.name}' matched bare pattern")
                return match.group(1)

        return None

    def extract(
        self,
        text: str,
        requirements: CountryBankRequirements,
        existing: Optional[Mapping[str, str]] = None,
    ) -> Dict[str, str]:
        details = dict(existing or {})

        for field in requirements.fields:
            if details.get(field.name):
                continue

            value = self.extract_field(text, field)
            if value:
                details[field.name] = value

        found = [name for name in details if name not in (existing or {})]
        logger.info(f"Extracted {len(found)} new {requirements.currency} field(s): {found}")
        return details
