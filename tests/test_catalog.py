"""Tests for the corridor table and the bank-field requirement catalog."""

import pytest
from pydantic import ValidationError

from remitbot.schemas.core import ColombiaBankDetails, MexicoBankDetails, build_bank_details
from remitbot.utils.bank_requirements import (
    COUNTRY_BANK_REQUIREMENTS,
    format_bank_details,
    get_requirements,
    missing_fields,
)
from remitbot.utils.corridors import (
    CORRIDORS,
    estimate_target_amount,
    find_corridor_in_text,
    resolve_corridor,
    supported_countries,
)


def test_every_corridor_has_a_catalog_entry():
    for corridor in CORRIDORS:
        requirements = get_requirements(corridor.currency)
        assert requirements is not None
        assert requirements.country == corridor.country


@pytest.mark.parametrize("key, currency", [
    ("mexico", "MXN"),
    ("México", "MXN"),
    ("uk", "GBP"),
    ("United Kingdom", "GBP"),
    ("brasil", "BRL"),
    ("Europe", "EUR"),
    ("colombia", "COP"),
])
def test_resolve_corridor(key, currency):
    assert resolve_corridor(key).currency == currency


def test_resolve_unknown_corridor():
    assert resolve_corridor("germany") is None
    assert resolve_corridor("") is None


def test_find_corridor_first_declared_wins():
    assert find_corridor_in_text("Mexico or Colombia").country == "Mexico"


def test_supported_countries_are_localized():
    assert "Mexico" in supported_countries("en")
    assert "México" in supported_countries("es")
    assert "Reino Unido" in supported_countries("es")


def test_estimate_target_amount():
    assert estimate_target_amount(100, "MXN") == 1668.4
    assert estimate_target_amount(100, "XYZ") is None


def test_get_requirements_is_case_insensitive():
    assert get_requirements("mxn").currency == "MXN"
    assert get_requirements("XYZ") is None
    assert get_requirements(None) is None


def test_missing_fields_returns_labels_in_catalog_order():
    missing = missing_fields("COP", {"phoneNumber": "3136379718", "city": "  "})

    assert missing == [
        "Account Number",
        "Account Type",
        "Cédula Number",
        "City",
        "Street Address",
        "Post Code",
    ]


def test_missing_fields_complete():
    assert missing_fields("MXN", {"clabe": "032180000118359719"}) == []


def test_missing_fields_unknown_currency():
    with pytest.raises(ValueError):
        missing_fields("XYZ", {})


def test_catalog_field_names_are_unique():
    for requirements in COUNTRY_BANK_REQUIREMENTS.values():
        assert len(requirements.field_names) == len(set(requirements.field_names))


def test_format_bank_details():
    text = format_bank_details("GBP", {"accountNumber": "31926819", "sortCode": "231470"})

    assert text == "Sort Code: 231470\nAccount Number: 31926819"


def test_build_bank_details_picks_the_currency_variant():
    details = build_bank_details("MXN", {"clabe": "032180000118359719"})

    assert isinstance(details, MexicoBankDetails)
    assert details.clabe == "032180000118359719"


def test_build_bank_details_maps_camel_case_fields():
    details = build_bank_details("COP", {
        "accountNumber": "78800058952",
        "accountType": "savings",
        "phoneNumber": "3136379718",
        "idDocumentNumber": "1235039039",
        "city": "Bogota",
        "address": "Calle 110 #45-47",
        "postCode": "110111",
    })

    assert isinstance(details, ColombiaBankDetails)
    assert details.account_number == "78800058952"
    assert details.post_code == "110111"


def test_build_bank_details_rejects_missing_fields():
    with pytest.raises(ValidationError):
        build_bank_details("GBP", {"sortCode": "231470"})

    with pytest.raises(ValidationError):
        build_bank_details("MXN", {"clabe": ""})
