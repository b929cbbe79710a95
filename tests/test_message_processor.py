"""Tests for language, command and entity detection."""

import pytest

from remitbot.agents.message_processor import MessageProcessor


@pytest.fixture
def processor():
    return MessageProcessor()


@pytest.mark.parametrize("text, amount", [
    ("Send $100 to Mexico", 100),
    ("$ 250.50", 250.5),
    ("$1,000 please", 1000),
    ("100 USD", 100),
    ("I have 300 dollars", 300),
    ("quiero mandar 75 dólares", 75),
    ("send 40", 40),
    ("enviar 60 a Colombia", 60),
    ("transferir 80", 80),
    ("200 to Brazil", 200),
    ("500 para México", 500),
    ("100", 100),
    ("0.5", 0.5),
    ("15000", 15000),
])
def test_extract_amount(processor, text, amount):
    assert processor.extract_amount(text) == amount


def test_currency_marked_amount_wins_over_bare_number(processor):
    assert processor.extract_amount("for my 2 kids send $150") == 150


def test_no_amount(processor):
    assert processor.extract_amount("hello there") is None
    assert processor.extract_amount("") is None


@pytest.mark.parametrize("amount, valid", [
    (1, True), (10000, True), (100, True), (0.5, False), (0.99, False), (10000.01, False), (15000, False), (None, False),
])
def test_amount_range(processor, amount, valid):
    assert processor.is_valid_amount(amount) is valid


@pytest.mark.parametrize("text, language", [
    ("Hola", "es"),
    ("¿Cuánto cuesta?", "es"),
    ("quiero enviar dinero", "es"),
    ("Send $100 to Mexico", "en"),
    ("100", "en"),
    ("hello", "en"),
])
def test_detect_language(processor, text, language):
    assert processor.detect_language(text) == language


@pytest.mark.parametrize("text, country", [
    ("Send $100 to Mexico", "Mexico"),
    ("enviar a méxico", "Mexico"),
    ("Colombia", "Colombia"),
    ("brasil", "Brazil"),
    ("to the UK", "United Kingdom"),
    ("reino unido", "United Kingdom"),
    ("Europa", "Europe"),
    ("Argentina", "Argentina"),
    ("chile", "Chile"),
])
def test_extract_country(processor, text, country):
    assert processor.extract_country(text).country == country


def test_unsupported_country(processor):
    assert processor.extract_country("Germany") is None


def test_country_from_context_prefers_most_recent(processor):
    corridor = processor.extract_country_from_context(["Mexico maybe", "actually Colombia", "100"])

    assert corridor.country == "Colombia"


@pytest.mark.parametrize("text, expected", [
    ("100", True),
    ("$100", True),
    (" 250.50 USD. ", True),
    ("I have 300 dollars", True),
    ("hi, my phone is 3136379718", False),
    ("Calle 110 #45", False),
])
def test_is_amount_message(processor, text, expected):
    assert processor.is_amount_message(text) is expected


def test_refers_back(processor):
    assert processor.refers_back("yes that one")
    assert processor.refers_back("ese")
    assert not processor.refers_back("Germany")


@pytest.mark.parametrize("text", ["cancel", "Cancelar por favor", "STOP", "reset", "reiniciar", "let's start over"])
def test_cancel_commands(processor, text):
    assert processor.is_cancel(text)


def test_cancel_needs_whole_word(processor):
    assert not processor.is_cancel("Bus stops at Calle 5 - cancellation fee?")
    assert not processor.is_cancel("Stopford Street")


@pytest.mark.parametrize("text", ["hi", "Hello!", "hey there", "Hola", "buenos días", "Buenas"])
def test_greetings(processor, text):
    assert processor.is_greeting(text)


def test_chile_is_not_a_greeting(processor):
    assert not processor.is_greeting("Chile")


@pytest.mark.parametrize("text", ["CONFIRM", "yes", "Sí", "si", "confirmar", "send it"])
def test_confirmations(processor, text):
    assert processor.is_confirmation(text)


def test_non_confirmation(processor):
    assert not processor.is_confirmation("wait a second")


def test_rate_and_help(processor):
    assert processor.is_rate_query("What's the rate to Colombia?")
    assert processor.is_rate_query("tasa de cambio a México")
    assert processor.is_help("help")
    assert processor.is_help("ayuda")
    assert processor.has_transfer_intent("I want to send money")
    assert not processor.has_transfer_intent("hello")


@pytest.mark.parametrize("text, name", [
    ("Juan Perez", "Juan Perez"),
    ("  María   José  Gómez ", "María José Gómez"),
    ("Juan", None),
    ("", None),
])
def test_recipient_name(processor, text, name):
    assert processor.extract_recipient_name(text) == name
