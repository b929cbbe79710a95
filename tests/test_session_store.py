"""Tests for per-phone session storage."""

import asyncio
from datetime import timedelta

from remitbot.agents.session_store import HISTORY_LIMIT, DialogueState, InMemorySessionStore
from remitbot.utils.corridors import resolve_corridor


def _age(session, minutes):
    session.last_activity = session.last_activity - timedelta(minutes=minutes)


def test_get_or_create_returns_same_session():
    store = InMemorySessionStore()

    first = store.get_or_create("111")
    first.amount = 50
    second = store.get_or_create("111")

    assert second is first
    assert len(store) == 1


def test_timed_out_session_is_replaced():
    store = InMemorySessionStore(timeout_minutes=30)
    session = store.get_or_create("111")
    session.state = DialogueState.CONFIRMING
    session.amount = 100
    session.language = "es"
    _age(session, 31)

    fresh = store.get_or_create("111")

    assert fresh is not session
    assert fresh.state == DialogueState.IDLE
    assert fresh.amount is None
    assert fresh.language is None


def test_session_within_timeout_survives():
    store = InMemorySessionStore(timeout_minutes=30)
    session = store.get_or_create("111")
    _age(session, 29)

    assert store.get_or_create("111") is session


def test_sweep_removes_only_expired():
    store = InMemorySessionStore(timeout_minutes=30)
    _age(store.get_or_create("old"), 45)
    store.get_or_create("new")

    assert store.sweep_expired() == 1
    assert store.get("old") is None
    assert store.get("new") is not None


def test_sweep_skips_sessions_being_handled():
    store = InMemorySessionStore(timeout_minutes=30)
    _age(store.get_or_create("busy"), 45)

    async def sweep_while_locked():
        async with store.lock("busy"):
            return store.sweep_expired()

    assert asyncio.run(sweep_while_locked()) == 0
    assert store.get("busy") is not None
    assert store.sweep_expired() == 1


def test_lock_is_per_phone():
    store = InMemorySessionStore()

    assert store.lock("a") is store.lock("a")
    assert store.lock("a") is not store.lock("b")


def test_delete():
    store = InMemorySessionStore()
    store.get_or_create("111")

    assert store.delete("111") is True
    assert store.delete("111") is False


def test_history_is_bounded():
    store = InMemorySessionStore()
    session = store.get_or_create("111")

    for i in range(HISTORY_LIMIT + 3):
        session.record("user", f"message {i}")

    assert len(session.conversation_history) == HISTORY_LIMIT
    assert session.recent_messages()[-1] == f"message {HISTORY_LIMIT + 2}"


def test_recent_messages_filters_by_role():
    session = InMemorySessionStore().get_or_create("111")
    session.record("user", "hi")
    session.record("assistant", "hello")

    assert session.recent_messages(role="user") == ["hi"]


def test_clear_transfer_keeps_language_and_history():
    session = InMemorySessionStore().get_or_create("111")
    session.language = "es"
    session.record("user", "hola")
    session.amount = 100
    session.set_corridor(resolve_corridor("colombia"))
    session.recipient_name = "Juan Perez"
    session.bank_details = {"city": "Bogota"}
    session.state = DialogueState.CONFIRMING
    session.start_flow()

    session.clear_transfer()

    assert session.state == DialogueState.IDLE
    assert session.amount is None
    assert session.country is None
    assert session.currency is None
    assert session.recipient_name is None
    assert session.bank_details == {}
    assert session.flow_started_at is None
    assert session.language == "es"
    assert session.recent_messages() == ["hola"]


def test_set_corridor_sets_currency():
    session = InMemorySessionStore().get_or_create("111")

    session.set_corridor(resolve_corridor("uk"))

    assert session.country == "United Kingdom"
    assert session.currency == "GBP"
