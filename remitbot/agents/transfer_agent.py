#!/usr/bin/env python3
"""
Transfer Agent
Dialogue manager that walks a WhatsApp user through amount, country, recipient,
bank details and confirmation, then submits the transfer.
"""

import uuid
from typing import Optional
from pydantic import ValidationError
from remitbot.agents.ai_handler import AIHandler, FallbackContext
from remitbot.agents.field_extractor import FieldExtractor, RegexFieldExtractor
from remitbot.agents.message_processor import MessageProcessor
from remitbot.agents.response_handler import ResponseHandler
from remitbot.agents.session_store import DialogueState, Session, SessionStore
from remitbot.schemas.core import TransferResult, build_bank_details
from remitbot.services.errors import ProviderError
from remitbot.utils.bank_requirements import format_bank_details, get_requirements, missing_fields
from remitbot.utils.config import settings
from remitbot.utils.corridors import (
    DEMO_FEE_RATE,
    estimate_target_amount,
    get_exchange_rate,
    resolve_corridor,
)
from remitbot.utils.logger import get_logger
from remitbot.utils.rate_limiter import UserRateLimiter

logger = get_logger("transfer_agent")


class TransferAgent:
    """
    Coordinates one conversation turn per inbound message.

    All conversational state lives in the injected session store; the agent
    itself only holds collaborators:
    - MessageProcessor: language, commands, amount/country extraction
    - FieldExtractor: bank details from free text
    - ResponseHandler: localized replies
    - AIHandler: free-form fallback replies while idle
    """

    def __init__(
        self,
        session_store: SessionStore,
        whatsapp_service,
        transfer_service=None,
        extractor: Optional[FieldExtractor] = None,
        ai_handler: Optional[AIHandler] = None,
        rate_limiter: Optional[UserRateLimiter] = None,
        production: Optional[bool] = None,
    ):
        self.sessions = session_store
        self.whatsapp = whatsapp_service
        self.transfer_service = transfer_service
        self.extractor = extractor or RegexFieldExtractor()
        self.ai_handler = ai_handler or AIHandler()
        self.rate_limiter = rate_limiter
        self.production = settings.is_production if production is None else production

        self.message_processor = MessageProcessor()
        self.responses = ResponseHandler()

        self._state_handlers = {
            DialogueState.IDLE: self._handle_idle,
            DialogueState.COLLECTING_AMOUNT: self._handle_collecting_amount,
            DialogueState.COLLECTING_COUNTRY: self._handle_collecting_country,
            DialogueState.COLLECTING_RECIPIENT: self._handle_collecting_recipient,
            DialogueState.COLLECTING_BANK_DETAILS: self._handle_collecting_bank_details,
            DialogueState.CONFIRMING: self._handle_confirming,
        }

    @property
    def uses_real_transfers(self) -> bool:
        return bool(
            self.production
            and self.transfer_service is not None
            and getattr(self.transfer_service, "is_configured", False)
        )

    async def handle_incoming_message(self, phone_number: str, text: str) -> Session:
        """
        Process one inbound text message to completion.

        Messages from the same phone are serialized by the store's lock.
        Returns the session as it stands after the turn.
        """
        async with self.sessions.lock(phone_number):
            session = self.sessions.get_or_create(phone_number)

            if session.language is None:
                session.language = self.message_processor.detect_language(text)
                logger.info(f"Detected language '{session.language}' for {phone_number}")

            if self.rate_limiter is not None and not self.rate_limiter.hit(phone_number):
                await self.whatsapp.send_message(phone_number, self.responses.format_rate_limited(session.language))
                return session

            text = (text or "").strip()
            session.record("user", text)
            logger.info(f"📨 {phone_number} [{session.state.value}]: {len(text)} chars")

            if self.message_processor.is_cancel(text):
                session.clear_transfer()
                await self._reply(session, self.responses.format_cancelled(session.language))
                return session

            if self.message_processor.is_help(text):
                await self._reply(session, self.responses.format_help(session.language))
                return session

            await self._state_handlers[session.state](session, text)
            return session

    async def _reply(self, session: Session, message: str) -> None:
        session.record("assistant", message)
        await self.whatsapp.send_message(session.phone_number, message)

    async def _handle_idle(self, session: Session, text: str) -> None:
        lang = session.language
        mp = self.message_processor

        if mp.is_rate_query(text):
            corridor = mp.extract_country(text)
            if corridor:
                await self._reply(session, self.responses.format_rate(corridor, lang))
            else:
                await self._reply(session, self.responses.format_rate_which_country(lang))
            return

        amount = mp.extract_amount(text)
        corridor = mp.extract_country(text)
        # A stray number ("my phone is 313...") is not a transfer request
        money_talk = amount is not None and (corridor is not None or mp.is_amount_message(text))

        if mp.has_transfer_intent(text) or money_talk:
            session.start_flow()

            if amount is None:
                session.state = DialogueState.COLLECTING_AMOUNT
                await self._reply(session, self.responses.format_ask_amount(lang))
            elif not mp.is_valid_amount(amount):
                session.state = DialogueState.COLLECTING_AMOUNT
                await self._reply(session, self.responses.format_invalid_amount(lang))
            elif corridor:
                session.amount = amount
                session.set_corridor(corridor)
                session.state = DialogueState.COLLECTING_RECIPIENT
                await self._reply(session, self.responses.format_amount_and_country(amount, corridor, lang))
            else:
                session.amount = amount
                session.state = DialogueState.COLLECTING_COUNTRY
                await self._reply(session, self.responses.format_ask_country(amount, lang))

            logger.info(f"Transfer flow started for {session.phone_number} -> {session.state.value}")
            return

        if mp.is_greeting(text):
            await self._reply(session, self.responses.format_welcome(lang))
            return

        await self._reply(session, await self._fallback_reply(session, text))

    async def _fallback_reply(self, session: Session, text: str) -> str:
        context = FallbackContext(
            language=session.language,
            state=session.state.value,
            recent_messages=[f"{entry.role}: {entry.text}" for entry in session.conversation_history[:-1]],
            amount=session.amount,
            country=session.country,
            recipient_name=session.recipient_name,
        )
        try:
            return await self.ai_handler.generate_fallback_reply(text, context)
        except ProviderError as e:
            logger.info(f"Using static fallback reply: {e.message}")
            return self.responses.format_fallback(session.language)

    async def _handle_collecting_amount(self, session: Session, text: str) -> None:
        amount = self.message_processor.extract_amount(text)

        if not self.message_processor.is_valid_amount(amount):
            await self._reply(session, self.responses.format_invalid_amount(session.language))
            return

        session.amount = amount
        session.state = DialogueState.COLLECTING_COUNTRY
        await self._reply(session, self.responses.format_ask_country(amount, session.language))

    async def _handle_collecting_country(self, session: Session, text: str) -> None:
        corridor = self.message_processor.extract_country(text)

        # Only "yes" / "that one" style replies may pick up a country named earlier;
        # anything else (e.g. an unsupported country) is re-prompted
        if corridor is None and self.message_processor.refers_back(text):
            earlier = session.recent_messages("user", since=session.flow_started_at)[:-1]
            corridor = self.message_processor.extract_country_from_context(earlier)
            if corridor:
                logger.info(f"Country {corridor.country} taken from conversation context")

        if corridor is None:
            await self._reply(session, self.responses.format_invalid_country(session.language))
            return

        session.set_corridor(corridor)
        session.state = DialogueState.COLLECTING_RECIPIENT
        estimated = estimate_target_amount(session.amount, corridor.currency)
        await self._reply(
            session,
            self.responses.format_destination(session.amount, corridor, estimated, session.language),
        )

    async def _handle_collecting_recipient(self, session: Session, text: str) -> None:
        name = self.message_processor.extract_recipient_name(text)
        if name is None:
            await self._reply(session, self.responses.format_invalid_name(session.language))
            return

        requirements = get_requirements(session.currency)
        if requirements is None:
            logger.error(f"No bank requirements for currency {session.currency}")
            session.clear_transfer()
            await self._reply(session, self.responses.format_unsupported_currency(session.language))
            return

        session.recipient_name = name
        session.bank_details = {}
        session.state = DialogueState.COLLECTING_BANK_DETAILS
        await self._reply(
            session,
            self.responses.format_bank_details_request(name, requirements, session.language),
        )

    async def _handle_collecting_bank_details(self, session: Session, text: str) -> None:
        requirements = get_requirements(session.currency)
        if requirements is None:
            logger.error(f"No bank requirements for currency {session.currency}")
            session.clear_transfer()
            await self._reply(session, self.responses.format_unsupported_currency(session.language))
            return

        session.bank_details = self.extractor.extract(text, requirements, session.bank_details)
        missing = missing_fields(session.currency, session.bank_details)

        if missing:
            await self._reply(session, self.responses.format_missing_fields(missing, session.language))
            return

        session.state = DialogueState.CONFIRMING
        await self._reply(
            session,
            self.responses.format_confirmation_summary(
                amount=session.amount,
                country=session.country,
                currency=session.currency,
                recipient_name=session.recipient_name,
                bank_details_text=format_bank_details(session.currency, session.bank_details),
                language=session.language,
            ),
        )

    async def _handle_confirming(self, session: Session, text: str) -> None:
        if not self.message_processor.is_confirmation(text):
            await self._reply(session, self.responses.format_confirm_prompt(session.language))
            return

        await self._reply(session, self.responses.format_processing(session.language))

        try:
            result = await self._submit(session)
            await self._reply(session, self.responses.format_transfer_success(result, session.language))
        except ProviderError as e:
            logger.error(f"Transfer failed for {session.phone_number}: {e.message}")
            await self._reply(session, self.responses.format_transfer_failed(e.message, session.language))
        except ValidationError as e:
            logger.error(f"Collected bank details did not validate for {session.phone_number}: {e.error_count()} error(s)")
            await self._reply(
                session,
                self.responses.format_transfer_failed("incomplete bank details", session.language),
            )
        finally:
            session.clear_transfer()

    async def _submit(self, session: Session) -> TransferResult:
        """Submit through Wise in production, otherwise synthesize a demo result."""
        bank_details = build_bank_details(session.currency, session.bank_details)

        if self.uses_real_transfers:
            logger.info(f"💸 Submitting real transfer for {session.phone_number}")
            return await self.transfer_service.submit_transfer(
                amount=session.amount,
                recipient_name=session.recipient_name,
                country=session.country,
                bank_details=bank_details,
                reference=f"WhatsApp transfer to {session.recipient_name}",
            )

        return self.demo_transfer(session)

    @staticmethod
    def demo_transfer(session: Session) -> TransferResult:
        rate = get_exchange_rate(session.currency) or 0.0
        fee = round(session.amount * DEMO_FEE_RATE, 2)
        corridor = resolve_corridor(session.country)

        logger.info(f"🎭 Demo transfer for {session.phone_number}: {session.amount} USD -> {session.currency}")
        return TransferResult(
            transfer_id=f"DEMO-{uuid.uuid4().hex[:12].upper()}",
            status="demo",
            amount=session.amount,
            target_amount=round((session.amount - fee) * rate, 2),
            target_currency=session.currency,
            rate=rate,
            fee=fee,
            estimated_delivery=corridor.delivery(session.language or "en") if corridor else None,
            recipient_name=session.recipient_name,
            recipient_country=session.country,
            is_demo=True,
        )
