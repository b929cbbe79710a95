"""Response handler: localized (en/es) reply formatting for the transfer agent."""

from typing import List, Optional
from remitbot.schemas.core import TransferResult
from remitbot.utils.bank_requirements import CountryBankRequirements
from remitbot.utils.corridors import (
    Corridor,
    DEMO_FEE_RATE,
    get_exchange_rate,
    resolve_corridor,
    supported_countries,
)
from remitbot.utils.logger import get_logger

logger = get_logger("response_handler")


def format_usd(amount: float) -> str:
    if float(amount).is_integer():
        return f"${amount:,.0f}"
    return f"${amount:,.2f}"


def _bullets(items: List[str]) -> str:
    return "\n".join(f"• {item}" for item in items)


class ResponseHandler:
    """Builds every user-facing message in the user's language."""

    def country_list(self, language: str) -> str:
        return _bullets(supported_countries(language))

    def format_welcome(self, language: str) -> str:
        if language == "es":
            return (
                "👋 *¡Bienvenido a Bambu!*\n\n"
                "Te ayudo a enviar dinero al extranjero con excelentes tasas.\n\n"
                f"🌎 Países disponibles:\n{self.country_list(language)}\n\n"
                'Prueba: "Enviar $100 a México"'
            )
        return (
            "👋 *Welcome to Bambu!*\n\n"
            "I help you send money internationally with great rates.\n\n"
            f"🌎 Supported countries:\n{self.country_list(language)}\n\n"
            'Try: "Send $100 to Mexico"'
        )

    def format_help(self, language: str) -> str:
        if language == "es":
            return (
                "💡 *Ayuda de Bambu*\n\n"
                f"Puedo ayudarte a enviar dinero a:\n{self.country_list(language)}\n\n"
                "Prueba:\n"
                '• "Enviar $100 a México"\n'
                '• "¿Cuál es la tasa a Colombia?"\n'
                '• "Quiero enviar dinero a mi familia"\n\n'
                'Escribe "cancelar" en cualquier momento para detenerte.'
            )
        return (
            "💡 *Bambu Help*\n\n"
            f"I can help you send money to:\n{self.country_list(language)}\n\n"
            "Try:\n"
            '• "Send $100 to Mexico"\n'
            "• \"What's the rate to Colombia?\"\n"
            '• "Send money to my family"\n\n'
            'Say "cancel" anytime to stop.'
        )

    def format_cancelled(self, language: str) -> str:
        if language == "es":
            return '🔄 Transferencia cancelada. Escribe "hola" para empezar de nuevo.'
        return '🔄 Transfer cancelled. Say "hello" to start again.'

    def format_rate(self, corridor: Corridor, language: str) -> str:
        rate = get_exchange_rate(corridor.currency)
        name = corridor.display_name(language)
        if language == "es":
            return (
                "💱 *Tipo de cambio*\n\n"
                f"1 USD = {rate:g} {corridor.currency}\n\n"
                f'¿Listo para enviar? Prueba "Enviar $100 a {name}"'
            )
        return (
            "💱 *Exchange Rate*\n\n"
            f"1 USD = {rate:g} {corridor.currency}\n\n"
            f'Ready to send? Try "Send $100 to {name}"'
        )

    def format_rate_which_country(self, language: str) -> str:
        countries = ", ".join(supported_countries(language))
        if language == "es":
            return f"🌎 ¿A qué país? ({countries})"
        return f"🌎 Which country? ({countries})"

    def format_ask_amount(self, language: str) -> str:
        if language == "es":
            return "💰 ¿Cuánto quieres enviar? (en USD)"
        return "💰 How much would you like to send? (in USD)"

    def format_invalid_amount(self, language: str) -> str:
        if language == "es":
            return '❌ Ingresa un monto válido entre $1 y $10,000\n\nEjemplo: "$100" o "100"'
        return '❌ Please enter a valid amount between $1 and $10,000\n\nExample: "$100" or "100"'

    def format_ask_country(self, amount: float, language: str) -> str:
        if language == "es":
            return f"✅ Enviando *{format_usd(amount)} USD*\n\n🌎 ¿A qué país?\n{self.country_list(language)}"
        return f"✅ Sending *{format_usd(amount)} USD*\n\n🌎 Which country?\n{self.country_list(language)}"

    def format_invalid_country(self, language: str) -> str:
        if language == "es":
            return f"❌ Elige un país disponible:\n{self.country_list(language)}"
        return f"❌ Please choose a supported country:\n{self.country_list(language)}"

    def format_amount_and_country(self, amount: float, corridor: Corridor, language: str) -> str:
        name = corridor.display_name(language)
        if language == "es":
            return (
                f"✅ ¡Entendido! Enviando *{format_usd(amount)} USD* a *{name}* {corridor.flag}\n\n"
                "📝 ¿Cuál es el nombre completo del destinatario?"
            )
        return (
            f"✅ Got it! Sending *{format_usd(amount)} USD* to *{name}* {corridor.flag}\n\n"
            "📝 What's the recipient's full name?"
        )

    def format_destination(self, amount: float, corridor: Corridor, estimated: Optional[float], language: str) -> str:
        rate = get_exchange_rate(corridor.currency)
        name = corridor.display_name(language)
        if language == "es":
            return (
                f"✅ Destino: *{name}* {corridor.flag}\n"
                f"💱 Tasa: 1 USD = {rate:g} {corridor.currency}\n"
                f"📩 Recibirá: ~{estimated:,.2f} {corridor.currency}\n\n"
                "📝 ¿Cuál es el nombre completo del destinatario?"
            )
        return (
            f"✅ Destination: *{name}* {corridor.flag}\n"
            f"💱 Rate: 1 USD = {rate:g} {corridor.currency}\n"
            f"📩 They'll receive: ~{estimated:,.2f} {corridor.currency}\n\n"
            "📝 What's the recipient's full name?"
        )

    def format_invalid_name(self, language: str) -> str:
        if language == "es":
            return "❌ Ingresa el nombre completo del destinatario (nombre y apellido)"
        return "❌ Please enter the recipient's full name (first and last name)"

    def format_bank_details_request(self, recipient_name: str, requirements: CountryBankRequirements, language: str) -> str:
        fields_text = "\n\n".join(
            f"• *{field.label}*: {field.description}\n  {'Ejemplo' if language == 'es' else 'Example'}: {field.example}"
            for field in requirements.fields
        )
        if language == "es":
            return (
                f"✅ Destinatario: *{recipient_name}*\n\n"
                f"📋 Ahora necesito sus datos bancarios:\n\n{fields_text}\n\n"
                "ℹ️ Envíalos uno por uno o todos juntos."
            )
        return (
            f"✅ Recipient: *{recipient_name}*\n\n"
            f"📋 Now I need their bank details:\n\n{fields_text}\n\n"
            "ℹ️ Send them one at a time or all together."
        )

    def format_missing_fields(self, missing: List[str], language: str) -> str:
        if language == "es":
            return f"❌ Todavía necesito:\n\n{_bullets(missing)}\n\nEnvía la información que falta."
        return f"❌ Still need:\n\n{_bullets(missing)}\n\nPlease provide the missing information."

    def format_confirmation_summary(
        self,
        amount: float,
        country: str,
        currency: str,
        recipient_name: str,
        bank_details_text: str,
        language: str,
    ) -> str:
        rate = get_exchange_rate(currency) or 0.0
        fee = round(amount * DEMO_FEE_RATE, 2)
        receives = (amount - fee) * rate
        corridor = resolve_corridor(country)
        delivery = corridor.delivery(language) if corridor else ""
        place = corridor.display_name(language) if corridor else country

        if language == "es":
            return (
                "✅ *¡Listo para enviar!*\n\n"
                f"💰 Envías: {format_usd(amount)} USD\n"
                f"💵 Comisión: ~${fee:,.2f} USD\n"
                f"💱 Tasa: {rate:g} {currency}/USD\n"
                f"📩 {recipient_name} recibe: ~{receives:,.2f} {currency}\n"
                f"🌎 País: {place}\n"
                f"⏱️ Entrega: {delivery}\n\n"
                f"🏦 Datos bancarios:\n{bank_details_text}\n\n"
                'Escribe *"CONFIRMAR"* para enviar, o "cancelar" para detenerte.'
            )
        return (
            "✅ *Ready to Send!*\n\n"
            f"💰 You send: {format_usd(amount)} USD\n"
            f"💵 Fee: ~${fee:,.2f} USD\n"
            f"💱 Rate: {rate:g} {currency}/USD\n"
            f"📩 {recipient_name} receives: ~{receives:,.2f} {currency}\n"
            f"🌎 Country: {place}\n"
            f"⏱️ Delivery: {delivery}\n\n"
            f"🏦 Bank details:\n{bank_details_text}\n\n"
            'Type *"CONFIRM"* to send, or "cancel" to stop.'
        )

    def format_confirm_prompt(self, language: str) -> str:
        if language == "es":
            return 'Escribe *"CONFIRMAR"* para continuar con la transferencia,\no "cancelar" para detenerte.'
        return 'Type *"CONFIRM"* to proceed with the transfer,\nor "cancel" to stop.'

    def format_processing(self, language: str) -> str:
        if language == "es":
            return "⏳ Procesando tu transferencia..."
        return "⏳ Processing your transfer..."

    def format_transfer_success(self, result: TransferResult, language: str) -> str:
        currency = result.target_currency
        if result.is_demo:
            if language == "es":
                return (
                    "✅ *Transferencia Demo*\n\n"
                    f"💰 Enviado: {format_usd(result.amount)} USD\n"
                    f"📩 Recibe: ~{result.target_amount:,.2f} {currency}\n"
                    f"💱 Tasa: ~{result.rate:g}\n"
                    f"💵 Comisión: ~${result.fee:,.2f}\n"
                    f"🆔 ID: {result.transfer_id}\n\n"
                    "🎭 Esto es una DEMO. No se envió dinero real.\n\n"
                    'Escribe "hola" para probar otra transferencia.'
                )
            return (
                "✅ *Transfer Demo*\n\n"
                f"💰 Sent: {format_usd(result.amount)} USD\n"
                f"📩 Receives: ~{result.target_amount:,.2f} {currency}\n"
                f"💱 Rate: ~{result.rate:g}\n"
                f"💵 Fee: ~${result.fee:,.2f}\n"
                f"🆔 ID: {result.transfer_id}\n\n"
                "🎭 This is a DEMO. No real money sent.\n\n"
                'Say "hello" to try another transfer!'
            )

        pending = result.status == "pending_funding"
        if language == "es":
            note = "⚠️ Transferencia creada, pendiente de fondeo." if pending else "✨ Transferencia real vía Wise"
            return (
                "✅ *¡Transferencia enviada!*\n\n"
                f"💰 Enviado: {format_usd(result.amount)} USD\n"
                f"📩 Recibe: {result.target_amount:,.2f} {currency}\n"
                f"💱 Tasa: {result.rate:.4f}\n"
                f"💵 Comisión: ${result.fee:,.2f}\n"
                f"⏱️ Entrega: {result.estimated_delivery or 'N/A'}\n"
                f"🆔 ID de transferencia: {result.transfer_id}\n\n"
                f"{note}\n\n"
                'Escribe "hola" para enviar otra transferencia.'
            )
        note = "⚠️ Transfer created, pending funding." if pending else "✨ Real transfer via Wise API"
        return (
            "✅ *Transfer Sent!*\n\n"
            f"💰 Sent: {format_usd(result.amount)} USD\n"
            f"📩 Receives: {result.target_amount:,.2f} {currency}\n"
            f"💱 Rate: {result.rate:.4f}\n"
            f"💵 Fee: ${result.fee:,.2f}\n"
            f"⏱️ Delivery: {result.estimated_delivery or 'N/A'}\n"
            f"🆔 Transfer ID: {result.transfer_id}\n\n"
            f"{note}\n\n"
            'Say "hello" to send another transfer!'
        )

    def format_transfer_failed(self, error: str, language: str) -> str:
        if language == "es":
            return (
                "❌ *La transferencia falló*\n\n"
                f"Error: {error}\n\n"
                'Escribe "hola" para intentarlo de nuevo o contacta a soporte.'
            )
        return (
            "❌ *Transfer Failed*\n\n"
            f"Error: {error}\n\n"
            'Say "hello" to try again or contact support.'
        )

    def format_fallback(self, language: str) -> str:
        if language == "es":
            return (
                "👋 ¡Puedo ayudarte a enviar dinero al extranjero!\n\n"
                "Prueba:\n"
                '• "Enviar $100 a México"\n'
                '• "Tasa a Colombia"\n'
                '• "Ayuda"'
            )
        return (
            "👋 I can help you send money internationally!\n\n"
            "Try:\n"
            '• "Send $100 to Mexico"\n'
            '• "Check rate to Colombia"\n'
            '• "Help"'
        )

    def format_rate_limited(self, language: str) -> str:
        if language == "es":
            return "⏳ Estás enviando mensajes muy rápido. Espera un momento e inténtalo de nuevo."
        return "⏳ You're sending messages too quickly. Please wait a moment and try again."

    def format_text_only(self, language: str = "en") -> str:
        if language == "es":
            return "📝 Por ahora solo puedo leer mensajes de texto."
        return "📝 I can only read text messages for now."

    def format_unsupported_currency(self, language: str) -> str:
        if language == "es":
            return '❌ Error: moneda no soportada. Escribe "hola" para empezar de nuevo.'
        return '❌ Error: unsupported currency. Say "hello" to start again.'
