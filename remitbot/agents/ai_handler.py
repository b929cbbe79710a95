"""AI handler for free-form questions the transfer flow does not recognize."""

from typing import List, Optional
from pydantic import BaseModel, Field
from remitbot.services.errors import ProviderError
from remitbot.utils.corridors import supported_countries
from remitbot.utils.logger import get_logger

logger = get_logger("ai_handler")

MAX_REPLY_LENGTH = 700


class FallbackContext(BaseModel):
    """What the model is told about the user's conversation."""

    language: str = "en"
    state: str = "idle"
    recent_messages: List[str] = Field(default_factory=list)
    amount: Optional[float] = None
    country: Optional[str] = None
    recipient_name: Optional[str] = None


class AIHandler:
    """Wraps an OpenAI-compatible chat client for conversational fallback replies."""

    def __init__(self, ai_client=None, ai_model: Optional[str] = None, ai_enabled: bool = False):
        self.ai_client = ai_client
        self.ai_model = ai_model
        self.ai_enabled = ai_enabled and ai_client is not None and bool(ai_model)

    def _build_system_prompt(self, context: FallbackContext) -> str:
        countries = ", ".join(supported_countries(context.language))

        if context.language == "es":
            prompt = (
                "Eres el agente de soporte de Bambu, un servicio de transferencias internacionales por WhatsApp.\n\n"
                "CÓMO RESPONDER:\n"
                "- Responde en español, amigable y profesional (2-4 oraciones)\n"
                "- Usa emojis con moderación\n"
                "- Si hay un error, explica qué pasó y cómo solucionarlo\n\n"
                "INFORMACIÓN DEL SERVICIO:\n"
                f"- Países: {countries}\n"
                "- Integrado con Wise, entrega en 1-3 días hábiles, comisión típica ~3%\n"
                '- Para empezar: "Enviar $100 a México". "Cancelar" detiene la transferencia, "Ayuda" muestra la ayuda\n'
                "- Wise requiere nombre y apellido completos del destinatario\n"
                '- NUNCA inventes tasas exactas: di "Para ver la tasa actual, inicia una transferencia"'
            )
            transfer_header = "CONTEXTO DE TRANSFERENCIA ACTUAL:"
            labels = ("Monto", "País", "Destinatario")
            history_header = "CONVERSACIÓN RECIENTE:"
        else:
            prompt = (
                "You are the support agent for Bambu, an international money transfer service on WhatsApp.\n\n"
                "HOW TO RESPOND:\n"
                "- Reply in English, friendly and professional (2-4 sentences)\n"
                "- Use emojis sparingly\n"
                "- If the user hit an error, explain what happened and how to fix it\n\n"
                "SERVICE INFORMATION:\n"
                f"- Countries: {countries}\n"
                "- Powered by Wise, delivery in 1-3 business days, typical fee ~3%\n"
                '- To start: "Send $100 to Mexico". "Cancel" stops a transfer, "Help" shows help\n'
                "- Wise requires the recipient's full first and last name\n"
                '- NEVER make up exact rates: say "To see the current rate, start a transfer"'
            )
            transfer_header = "CURRENT TRANSFER CONTEXT:"
            labels = ("Amount", "Country", "Recipient")
            history_header = "RECENT CONVERSATION:"

        details = []
        if context.amount:
            details.append(f"- {labels[0]}: ${context.amount:g} USD")
        if context.country:
            details.append(f"- {labels[1]}: {context.country}")
        if context.recipient_name:
            details.append(f"- {labels[2]}: {context.recipient_name}")
        if details:
            prompt += f"\n\n{transfer_header}\n" + "\n".join(details)

        if context.recent_messages:
            prompt += f"\n\n{history_header}\n" + "\n".join(context.recent_messages)

        return prompt

    async def generate_fallback_reply(self, text: str, context: FallbackContext) -> str:
        """
        Ask the model for a reply to an unrecognized message.

        Raises ProviderError when the model is unavailable or the call fails;
        callers are expected to substitute a static reply.
        """
        if not self.ai_enabled:
            raise ProviderError("AI fallback is not configured")

        try:
            completion = await self.ai_client.chat.completions.create(
                model=self.ai_model,
                messages=[
                    {"role": "system", "content": self._build_system_prompt(context)},
                    {"role": "user", "content": text},
                ],
                max_tokens=300,
                temperature=0.7,
            )
        except Exception as e:
            logger.error(f"AI fallback call failed: {e}")
            raise ProviderError(f"AI fallback failed: {e}")

        raw_content = completion.choices[0].message.content if completion.choices else None
        if not raw_content or not raw_content.strip():
            raise ProviderError("AI fallback returned an empty reply")

        reply = raw_content.strip()
        if len(reply) > MAX_REPLY_LENGTH:
            reply = reply[:MAX_REPLY_LENGTH - 3] + "..."
        return reply
