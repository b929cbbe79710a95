"""FastAPI server for the WhatsApp transfer agent."""

import asyncio
from typing import Any, Dict, Optional

from fastapi import BackgroundTasks, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from remitbot.agents.ai_handler import AIHandler
from remitbot.agents.session_store import InMemorySessionStore
from remitbot.agents.transfer_agent import TransferAgent
from remitbot.agents.response_handler import ResponseHandler
from remitbot.config.ai_config import get_ai_client, get_ai_model, is_ai_enabled
from remitbot.schemas.core import StandardResponse, VerificationCheckRequest, VerificationSendRequest
from remitbot.services.errors import ProviderError
from remitbot.services.verification_service import VerificationService
from remitbot.services.whatsapp_service import WhatsAppService
from remitbot.services.wise_service import WiseService
from remitbot.utils.config import settings
from remitbot.utils.logger import get_logger
from remitbot.utils.rate_limiter import UserRateLimiter

# Initialize logger first
logger = get_logger("api_server")

# Validate all services on startup
try:
    from remitbot.utils.service_validator import log_service_status
    log_service_status()
except Exception as e:
    logger.warning(f"Could not validate services: {e}")

# Core services
session_store = InMemorySessionStore(timeout_minutes=settings.session_timeout_minutes)
whatsapp_service = WhatsAppService()
wise_service = WiseService()
verification_service = VerificationService(whatsapp_service=whatsapp_service)
ai_handler = AIHandler(ai_client=get_ai_client(), ai_model=get_ai_model(), ai_enabled=is_ai_enabled())

transfer_agent = TransferAgent(
    session_store=session_store,
    whatsapp_service=whatsapp_service,
    transfer_service=wise_service,
    ai_handler=ai_handler,
    rate_limiter=UserRateLimiter(settings.user_rate_limit),
)
responses = ResponseHandler()

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="WhatsApp conversational money transfers",
    version=settings.app_version,
    docs_url="/docs" if settings.debug else None,  # Disable docs in production
    redoc_url="/redoc" if settings.debug else None
)

# Initialize rate limiter
limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "X-Hub-Signature-256"],
)

_sweep_task: Optional[asyncio.Task] = None


# Exception handler for external provider errors
@app.exception_handler(ProviderError)
async def provider_exception_handler(request, exc: ProviderError):
    logger.error(f"Provider error: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code or status.HTTP_502_BAD_GATEWAY,
        content={
            "status": False,
            "message": exc.message,
            "data": exc.response_data
        }
    )


# General exception handler
@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    logger.error(f"Unexpected error: {str(exc)}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "status": False,
            "message": "An unexpected error occurred",
            "data": None
        }
    )


async def sweep_expired_loop(interval_seconds: int):
    """Periodically drop timed-out sessions and verification codes."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            sessions = session_store.sweep_expired()
            codes = verification_service.sweep_expired()
            if sessions or codes:
                logger.info(f"🧹 Swept {sessions} session(s) and {codes} verification code(s)")
        except Exception as e:
            logger.error(f"Sweep failed: {e}")


@app.on_event("startup")
async def start_background_sweep():
    global _sweep_task
    _sweep_task = asyncio.create_task(sweep_expired_loop(settings.session_sweep_interval_seconds))
    logger.info(f"🚀 {settings.app_name} started in {settings.mode.upper()} mode")


@app.on_event("shutdown")
async def stop_background_sweep():
    if _sweep_task is not None:
        _sweep_task.cancel()


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "mode": settings.mode.upper(),
        "wise_connected": wise_service.is_configured,
        "whatsapp_configured": whatsapp_service.is_configured,
        "ai_enabled": ai_handler.ai_enabled,
        "active_sessions": len(session_store),
    }


# =============================================================================
# WHATSAPP WEBHOOK ENDPOINTS
# =============================================================================

@app.get("/webhook")
async def verify_webhook(request: Request):
    """Meta webhook subscription handshake."""
    params = request.query_params
    challenge = whatsapp_service.verify_webhook(
        params.get("hub.mode"),
        params.get("hub.verify_token"),
        params.get("hub.challenge"),
    )
    if challenge is None:
        return PlainTextResponse("Forbidden", status_code=status.HTTP_403_FORBIDDEN)
    return PlainTextResponse(challenge)


async def process_text_message(phone_number: str, text: str):
    """Run one agent turn outside the request cycle."""
    try:
        await transfer_agent.handle_incoming_message(phone_number, text)
    except Exception as e:
        logger.exception(f"Error handling message from {phone_number}: {e}")


async def reply_text_only(phone_number: str):
    session = session_store.get(phone_number)
    language = session.language if session and session.language else "en"
    await whatsapp_service.send_message(phone_number, responses.format_text_only(language))


@app.post("/webhook")
@limiter.limit(settings.webhook_rate_limit)
async def whatsapp_webhook(request: Request, background_tasks: BackgroundTasks) -> Dict[str, Any]:
    """
    Receive Cloud API events.

    Always acknowledges with 200 so Meta does not redeliver; each message is
    handled in a background task after the response is sent.
    """
    try:
        payload = await request.json()
    except ValueError:
        logger.warning("Webhook body was not valid JSON")
        return {"status": "received"}

    for message in whatsapp_service.extract_messages(payload):
        phone_number = message["phone_number"]
        if message["type"] == "text" and message["text"]:
            background_tasks.add_task(process_text_message, phone_number, message["text"])
        else:
            logger.info(f"Non-text message ({message['type']}) from {phone_number}")
            background_tasks.add_task(reply_text_only, phone_number)

    return {"status": "received"}


# =============================================================================
# PHONE VERIFICATION ENDPOINTS
# =============================================================================

@app.post("/verification/send")
async def send_verification(body: VerificationSendRequest):
    """Send a one-time verification code over WhatsApp."""
    allowance = await verification_service.send_code(body.phone_number, body.language)
    if not allowance.allowed:
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content=StandardResponse(
                status=False,
                message=allowance.reason or "Too many requests",
                data={"retry_after": allowance.retry_after},
            ).model_dump()
        )

    return StandardResponse(status=True, message="Verification code sent")


@app.post("/verification/verify")
async def verify_code(body: VerificationCheckRequest):
    """Check a verification code."""
    result = verification_service.verify_code(body.phone_number, body.code)
    if not result.valid:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=StandardResponse(
                status=False,
                message=result.reason or "Invalid code",
                data={"attempts_left": result.attempts_left},
            ).model_dump()
        )

    return StandardResponse(status=True, message="Phone number verified")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api_server:app", host=settings.api_host, port=settings.api_port, reload=settings.api_reload)
