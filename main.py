"""Main entry point for the WhatsApp transfer agent."""

import argparse
import asyncio
import sys
from typing import Any, Dict

from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich import box

from remitbot.utils.config import settings
from remitbot.utils.logger import get_logger

logger = get_logger("main")
console = Console()

LOCAL_PHONE = "15550000000"


class ConsoleWhatsApp:
    """Stands in for the Cloud API when chatting from a terminal."""

    is_configured = True

    async def send_message(self, to: str, message: str) -> Dict[str, Any]:
        console.print(Panel(message, title="Bambu", title_align="left", box=box.ROUNDED, style="green"))
        return {"success": True}


async def chat_loop():
    """Talk to the agent locally, one line per message."""
    from remitbot.agents.ai_handler import AIHandler
    from remitbot.agents.session_store import InMemorySessionStore
    from remitbot.agents.transfer_agent import TransferAgent
    from remitbot.config.ai_config import get_ai_client, get_ai_model, is_ai_enabled
    from remitbot.services.wise_service import WiseService

    agent = TransferAgent(
        session_store=InMemorySessionStore(timeout_minutes=settings.session_timeout_minutes),
        whatsapp_service=ConsoleWhatsApp(),
        transfer_service=WiseService(),
        ai_handler=AIHandler(ai_client=get_ai_client(), ai_model=get_ai_model(), ai_enabled=is_ai_enabled()),
    )

    console.print("[dim]Type a message, or 'quit' to exit.[/dim]\n")
    while True:
        text = console.input("[bold blue]You:[/bold blue] ").strip()
        if text.lower() in ("quit", "exit"):
            break
        if text:
            await agent.handle_incoming_message(LOCAL_PHONE, text)


def run_chat():
    """Run the local chat console."""
    logger.info("Starting local chat console")
    asyncio.run(chat_loop())


def run_api():
    """Run the API server."""
    try:
        import uvicorn

        logger.info(f"Starting {settings.app_name} API server")
        console.print(f"🚀 Starting {settings.app_name} API Server")
        console.print(f"📍 Running on: http://{settings.api_host}:{settings.api_port}")
        console.print(f"🔗 Webhook: http://{settings.api_host}:{settings.api_port}/webhook")
        console.print(f"💸 Mode: {settings.mode.upper()}")
        console.print()

        uvicorn.run(
            "api_server:app",  # Use import string for proper reload support
            host=settings.api_host,
            port=settings.api_port,
            reload=settings.api_reload,
            log_level=settings.log_level.lower()
        )

    except ImportError as e:
        logger.error(f"Failed to import API modules: {e}")
        console.print("[red]Error: Failed to start API server. Make sure all dependencies are installed.[/red]")
        sys.exit(1)


def check_environment() -> bool:
    """Print the configuration status of every external service."""
    from remitbot.utils.service_validator import validate_all_services

    results = validate_all_services()

    console.print(f"💸 Mode: {settings.mode.upper()}")
    for name in ("whatsapp", "wise", "ai"):
        result = results[name]
        mark = "✅" if result["valid"] and not result["warnings"] else ("⚠️ " if result["valid"] else "❌")
        console.print(f"{mark} {name.upper()}")
        for issue in result["issues"]:
            console.print(f"   [red]{issue}[/red]")
        for warning in result["warnings"]:
            console.print(f"   [yellow]{warning}[/yellow]")

    console.print()
    return results["overall_valid"]


def main():
    """Main entry point with argument parsing."""
    parser = argparse.ArgumentParser(
        description=f"{settings.app_name} - WhatsApp money transfer agent",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py              # Chat with the agent in the terminal (default)
  python main.py --api        # Run the webhook API server
  python main.py --check      # Check environment configuration
        """
    )

    group = parser.add_mutually_exclusive_group()
    group.add_argument("--chat", action="store_true", help="Chat with the agent locally (default)")
    group.add_argument("--api", action="store_true", help="Run the FastAPI webhook server")
    group.add_argument("--check", action="store_true", help="Check environment configuration")
    parser.add_argument("--version", action="version", version=f"{settings.app_name} v{settings.app_version}")

    args = parser.parse_args()

    console.print(Panel(
        Text(f"{settings.app_name} v{settings.app_version}", justify="center", style="bold blue"),
        box=box.DOUBLE,
        style="blue"
    ))

    if args.check:
        sys.exit(0 if check_environment() else 1)
    elif args.api:
        run_api()
    else:
        run_chat()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        console.print("\n👋 Application terminated by user")
        sys.exit(0)
