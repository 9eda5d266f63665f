"""Application entrypoint."""

from __future__ import annotations

import asyncio
import importlib.metadata
import logging
import signal
from typing import Annotated, Any, Awaitable, Callable, Optional, TypeVar

import httpx
import typer
from pydantic import ValidationError

from spacybot.config import Settings, load_settings
from spacybot.errors import StartupError, TelegramAPIError
from spacybot.inline_handler import InlineQueryHandler
from spacybot.logging_setup import configure_logging
from spacybot.poller import UpdatePoller
from spacybot.telegram.base import ALLOWED_UPDATES, BotClient
from spacybot.telegram.bot_api import BotApiClient
from spacybot.webhook import serve_webhook

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING_TOKEN_MESSAGE = (
    "Please provide a bot token with command line option '--token' "
    "or environment variable 'TELEGRAM_BOT_TOKEN'."
)


async def _retry_until_ok(
    action: Callable[[], Awaitable[T]],
    description: str,
    retry_seconds: float,
    stop_event: asyncio.Event,
) -> T | None:
    """Repeat a startup call until it succeeds; a rejected token is fatal.

    Returns None when stop_event is set before the call succeeds.
    """

    while not stop_event.is_set():
        try:
            return await action()
        except TelegramAPIError as exc:
            if exc.is_unauthorized:
                raise StartupError(f"Telegram rejected the bot token: {exc.description}") from exc
            LOGGER.error("Failed to %s, retrying in %s seconds: %s", description, retry_seconds, exc)
        except httpx.HTTPError as exc:
            LOGGER.error("Failed to %s, retrying in %s seconds: %s", description, retry_seconds, exc)
        try:
            await asyncio.wait_for(stop_event.wait(), retry_seconds)
        except asyncio.TimeoutError:
            pass
    return None


def _install_signal_handlers(stop_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()

    def _on_signal() -> None:
        if not stop_event.is_set():
            LOGGER.info("Received exit signal")
        stop_event.set()

    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, _on_signal)


async def run(
    settings: Settings,
    client: BotClient | None = None,
    stop_event: asyncio.Event | None = None,
) -> None:
    """Start the bot and serve inline queries until stop_event is set."""

    client = client or BotApiClient(settings)
    if stop_event is None:
        stop_event = asyncio.Event()
        _install_signal_handlers(stop_event)

    me = await _retry_until_ok(client.get_me, "get bot info", settings.startup_retry_seconds, stop_event)
    if me is None:
        LOGGER.info("Bot shutdown before startup completed")
        return
    await _retry_until_ok(
        lambda: client.set_webhook(
            settings.webhook_url,
            secret_token=settings.webhook_secret_token,
            allowed_updates=ALLOWED_UPDATES,
        ),
        "set webhook",
        settings.startup_retry_seconds,
        stop_event,
    )
    if stop_event.is_set():
        LOGGER.info("Bot shutdown before startup completed")
        return
    LOGGER.info("Started Telegram bot username=%s id=%s", me.get("username"), me.get("id"))

    handler = InlineQueryHandler(client)

    if settings.use_webhook:
        await serve_webhook(settings, handler.handle_update, stop_event)
        return

    poller = UpdatePoller(client, handler.handle_update, poll_timeout_seconds=settings.poll_timeout_seconds)
    poll_task = asyncio.create_task(poller.run_forever(), name="update-poller")
    stop_task = asyncio.create_task(stop_event.wait(), name="poller-stop")
    try:
        done, _ = await asyncio.wait({poll_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
        if poll_task in done:
            poll_task.result()
    finally:
        poller.stop()
        stop_task.cancel()
        poll_task.cancel()
        await asyncio.gather(poll_task, stop_task, return_exceptions=True)
        LOGGER.info("Bot shutdown complete")


def _version_callback(value: bool) -> None:
    if value:
        try:
            ver = importlib.metadata.version("cubic-spacy-bot")
        except importlib.metadata.PackageNotFoundError:
            ver = "dev"
        typer.echo(f"cubic-spacy-bot {ver}")
        raise typer.Exit()


app = typer.Typer(
    name="cubic-spacy-bot",
    help="Telegram inline bot that returns playful rewrites of the typed text.",
    add_completion=False,
)


@app.command()
def serve(
    token: Annotated[Optional[str], typer.Option("--token", help="Telegram bot API token.")] = None,
    url: Annotated[Optional[str], typer.Option("--url", help="Custom Telegram bot API URL.")] = None,
    webhook_url: Annotated[
        Optional[str], typer.Option("--webhook-url", help="Webhook URL to set for the bot.")
    ] = None,
    webhook_secret_token: Annotated[
        Optional[str], typer.Option("--webhook-secret-token", help="Secret token for webhook authentication.")
    ] = None,
    webhook_listen_network: Annotated[
        Optional[str], typer.Option("--webhook-listen-network", help="tcp, tcp4, tcp6 or unix.")
    ] = None,
    webhook_listen_address: Annotated[
        Optional[str],
        typer.Option("--webhook-listen-address", help="e.g. :8080 or /run/cubic-spacy-bot.sock"),
    ] = None,
    webhook_listen_owner: Annotated[
        Optional[str], typer.Option("--webhook-listen-owner", help="Owner for the unix socket.")
    ] = None,
    webhook_listen_group: Annotated[
        Optional[str], typer.Option("--webhook-listen-group", help="Group for the unix socket.")
    ] = None,
    webhook_listen_mode: Annotated[
        Optional[str], typer.Option("--webhook-listen-mode", help="Octal file mode for the unix socket.")
    ] = None,
    log_level: Annotated[
        Optional[str], typer.Option("--log-level", help="DEBUG, INFO, WARNING or ERROR.")
    ] = None,
    log_no_color: Annotated[
        Optional[bool], typer.Option("--log-no-color", help="Disable colors in log output.")
    ] = None,
    log_no_time: Annotated[
        Optional[bool], typer.Option("--log-no-time", help="Disable timestamps in log output.")
    ] = None,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version and exit."),
    ] = False,
) -> None:
    """Run the bot with long polling, or as a webhook server when a webhook URL is set."""

    flags: dict[str, Any] = {
        "TELEGRAM_BOT_TOKEN": token,
        "TELEGRAM_BOT_URL": url,
        "TELEGRAM_BOT_WEBHOOK_URL": webhook_url,
        "TELEGRAM_BOT_WEBHOOK_SECRET_TOKEN": webhook_secret_token,
        "TELEGRAM_BOT_WEBHOOK_LISTEN_NETWORK": webhook_listen_network,
        "TELEGRAM_BOT_WEBHOOK_LISTEN_ADDRESS": webhook_listen_address,
        "TELEGRAM_BOT_WEBHOOK_LISTEN_OWNER": webhook_listen_owner,
        "TELEGRAM_BOT_WEBHOOK_LISTEN_GROUP": webhook_listen_group,
        "TELEGRAM_BOT_WEBHOOK_LISTEN_MODE": webhook_listen_mode,
        "LOG_LEVEL": log_level,
        "LOG_NO_COLOR": log_no_color,
        "LOG_NO_TIME": log_no_time,
    }
    overrides = {key: value for key, value in flags.items() if value is not None}

    try:
        settings = load_settings(overrides)
    except ValidationError as exc:
        if any(error["loc"] == ("TELEGRAM_BOT_TOKEN",) for error in exc.errors()):
            typer.echo(_MISSING_TOKEN_MESSAGE, err=True)
        else:
            typer.echo(f"Invalid configuration:\n{exc}", err=True)
        raise typer.Exit(code=1) from exc

    configure_logging(settings)

    try:
        asyncio.run(run(settings))
    except StartupError as exc:
        LOGGER.error("%s", exc)
        raise typer.Exit(code=1) from exc


def main() -> None:
    """Console script entrypoint."""

    app()


if __name__ == "__main__":
    main()
