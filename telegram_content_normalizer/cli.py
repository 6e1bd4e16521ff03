from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, List, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from telethon import TelegramClient

from .config import AppConfig, build_app_config
from .entities import decode_formatted_text
from .filters import filter_history
from .message_info import get_date, get_date_hint, get_location_id
from .models import Markup, MessageContent, MessageEnvelope, PlainText, Segment
from .summary import MessageSummarizer, bracket_service_formatter
from .telethon_adapter import MessagePreview, collect_previews

app = typer.Typer(add_completion=False, help="Normalize Telegram message content for display.")

logger = logging.getLogger(__name__)


@app.callback()
def main_options(
    verbose: bool = typer.Option(
        False,
        "--verbose/--no-verbose",
        help="Show log output, e.g. URLs that could not be decoded.",
    ),
):
    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        logging.getLogger("telethon").setLevel(logging.WARNING)


def _fail(message: str) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=2)


def load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ValueError(f"Cannot read JSON from {path}: {exc}") from exc


def parse_message(payload: Any) -> MessageEnvelope:
    """Accept a full message object or a bare message content object."""
    if not isinstance(payload, dict):
        raise ValueError("expected a JSON object")
    if payload.get("@type") == "message" or "content" in payload:
        return MessageEnvelope.from_dict(payload)

    content = MessageContent.from_dict(payload)
    if content is None:
        raise ValueError("object has no @type")
    return MessageEnvelope(message_id=0, content=content)


def parse_messages(payload: Any) -> List[MessageEnvelope]:
    if isinstance(payload, dict) and isinstance(payload.get("messages"), list):
        payload = payload["messages"]
    if not isinstance(payload, list):
        raise ValueError("expected a JSON array of messages")
    return [MessageEnvelope.from_dict(item) for item in payload if isinstance(item, dict)]


def _load_config(timezone: str, locale: Optional[Path]) -> AppConfig:
    try:
        return build_app_config(timezone_name=timezone, locale_path=locale)
    except ValueError as exc:
        _fail(str(exc))


@app.command()
def decode(
    source: Path = typer.Argument(..., help="JSON file holding a formattedText object."),
):
    """Split formatted text into plain and annotated segments."""
    try:
        payload = load_json(source)
    except ValueError as exc:
        _fail(str(exc))

    segments = decode_formatted_text(payload)
    if segments is None:
        _fail("Input is not a formattedText object with text.")

    print_segments(Console(), segments)


@app.command()
def summarize(
    source: Path = typer.Argument(..., help="JSON file holding a message or message content."),
    ttl: Optional[int] = typer.Option(
        None,
        "--ttl",
        help="Override the self-destruct timer of the message.",
    ),
    locale: Optional[Path] = typer.Option(
        None,
        "--locale",
        help="JSON file with localized strings (key -> text).",
    ),
    timezone: str = typer.Option("UTC", "--timezone", help="IANA timezone for dates."),
):
    """Print the one-line preview of a message."""
    config = _load_config(timezone, locale)
    try:
        message = parse_message(load_json(source))
    except ValueError as exc:
        _fail(str(exc))

    summarizer = MessageSummarizer(
        localize=config.localizer,
        service_formatter=bracket_service_formatter,
    )
    summary = summarizer.summarize(
        message.content,
        ttl=message.ttl if ttl is None else ttl,
        message=message,
    )
    if summary is None:
        _fail("Message has no content.")

    hint = get_date_hint(message, config.timezone)
    typer.echo(f"{hint} {summary}" if hint else summary)


@app.command()
def location(
    source: Path = typer.Argument(..., help="JSON file holding a location or venue message."),
):
    """Print the map tile key of a location or venue message."""
    config = _load_config("UTC", None)
    try:
        message = parse_message(load_json(source))
    except ValueError as exc:
        _fail(str(exc))

    content = message.content
    key = get_location_id(content.location if content else None, config.map_tiles)
    if key is None:
        _fail("Message carries no location.")
    typer.echo(key)


@app.command()
def dedupe(
    result: Path = typer.Argument(..., help="JSON array of freshly fetched messages."),
    history: Path = typer.Argument(..., help="JSON array of messages already held."),
):
    """Print the ids of fetched messages not yet in the history."""
    try:
        fetched = parse_messages(load_json(result))
        held = parse_messages(load_json(history))
    except ValueError as exc:
        _fail(str(exc))

    survivors = filter_history(fetched, held)
    logger.info("Kept %s of %s fetched messages", len(survivors), len(fetched))
    for message in survivors:
        typer.echo(str(message.message_id))


@app.command()
def preview(
    chat: str = typer.Argument(..., help="Chat name, username or id."),
    limit: int = typer.Option(20, "--limit", min=1, help="Number of recent messages."),
    session: Path = typer.Option(
        Path(".data/telegram.session"),
        "--session",
        help="Path of the Telegram session file.",
    ),
    api_id: Optional[int] = typer.Option(
        None,
        "--api-id",
        envvar="TG_API_ID",
        help="Telegram API ID (my.telegram.org).",
    ),
    api_hash: Optional[str] = typer.Option(
        None,
        "--api-hash",
        envvar="TG_API_HASH",
        help="Telegram API hash (my.telegram.org).",
    ),
    locale: Optional[Path] = typer.Option(
        None,
        "--locale",
        help="JSON file with localized strings (key -> text).",
    ),
    timezone: str = typer.Option("UTC", "--timezone", help="IANA timezone for dates."),
):
    """Fetch recent messages of a chat and print their previews."""
    if api_id is None or api_hash is None:
        _fail("api-id and api-hash must be set (option or TG_API_ID/TG_API_HASH).")

    config = _load_config(timezone, locale)
    summarizer = MessageSummarizer(
        localize=config.localizer,
        service_formatter=bracket_service_formatter,
    )
    # Numeric ids must reach Telethon as ints, names as strings.
    target: Any = int(chat) if chat.lstrip("-").isdigit() else chat
    console = Console()
    try:
        previews = asyncio.run(
            run_preview(session, api_id, api_hash, target, summarizer, limit=limit)
        )
    except KeyboardInterrupt:
        console.print("\n[red]Aborted.[/]")
        raise typer.Exit(code=130)

    print_previews(console, previews, config.timezone)


async def run_preview(
    session: Path,
    api_id: int,
    api_hash: str,
    chat: Any,
    summarizer: MessageSummarizer,
    *,
    limit: int = 20,
) -> List[MessagePreview]:
    session.parent.mkdir(parents=True, exist_ok=True)
    async with TelegramClient(str(session), api_id, api_hash) as client:
        return await collect_previews(client, chat, summarizer, limit=limit)


def print_previews(console: Console, previews: List[MessagePreview], timezone: str) -> None:
    table = Table(title="Previews")
    table.add_column("Time")
    table.add_column("Id", justify="right")
    table.add_column("Preview")

    for item in previews:
        table.add_row(
            get_date(item.envelope, timezone) or "",
            str(item.envelope.message_id),
            escape(item.summary or ""),
        )

    console.print(table)


def print_segments(console: Console, segments: List[Segment]) -> None:
    table = Table(title="Segments")
    table.add_column("Kind")
    table.add_column("Text")
    table.add_column("Target")

    for segment in segments:
        if isinstance(segment, PlainText):
            table.add_row("plain", escape(repr(segment.text)), "")
        elif isinstance(segment, Markup):
            table.add_row(
                segment.kind.name.lower(),
                escape(repr(segment.display)),
                escape(segment.target or ""),
            )

    console.print(table)


def main() -> None:
    app()


__all__ = ["app", "main"]
