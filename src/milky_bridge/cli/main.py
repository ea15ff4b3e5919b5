"""
Milky bridge CLI — `milky` command.

Commands:
  milky whoami                 Show the logged-in account
  milky listen                 Print events from the stream until Ctrl+C
  milky send <channel> <text>  Send a text message
"""

import asyncio
import json
from pathlib import Path
from typing import Optional

try:
    import click
    from rich.console import Console
except ImportError:
    raise SystemExit("CLI requires extras: pip install milky-bridge[cli]")

from milky_bridge.bot import MilkyBot
from milky_bridge.config import BotConfig
from milky_bridge.errors import MilkyError
from milky_bridge.models.universal import HostEvent, RawEvent

console = Console()
CONFIG_FILE = Path.home() / ".milky" / "config.json"


def _load_config() -> dict:
    try:
        return json.loads(CONFIG_FILE.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _save_config(cfg: dict) -> None:
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_FILE.write_text(json.dumps(cfg, indent=2))


def _get_bot(ctx: click.Context) -> MilkyBot:
    opts = ctx.obj or {}
    cfg = _load_config()
    config = BotConfig.from_env(
        endpoint=opts.get("endpoint") or cfg.get("endpoint"),
        token=opts.get("token") or cfg.get("token"),
    )
    return MilkyBot(config)


def _run(coro):
    return asyncio.run(coro)


@click.group()
@click.version_option("0.1.0")
@click.option("--endpoint", default=None, help="Protocol server URL, e.g. http://127.0.0.1:3000/")
@click.option("--token", default=None, help="Access token")
@click.pass_context
def main(ctx: click.Context, endpoint: Optional[str], token: Optional[str]):
    """Milky bridge CLI."""
    ctx.obj = {"endpoint": endpoint, "token": token}


@main.command("config")
@click.option("--endpoint", required=True)
@click.option("--token", default="")
def config_cmd(endpoint: str, token: str):
    """Save endpoint and token to ~/.milky/config.json."""
    _save_config({**_load_config(), "endpoint": endpoint, "token": token})
    console.print(f"[dim]Saved to {CONFIG_FILE}[/dim]")


@main.command("whoami")
@click.pass_context
def whoami(ctx: click.Context):
    """Show the logged-in account."""

    async def _whoami():
        bot = _get_bot(ctx)
        try:
            login = await bot.get_login()
        finally:
            await bot.close()
        console.print(f"[green]{login.user.name}[/green] ({login.self_id})")

    try:
        _run(_whoami())
    except MilkyError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)


def _print_event(event: HostEvent, raw: bool) -> None:
    if isinstance(event, RawEvent):
        if raw:
            console.print(f"[dim]{event.type}[/dim] {json.dumps(event.data, ensure_ascii=False)}")
        return
    where = event.channel_id or "-"
    who = event.user_id or "-"
    console.print(f"[cyan]{event.type}[/cyan] [{where}] {who}: {event.content}")


@main.command("listen")
@click.option("--raw", is_flag=True, help="Also print raw wire events")
@click.pass_context
def listen(ctx: click.Context, raw: bool):
    """Print events until interrupted."""

    async def _listen():
        bot = _get_bot(ctx)
        bot.add_event_handler(lambda event: _print_event(event, raw))
        try:
            await bot.start()
        finally:
            await bot.close()

    try:
        _run(_listen())
    except KeyboardInterrupt:
        pass
    except MilkyError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)


@main.command("send")
@click.argument("channel_id")
@click.argument("text")
@click.pass_context
def send_cmd(ctx: click.Context, channel_id: str, text: str):
    """Send a text message to CHANNEL_ID."""

    async def _send():
        bot = _get_bot(ctx)
        try:
            return await bot.send_message(channel_id, text)
        finally:
            await bot.close()

    try:
        sent = _run(_send())
    except MilkyError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)
    for message in sent:
        console.print(f"[green]Sent[/green] message {message.id}")


if __name__ == "__main__":
    main()
