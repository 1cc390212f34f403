"""
Telegram Bot for pNode Statistics.

Long-polls the Telegram Bot API and answers the ``/pnodes`` command with the
current version breakdown of the network.
"""

import asyncio
import html
from typing import Optional

import httpx
from rich.console import Console
from rich.markup import escape

from .config import Settings, get_settings
from .rpc import RpcClient
from .stats import PodStatsCollector

console = Console()

TELEGRAM_API_URL = "https://api.telegram.org"

PNODES_COMMAND = "pnodes"
PNODES_DESCRIPTION = "Show pNodes stats (versions & total)"

HELP_TEXT = f"""🤖 pNodes Bot

Commands:
/{PNODES_COMMAND} - {PNODES_DESCRIPTION}
/help - This message"""


def normalize_command(text: str) -> str:
    """
    Return the command name of a message, lowercased and without the leading slash.

    Group chats send commands as ``/cmd@BotUserName``; the ``@`` suffix is dropped.
    Returns an empty string for anything that is not a command.
    """
    parts = (text or "").strip().split()
    if not parts or not parts[0].startswith("/"):
        return ""
    return parts[0][1:].split("@", 1)[0].lower()


async def handle_command(text: str, collector: PodStatsCollector) -> Optional[str]:
    """Map an incoming message to its reply text, or None when there is nothing to say."""
    cmd = normalize_command(text)

    if cmd == PNODES_COMMAND:
        return await collector.build_report()
    if cmd in ("start", "help"):
        return HELP_TEXT
    return None


def to_telegram_html(text: str) -> str:
    """Render a reply for Telegram's HTML parse mode; fenced blocks become <pre>."""
    if text.startswith("```") and text.endswith("```") and "\n" in text:
        header, body = text[3:-3].split("\n", 1)
        body = html.escape(body.rstrip("\n"))
        if header:
            return f'<pre><code class="language-{html.escape(header)}">{body}</code></pre>'
        return f"<pre>{body}</pre>"
    return html.escape(text)


class TelegramBot:
    """Minimal Telegram Bot API client that serves the pNodes command."""

    def __init__(
        self,
        bot_token: str,
        collector: PodStatsCollector,
        poll_timeout: int = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.collector = collector
        self.poll_timeout = poll_timeout
        self.base_url = f"{TELEGRAM_API_URL}/bot{bot_token}"
        self.client = httpx.AsyncClient(timeout=poll_timeout + 10, transport=transport)
        self._offset = 0

    async def close(self):
        await self.client.aclose()

    async def _api(self, method: str, **params) -> dict:
        response = await self.client.post(f"{self.base_url}/{method}", json=params)
        data = response.json()
        if not data.get("ok"):
            raise RuntimeError(f"Telegram {method} failed: {data.get('description', response.status_code)}")
        return data

    async def send_message(self, chat_id: int, text: str, parse_mode: str = "HTML") -> bool:
        """Send a message to a chat."""
        try:
            await self._api("sendMessage", chat_id=chat_id, text=text, parse_mode=parse_mode)
            return True
        except Exception as e:
            console.print(f"[red]Failed to send Telegram message: {escape(str(e))}[/red]")
            return False

    async def send_typing(self, chat_id: int):
        try:
            await self._api("sendChatAction", chat_id=chat_id, action="typing")
        except Exception as e:
            console.print(f"[yellow]Failed to send chat action: {escape(str(e))}[/yellow]")

    async def register_commands(self) -> bool:
        """Publish the command list so clients can autocomplete /pnodes."""
        try:
            await self._api(
                "setMyCommands",
                commands=[{"command": PNODES_COMMAND, "description": PNODES_DESCRIPTION}],
            )
        except Exception as e:
            console.print(f"[red]Failed to register commands: {escape(str(e))}[/red]")
            return False
        console.print("[green]Slash command registered.[/green]")
        return True

    async def handle_update(self, update: dict):
        if "message" not in update:
            return

        msg = update["message"]
        chat_id = msg.get("chat", {}).get("id")
        text = msg.get("text", "") or ""
        if chat_id is None:
            return

        if normalize_command(text) == PNODES_COMMAND:
            # building the report takes four round trips
            await self.send_typing(chat_id)

        reply = await handle_command(text, self.collector)
        if reply is not None:
            await self.send_message(chat_id, to_telegram_html(reply))

    async def poll_once(self) -> int:
        """Fetch and handle one batch of updates. Returns the number handled."""
        data = await self._api("getUpdates", offset=self._offset, timeout=self.poll_timeout)
        updates = data.get("result", [])
        for update in updates:
            self._offset = update["update_id"] + 1
            await self.handle_update(update)
        return len(updates)

    async def run(self):
        """Poll for updates until cancelled."""
        me = await self._api("getMe")
        console.print(f"[bold cyan]Logged in as @{escape(str(me['result'].get('username')))}[/bold cyan]")
        await self.register_commands()

        while True:
            try:
                await self.poll_once()
            except Exception as e:
                console.print(f"[red]Poll error: {escape(str(e))}[/red]")
                await asyncio.sleep(5)


async def run_bot(settings: Optional[Settings] = None):
    """Run the Telegram bot against the configured RPC endpoint."""
    settings = settings or get_settings()
    if not settings.telegram_bot_token:
        raise SystemExit("Missing TELEGRAM_BOT_TOKEN in environment")

    rpc = RpcClient(settings.rpc_url, timeout=settings.rpc_timeout_seconds)
    bot = TelegramBot(
        settings.telegram_bot_token,
        PodStatsCollector(rpc),
        poll_timeout=settings.telegram_poll_timeout,
    )
    console.print(f"RPC endpoint: {escape(settings.rpc_url)}")
    try:
        await bot.run()
    finally:
        await bot.close()
        await rpc.close()
