"""
Command routing.
Turns one inbound event into reply text, calling the upstream services.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional

from ..upstream import UpstreamClient, UserServiceClient, FetchError
from ..updates import InboundEvent
from .templates import MessageTemplates

logger = logging.getLogger(__name__)


@dataclass
class OutboundReply:
    """Reply addressed to a chat. The router only fills in text."""
    chat_id: int
    text: str = ""


class CommandRouter:
    """
    Dispatches commands and free text.

    Commands:
        /start, /help          static replies
        /weather <city>        weather lookup
        /exchange <base> <to>  exchange rate lookup
        /auth                  registration with the user service
    Anything that is not a command is treated as a city name.
    """

    def __init__(
        self,
        upstream: UpstreamClient,
        weather_url: str,
        exchange_url: str = "",
        users: Optional[UserServiceClient] = None,
        weather_method: str = "GET"
    ):
        """
        Initialize command router.

        Args:
            upstream: Client for the weather and exchange services
            weather_url: Weather service endpoint
            exchange_url: Exchange service endpoint, empty if not deployed
            users: User service client, None if not deployed
            weather_method: GET or POST for the weather service
        """
        self.upstream = upstream
        self.weather_url = weather_url
        self.exchange_url = exchange_url
        self.users = users
        self.weather_method = weather_method
        self._commands: Dict[str, Callable[[InboundEvent, OutboundReply], Awaitable[None]]] = {
            "start": self.start_command,
            "help": self.help_command,
            "auth": self.auth_command,
            "weather": self.weather_command,
            "exchange": self.exchange_command,
        }

    async def route(self, event: InboundEvent, reply: OutboundReply) -> None:
        """Fill reply.text for the event."""
        if event.is_command:
            handler = self._commands.get(event.command)
            if handler is None:
                reply.text = MessageTemplates.UNKNOWN_COMMAND
                return
            await handler(event, reply)
        else:
            await self.text_message(event, reply)

    async def start_command(self, event: InboundEvent, reply: OutboundReply) -> None:
        reply.text = MessageTemplates.WELCOME
        logger.info(f"User {event.user_id} started bot in chat {event.chat_id}")

    async def help_command(self, event: InboundEvent, reply: OutboundReply) -> None:
        reply.text = MessageTemplates.HELP

    async def auth_command(self, event: InboundEvent, reply: OutboundReply) -> None:
        """
        Handle /auth command.
        Answers right away; registration outcome only shows up in the logs.
        """
        reply.text = MessageTemplates.AUTH_THANKS

        if self.users is None:
            logger.warning(f"USER_SERVICE_URL is not set, user {event.user_id} not registered")
            return

        await self.users.register(
            user_id=event.user_id,
            username=event.username,
            first_name=event.first_name,
            last_name=event.last_name,
        )

    async def weather_command(self, event: InboundEvent, reply: OutboundReply) -> None:
        """Handle /weather <city>."""
        if not event.args:
            reply.text = MessageTemplates.CITY_REQUIRED
            return
        await self._send_weather(event, event.args, reply)

    async def exchange_command(self, event: InboundEvent, reply: OutboundReply) -> None:
        """Handle /exchange <base> <target>."""
        parts = event.args.split()
        if len(parts) != 2:
            reply.text = MessageTemplates.EXCHANGE_USAGE
            return

        if not self.exchange_url:
            reply.text = MessageTemplates.EXCHANGE_NOT_CONFIGURED
            return

        base, target = parts
        result = await self.upstream.get_exchange_rate(
            self.exchange_url, base, target, event.user_id
        )
        if isinstance(result, FetchError):
            reply.text = MessageTemplates.format_exchange_error(result)
        else:
            reply.text = MessageTemplates.format_exchange(result)

    async def text_message(self, event: InboundEvent, reply: OutboundReply) -> None:
        """Free text is a city name."""
        city = event.text.strip()
        if not city:
            reply.text = MessageTemplates.CITY_PROMPT
            return
        await self._send_weather(event, city, reply)

    async def _send_weather(self, event: InboundEvent, city: str, reply: OutboundReply) -> None:
        result = await self.upstream.get_weather(
            self.weather_url, city, event.user_id, method=self.weather_method
        )
        if isinstance(result, FetchError):
            reply.text = MessageTemplates.format_weather_error(result)
        else:
            reply.text = MessageTemplates.format_weather(result)
