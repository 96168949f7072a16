"""
Dispatch loop.
Consumes inbound events one at a time and sends one reply per event.
"""

import logging

from telegram import Bot
from telegram.error import TelegramError

from .handlers import CommandRouter, OutboundReply, MessageTemplates
from .updates import UpdateSource, InboundEvent

logger = logging.getLogger(__name__)


class Dispatcher:
    """
    Sequential consumer of an update source.

    Only one event is routed at a time, so the router and upstream client
    never run concurrently with themselves.
    """

    def __init__(self, source: UpdateSource, router: CommandRouter, bot: Bot):
        """
        Initialize dispatcher.

        Args:
            source: Where events come from
            router: Produces reply text
            bot: Telegram bot used to send replies
        """
        self.source = source
        self.router = router
        self.bot = bot
        self.handled = 0

    async def run(self) -> None:
        """Process events until the source ends."""
        logger.info("Dispatcher started, waiting for messages")
        async for event in self.source.events():
            await self.handle(event)
        logger.info(f"Update source ended after {self.handled} events")

    async def handle(self, event: InboundEvent) -> None:
        """Route one event and send its reply. Never raises for a single bad event."""
        reply = OutboundReply(chat_id=event.chat_id)

        try:
            await self.router.route(event, reply)
        except Exception as e:
            logger.exception(f"Error routing update {event.update_id}: {e}")
            reply.text = MessageTemplates.INTERNAL_ERROR

        await self.send(reply)
        self.handled += 1

    async def send(self, reply: OutboundReply) -> None:
        """Send without retry; failures are only logged."""
        try:
            await self.bot.send_message(chat_id=reply.chat_id, text=reply.text)
        except TelegramError as e:
            logger.warning(f"Failed to send reply to chat {reply.chat_id}: {e}")
