"""
Webhook update source.
Telegram posts updates to our HTTP endpoint; they are decoded and shed into
a bounded queue so the response goes out without waiting for the bot.
"""

import hmac
import json
import logging
from typing import AsyncIterator, List, Optional

from aiohttp import web
from telegram import Bot, Update

from .base import UpdateSource
from .events import InboundEvent
from .queue import UpdateQueue

logger = logging.getLogger(__name__)

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


class MalformedPayload(ValueError):
    """Webhook body is not a JSON update or list of updates."""


class WebhookSource(UpdateSource):
    """Receives pushed updates on POST <path>."""

    def __init__(
        self,
        bot: Optional[Bot],
        queue: UpdateQueue,
        webhook_url: str = "",
        path: str = "/bot",
        secret: str = ""
    ):
        """
        Initialize webhook source.

        Args:
            bot: Telegram bot, used to register the webhook and bind decoded updates
            queue: Bounded queue shared with the dispatch loop
            webhook_url: Public URL Telegram should post to
            path: Local route of the endpoint
            secret: Expected X-Telegram-Bot-Api-Secret-Token, empty to skip the check
        """
        self.bot = bot
        self.queue = queue
        self.webhook_url = webhook_url
        self.path = path
        self.secret = secret

    def register(self, app: web.Application) -> None:
        """Add the webhook route. Other methods on the path get 405 from aiohttp."""
        app.router.add_post(self.path, self.handle_update)

    async def start(self) -> None:
        """Tell Telegram where to deliver updates."""
        await self.bot.set_webhook(
            url=self.webhook_url,
            secret_token=self.secret or None,
            allowed_updates=[Update.MESSAGE],
        )
        logger.info(f"Webhook registered: {self.webhook_url}")

    async def stop(self) -> None:
        self.queue.close()

    async def events(self) -> AsyncIterator[InboundEvent]:
        while True:
            event = await self.queue.get()
            if event is None:
                return
            yield event

    def _decode(self, body: bytes) -> List[Optional[InboundEvent]]:
        """
        Decode a webhook body into events.

        Raises:
            MalformedPayload: if the body or any update in it cannot be decoded
        """
        try:
            data = json.loads(body)
        except ValueError as e:
            raise MalformedPayload(f"invalid JSON: {e}") from e

        # Telegram posts one update per request; batches are accepted too
        items = [data] if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise MalformedPayload(f"expected an update or a list, got {type(data).__name__}")

        events = []
        for item in items:
            if not isinstance(item, dict):
                raise MalformedPayload(f"update must be an object, got {type(item).__name__}")
            try:
                update = Update.de_json(item, self.bot)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                raise MalformedPayload(f"invalid update: {e!r}") from e
            events.append(InboundEvent.from_update(update))
        return events

    async def handle_update(self, request: web.Request) -> web.Response:
        """POST handler: 200 once every update is queued or dropped, 400 on bad input."""
        if self.secret:
            received = request.headers.get(SECRET_HEADER, "")
            if not hmac.compare_digest(received.encode(), self.secret.encode()):
                logger.warning(f"Rejected webhook call from {request.remote}: bad secret token")
                return web.Response(status=403, text="forbidden")

        body = await request.read()
        try:
            events = self._decode(body)
        except MalformedPayload as e:
            logger.warning(f"Malformed webhook payload: {e}")
            return web.Response(status=400, text="bad request")

        for event in events:
            if event is None:
                # Updates without a message are never answered
                continue
            if self.queue.closed:
                logger.warning(f"Shutting down, dropped update {event.update_id}")
                continue
            if not self.queue.offer(event):
                logger.error(
                    f"Update queue full ({self.queue.capacity}), dropped update {event.update_id}"
                )

        return web.Response(status=200, text="ok")
