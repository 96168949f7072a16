"""
Long-polling update source.
Pulls updates with getUpdates; the call itself blocks until data or timeout,
so no local buffering is needed.
"""

import asyncio
import logging
from datetime import timedelta
from typing import AsyncIterator, Awaitable, Callable

from telegram import Bot, Update
from telegram.error import NetworkError, RetryAfter, TelegramError

from .base import UpdateSource
from .events import InboundEvent

logger = logging.getLogger(__name__)

DEFAULT_POLL_TIMEOUT = 60
RECONNECT_DELAY_SECONDS = 5.0


class PollingSource(UpdateSource):
    """Fetches updates from Telegram in a loop."""

    def __init__(
        self,
        bot: Bot,
        timeout: int = DEFAULT_POLL_TIMEOUT,
        reconnect_delay: float = RECONNECT_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        """
        Initialize polling source.

        Args:
            bot: Telegram bot
            timeout: Long-poll timeout passed to getUpdates, in seconds
            reconnect_delay: Pause after a network error before polling again
            sleep: Coroutine used for the pause (replaceable in tests)
        """
        self.bot = bot
        self.timeout = timeout
        self.reconnect_delay = reconnect_delay
        self._sleep = sleep
        self._offset = 0
        self._running = True

    async def start(self) -> None:
        """getUpdates is refused while a webhook is set, so drop any leftover one."""
        await self.bot.delete_webhook()
        logger.info(f"Long polling started (timeout {self.timeout}s)")

    async def stop(self) -> None:
        self._running = False

    async def events(self) -> AsyncIterator[InboundEvent]:
        while self._running:
            try:
                updates = await self.bot.get_updates(
                    offset=self._offset,
                    timeout=self.timeout,
                    allowed_updates=[Update.MESSAGE],
                )
            except RetryAfter as e:
                delay = self._flood_delay(e)
                logger.warning(f"Flood control on getUpdates, retrying after {delay:g}s")
                await self._sleep(delay)
                continue
            except NetworkError as e:
                logger.warning(f"getUpdates failed, reconnecting: {e}")
                await self._sleep(self.reconnect_delay)
                continue
            except TelegramError as e:
                # Invalid token, conflict with another poller, forbidden
                logger.error(f"Polling stopped on unrecoverable error: {e}")
                return

            for update in updates:
                self._offset = update.update_id + 1
                event = InboundEvent.from_update(update)
                if event is not None:
                    yield event

    def _flood_delay(self, error: RetryAfter) -> float:
        """Seconds to wait before the next getUpdates, never less than the reconnect pause."""
        retry_after = error.retry_after
        # Newer library releases report a timedelta
        if isinstance(retry_after, timedelta):
            retry_after = retry_after.total_seconds()
        return max(float(retry_after), self.reconnect_delay)
