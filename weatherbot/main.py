"""
Main entry point for the Telegram Weather Relay Bot.
Initializes all components and starts the bot.
"""

import asyncio
import logging
import os
import signal
import sys
from typing import Optional

from aiohttp import web
from telegram import Bot

from .config import Config, ConfigError
from .dispatcher import Dispatcher
from .handlers import CommandRouter
from .server import create_app
from .updates import UpdateSource, UpdateQueue, WebhookSource, PollingSource
from .upstream import UpstreamClient, UserServiceClient

logger = logging.getLogger(__name__)


class WeatherBot:
    """
    Main bot class that coordinates all components.
    """

    def __init__(self):
        """Initialize the bot."""
        self.bot: Optional[Bot] = None
        self.upstream: Optional[UpstreamClient] = None
        self.users: Optional[UserServiceClient] = None
        self.source: Optional[UpdateSource] = None
        self.dispatcher: Optional[Dispatcher] = None
        self.app: Optional[web.Application] = None
        self._runner: Optional[web.AppRunner] = None
        self._dispatch_task: Optional[asyncio.Task] = None
        self._running = False

    async def initialize(self) -> None:
        """
        Initialize all bot components.

        Raises:
            ConfigError: if a mandatory setting is missing or invalid
        """
        config_file = os.getenv("BOT_CONFIG_FILE", "")
        if config_file:
            Config.load_file(config_file)

        Config.setup_logging()
        errors = Config.validate()
        if errors:
            for error in errors:
                logger.error(f"Config error: {error}")
            raise ConfigError("Invalid configuration. Check environment variables or .env.")

        logger.debug("Initializing Weather Bot...")

        self.bot = Bot(Config.BOT_TOKEN)
        await self.bot.initialize()
        logger.info(f"Authorized as @{self.bot.username}")

        self.upstream = UpstreamClient(
            timeout=Config.UPSTREAM_TIMEOUT_SECONDS,
            max_attempts=Config.UPSTREAM_MAX_ATTEMPTS,
            retry_delay=Config.UPSTREAM_RETRY_DELAY_SECONDS,
        )
        if Config.USER_SERVICE_URL:
            self.users = UserServiceClient(
                Config.USER_SERVICE_URL, timeout=Config.UPSTREAM_TIMEOUT_SECONDS
            )

        router = CommandRouter(
            upstream=self.upstream,
            weather_url=Config.WEATHER_API_URL,
            exchange_url=Config.EXCHANGE_API_URL,
            users=self.users,
            weather_method=Config.WEATHER_API_METHOD,
        )

        webhook = None
        if Config.is_webhook_mode():
            webhook = WebhookSource(
                bot=self.bot,
                queue=UpdateQueue(Config.UPDATE_QUEUE_SIZE),
                webhook_url=Config.WEBHOOK_URL,
                path=Config.WEBHOOK_PATH,
                secret=Config.WEBHOOK_SECRET,
            )
            self.source = webhook
        else:
            self.source = PollingSource(self.bot, timeout=Config.POLL_TIMEOUT_SECONDS)

        self.app = create_app(webhook)
        self.dispatcher = Dispatcher(self.source, router, self.bot)

        logger.debug("Weather Bot initialized successfully")

    async def start(self) -> None:
        """Start serving and block until stopped or the update source ends."""
        if self._running:
            logger.warning("Bot is already running")
            return

        self._running = True
        logger.debug("Starting Weather Bot...")

        self._runner = web.AppRunner(self.app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, port=Config.PORT)
        await site.start()
        logger.info(f"HTTP server listening on :{Config.PORT}")

        await self.source.start()
        self._dispatch_task = asyncio.create_task(self.dispatcher.run())
        logger.info("Bot is running and waiting for messages")

        # Keep running until stopped
        while self._running and not self._dispatch_task.done():
            await asyncio.sleep(1)

        if self._dispatch_task.done() and not self._dispatch_task.cancelled():
            error = self._dispatch_task.exception()
            if error is not None:
                raise error

    async def stop(self) -> None:
        """Stop the bot gracefully."""
        logger.debug("Stopping Weather Bot...")
        self._running = False

        if self.source:
            await self.source.stop()

        # An in-flight getUpdates or upstream attempt is abandoned here
        if self._dispatch_task and not self._dispatch_task.done():
            self._dispatch_task.cancel()
            try:
                await self._dispatch_task
            except asyncio.CancelledError:
                pass

        if self._runner:
            await self._runner.cleanup()
            self._runner = None

        if self.upstream:
            await self.upstream.close()
        if self.users:
            await self.users.close()

        if self.bot:
            await self.bot.shutdown()

        logger.debug("Weather Bot stopped")


async def main() -> None:
    """Main entry point."""
    bot = WeatherBot()

    # Setup signal handlers for graceful shutdown
    loop = asyncio.get_running_loop()

    def signal_handler():
        logger.debug("Received shutdown signal")
        asyncio.create_task(bot.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler)

    try:
        await bot.initialize()
        await bot.start()
    except ConfigError:
        raise
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        raise
    finally:
        await bot.stop()


def run() -> None:
    """Run the bot (blocking). Exits with status 1 on a configuration error."""
    try:
        asyncio.run(main())
    except ConfigError as e:
        logger.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
