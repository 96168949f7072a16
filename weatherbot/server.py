"""
HTTP server: health check and, in webhook mode, the update endpoint.
"""

from typing import Optional

from aiohttp import web

from .updates import WebhookSource

HEALTH_TEXT = "Weather bot is running"


async def health(request: web.Request) -> web.Response:
    return web.Response(text=HEALTH_TEXT)


def create_app(webhook: Optional[WebhookSource] = None) -> web.Application:
    """Build the aiohttp application served on PORT."""
    app = web.Application()
    app.router.add_get("/", health)
    if webhook is not None:
        webhook.register(app)
    return app
