"""Update sources: webhook (push) and long polling (pull)."""

from .base import UpdateSource
from .events import InboundEvent
from .polling import PollingSource
from .queue import UpdateQueue
from .webhook import WebhookSource, MalformedPayload

__all__ = [
    "UpdateSource",
    "InboundEvent",
    "UpdateQueue",
    "WebhookSource",
    "PollingSource",
    "MalformedPayload",
]
