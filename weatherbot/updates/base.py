"""
Common interface of the update sources.
"""

from abc import ABC, abstractmethod
from typing import AsyncIterator

from .events import InboundEvent


class UpdateSource(ABC):
    """
    Produces the ordered sequence of inbound events.

    Both the webhook and the long-polling source implement this, so the
    dispatch loop does not know which transport delivers the updates.
    """

    async def start(self) -> None:
        """Prepare the transport (register or remove the webhook)."""

    async def stop(self) -> None:
        """End the sequence; events() finishes after pending events."""

    @abstractmethod
    def events(self) -> AsyncIterator[InboundEvent]:
        """Iterate over events until the source ends."""
