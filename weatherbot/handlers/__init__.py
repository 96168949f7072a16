"""Chat command handlers."""

from .commands import CommandRouter, OutboundReply
from .templates import MessageTemplates

__all__ = ["CommandRouter", "OutboundReply", "MessageTemplates"]
