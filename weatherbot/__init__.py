"""
Telegram Weather Relay Bot
==========================
Relays chat messages to a weather (and currency exchange) lookup service
and answers with a formatted reply.
"""

__version__ = "1.0.0"
__author__ = "Weather Relay Bot"
