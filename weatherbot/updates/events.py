"""
Inbound chat events.
A normalized, immutable view of a Telegram update carrying a message.
"""

from dataclasses import dataclass
from typing import Optional

from telegram import Update, MessageEntity


@dataclass(frozen=True)
class InboundEvent:
    """
    One chat message received from Telegram.

    Attributes:
        update_id: Telegram update identifier
        chat_id: Chat to answer in
        user_id: Sender id, 0 when Telegram does not report a sender
        text: Raw message text ("" for messages without text)
        command: Command name without "/" and "@bot" suffix, None for free text
            Example: "weather" for "/weather@MyBot Paris"
        args: Text following the command, stripped
            Example: "Paris"
    """
    update_id: int
    chat_id: int
    user_id: int = 0
    text: str = ""
    command: Optional[str] = None
    args: str = ""
    username: str = ""
    first_name: str = ""
    last_name: str = ""

    @property
    def is_command(self) -> bool:
        return self.command is not None

    @classmethod
    def from_update(cls, update: Update) -> Optional["InboundEvent"]:
        """
        Build an event from a Telegram update.

        Returns:
            InboundEvent, or None when the update carries no message
            (edits, callback queries, membership changes, ...)
        """
        message = update.message
        if message is None:
            return None

        text = message.text or ""
        command = None
        args = ""

        # Telegram marks commands with a bot_command entity at offset 0
        entities = message.parse_entities([MessageEntity.BOT_COMMAND])
        for entity, value in entities.items():
            if entity.offset == 0:
                command = value[1:].split("@", 1)[0]
                args = text[len(value):].strip()
                break

        user = message.from_user
        return cls(
            update_id=update.update_id,
            chat_id=message.chat.id,
            user_id=user.id if user else 0,
            text=text,
            command=command,
            args=args,
            username=(user.username or "") if user else "",
            first_name=(user.first_name or "") if user else "",
            last_name=(user.last_name or "") if user else "",
        )
