"""Tests for building inbound events from Telegram updates."""

from telegram import Update

from weatherbot.updates import InboundEvent


def _event(data):
    return InboundEvent.from_update(Update.de_json(data, None))


class TestFromUpdate:

    def test_free_text(self, make_update):
        event = _event(make_update(update_id=5, text="  Paris ", chat_id=100, user_id=9))
        assert event.update_id == 5
        assert event.chat_id == 100
        assert event.user_id == 9
        assert event.text == "  Paris "
        assert event.command is None
        assert not event.is_command

    def test_command_with_arguments(self, make_update):
        event = _event(make_update(text="/weather New York"))
        assert event.command == "weather"
        assert event.args == "New York"
        assert event.is_command

    def test_command_without_arguments(self, make_update):
        event = _event(make_update(text="/weather"))
        assert event.command == "weather"
        assert event.args == ""

    def test_bot_mention_stripped(self, make_update):
        event = _event(make_update(text="/exchange@WeatherBot USD RUB"))
        assert event.command == "exchange"
        assert event.args == "USD RUB"

    def test_command_not_at_start_is_text(self, make_update):
        data = make_update(text="what about /weather")
        data["message"]["entities"] = [{"type": "bot_command", "offset": 11, "length": 8}]
        event = _event(data)
        assert event.command is None

    def test_slash_without_entity_is_text(self, make_update):
        data = make_update(text="/weather Paris")
        del data["message"]["entities"]
        assert _event(data).command is None

    def test_sender_details(self, make_update):
        event = _event(make_update(text="/auth"))
        assert event.username == "ann"
        assert event.first_name == "Ann"
        assert event.last_name == "Smith"

    def test_message_without_text(self, make_update):
        event = _event(make_update(text=None))
        assert event.text == ""
        assert event.command is None

    def test_missing_sender(self, make_update):
        data = make_update()
        del data["message"]["from"]
        event = _event(data)
        assert event.user_id == 0
        assert event.username == ""

    def test_update_without_message_is_skipped(self):
        assert _event({"update_id": 3}) is None
