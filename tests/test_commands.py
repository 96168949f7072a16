"""Tests for command routing."""

from unittest.mock import AsyncMock

import pytest

from weatherbot.handlers import CommandRouter, OutboundReply, MessageTemplates
from weatherbot.upstream import WeatherReport, ExchangeRate, FetchError, FetchErrorKind


WEATHER_URL = "http://weather/api"
EXCHANGE_URL = "http://exchange/api"
PARIS = WeatherReport("Paris", 18.5, 17.0, 60, "Clear")


def _router(weather=PARIS, exchange=None, users=None, exchange_url=EXCHANGE_URL, method="GET"):
    upstream = AsyncMock()
    upstream.get_weather.return_value = weather
    upstream.get_exchange_rate.return_value = exchange
    router = CommandRouter(
        upstream=upstream,
        weather_url=WEATHER_URL,
        exchange_url=exchange_url,
        users=users,
        weather_method=method,
    )
    return router, upstream


async def _route(router, event):
    reply = OutboundReply(chat_id=event.chat_id)
    await router.route(event, reply)
    return reply


class TestStaticCommands:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("command,text", [
        ("start", MessageTemplates.WELCOME),
        ("help", MessageTemplates.HELP),
        ("forecast", MessageTemplates.UNKNOWN_COMMAND),
    ])
    async def test_static_replies(self, make_event, command, text):
        router, upstream = _router()
        reply = await _route(router, make_event(text=f"/{command}", command=command))
        assert reply.text == text
        assert reply.chat_id == 42
        upstream.get_weather.assert_not_awaited()


class TestWeather:

    @pytest.mark.asyncio
    async def test_weather_command(self, make_event):
        router, upstream = _router()
        reply = await _route(router, make_event(text="/weather Paris", command="weather", args="Paris"))

        upstream.get_weather.assert_awaited_once_with(WEATHER_URL, "Paris", 7, method="GET")
        assert reply.text == MessageTemplates.format_weather(PARIS)

    @pytest.mark.asyncio
    async def test_weather_without_city_never_fetches(self, make_event):
        router, upstream = _router()
        reply = await _route(router, make_event(text="/weather", command="weather", args=""))

        assert reply.text == MessageTemplates.CITY_REQUIRED
        upstream.get_weather.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_free_text_is_city(self, make_event):
        router, upstream = _router(method="POST")
        reply = await _route(router, make_event(text="  Нью-Йорк  "))

        upstream.get_weather.assert_awaited_once_with(WEATHER_URL, "Нью-Йорк", 7, method="POST")
        assert "Paris" in reply.text

    @pytest.mark.asyncio
    async def test_blank_text_prompts_for_city(self, make_event):
        router, upstream = _router()
        reply = await _route(router, make_event(text="   "))

        assert reply.text == MessageTemplates.CITY_PROMPT
        upstream.get_weather.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_command_wins_over_text(self, make_event):
        # Text looks like a city but the platform marked a command
        router, upstream = _router()
        reply = await _route(router, make_event(text="/paris", command="paris"))

        assert reply.text == MessageTemplates.UNKNOWN_COMMAND
        upstream.get_weather.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error,expected", [
        (FetchError(FetchErrorKind.UNAVAILABLE, 3), MessageTemplates.WEATHER_UNAVAILABLE),
        (FetchError(FetchErrorKind.DECODE_FAILURE, 3), MessageTemplates.WEATHER_DECODE_FAILURE),
        (FetchError(FetchErrorKind.UPSTREAM_STATUS, 3, status=502), "❌ Сервис вернул ошибку: 502"),
    ])
    async def test_fetch_errors_become_text(self, make_event, error, expected):
        router, _ = _router(weather=error)
        reply = await _route(router, make_event(text="Paris"))
        assert reply.text == expected


class TestExchange:

    @pytest.mark.asyncio
    async def test_exchange_command(self, make_event):
        rate = ExchangeRate("USD", "RUB", 92.1234, "2024-05-01")
        router, upstream = _router(exchange=rate)
        reply = await _route(router, make_event(text="/exchange USD RUB", command="exchange", args="USD  RUB"))

        upstream.get_exchange_rate.assert_awaited_once_with(EXCHANGE_URL, "USD", "RUB", 7)
        assert reply.text == MessageTemplates.format_exchange(rate)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("args", ["", "USD", "USD RUB EUR"])
    async def test_exchange_needs_two_codes(self, make_event, args):
        router, upstream = _router()
        reply = await _route(router, make_event(text=f"/exchange {args}", command="exchange", args=args))

        assert reply.text == MessageTemplates.EXCHANGE_USAGE
        upstream.get_exchange_rate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_exchange_not_configured(self, make_event):
        router, upstream = _router(exchange_url="")
        reply = await _route(router, make_event(text="/exchange USD RUB", command="exchange", args="USD RUB"))

        assert reply.text == MessageTemplates.EXCHANGE_NOT_CONFIGURED
        upstream.get_exchange_rate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_exchange_unavailable(self, make_event):
        router, _ = _router(exchange=FetchError(FetchErrorKind.UNAVAILABLE, 3))
        reply = await _route(router, make_event(text="/exchange USD RUB", command="exchange", args="USD RUB"))
        assert reply.text == MessageTemplates.EXCHANGE_UNAVAILABLE


class TestAuth:

    @pytest.mark.asyncio
    async def test_registers_user(self, make_event):
        users = AsyncMock()
        router, _ = _router(users=users)
        event = make_event(
            text="/auth", command="auth", username="ann", first_name="Ann", last_name="Smith"
        )
        reply = await _route(router, event)

        assert reply.text == MessageTemplates.AUTH_THANKS
        users.register.assert_awaited_once_with(
            user_id=7, username="ann", first_name="Ann", last_name="Smith"
        )

    @pytest.mark.asyncio
    async def test_reply_even_if_registration_fails(self, make_event):
        users = AsyncMock()
        users.register.return_value = False
        router, _ = _router(users=users)
        reply = await _route(router, make_event(text="/auth", command="auth"))
        assert reply.text == MessageTemplates.AUTH_THANKS

    @pytest.mark.asyncio
    async def test_without_user_service(self, make_event):
        router, _ = _router(users=None)
        reply = await _route(router, make_event(text="/auth", command="auth"))
        assert reply.text == MessageTemplates.AUTH_THANKS
