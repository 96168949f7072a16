"""
Reply templates for the bot.
Plain text, no parse mode.
"""

from ..upstream import WeatherReport, ExchangeRate, FetchError, FetchErrorKind


class MessageTemplates:
    """Formatter for every reply the bot sends."""

    WELCOME = "Привет! Я погодный бот. Используй /auth для авторизации"
    HELP = (
        "Я показываю погоду и курсы валют.\n"
        "• /weather <город> - погода в городе\n"
        "• /exchange <база> <цель> - курс валют, например /exchange USD RUB\n"
        "• /auth - регистрация\n"
        "Можно просто написать название города."
    )
    AUTH_THANKS = "Спасибо что зарегистрировались, можешь использовать /weather <город> или /help"
    UNKNOWN_COMMAND = "❌ Неизвестная команда"
    CITY_REQUIRED = "❌ Укажи город после команды /weather"
    CITY_PROMPT = "❌ Пожалуйста, введите город"
    EXCHANGE_USAGE = "❌ Формат: /exchange <база> <цель>\nПример: /exchange USD RUB"
    EXCHANGE_NOT_CONFIGURED = "💹 Курс валют сейчас не подключен."
    INTERNAL_ERROR = "❌ Что-то пошло не так. Попробуйте позже."

    WEATHER_UNAVAILABLE = "🌤 Погода загружается... Попробуйте через 10 секунд."
    WEATHER_DECODE_FAILURE = "❌ Ошибка обработки данных погоды"
    EXCHANGE_UNAVAILABLE = "💹 Курс валют временно недоступен. Попробуйте позже."
    EXCHANGE_DECODE_FAILURE = "❌ Ошибка обработки данных курса"

    @classmethod
    def format_weather(cls, report: WeatherReport) -> str:
        """
        Format current weather.

        Example:
            🌤 Погода в Paris:
            • Температура: 18.5°C
            • Ощущается как: 17.0°C
            • Влажность: 60%
            • Состояние: Clear
        """
        return (
            f"🌤 Погода в {report.city}:\n"
            f"• Температура: {report.temp_celsius:.1f}°C\n"
            f"• Ощущается как: {report.feels_like:.1f}°C\n"
            f"• Влажность: {report.humidity}%\n"
            f"• Состояние: {report.condition}"
        )

    @classmethod
    def format_exchange(cls, rate: ExchangeRate) -> str:
        return (
            f"💵 Курс валют:\n"
            f"• {rate.base} → {rate.target}\n"
            f"• Курс: {rate.rate:.4f}\n"
            f"• Обновлено: {rate.updated}"
        )

    @classmethod
    def format_status_error(cls, status: int) -> str:
        return f"❌ Сервис вернул ошибку: {status}"

    @classmethod
    def format_weather_error(cls, error: FetchError) -> str:
        """User-facing text for a failed weather fetch."""
        if error.kind == FetchErrorKind.UPSTREAM_STATUS:
            return cls.format_status_error(error.status)
        if error.kind == FetchErrorKind.DECODE_FAILURE:
            return cls.WEATHER_DECODE_FAILURE
        return cls.WEATHER_UNAVAILABLE

    @classmethod
    def format_exchange_error(cls, error: FetchError) -> str:
        """User-facing text for a failed exchange fetch."""
        if error.kind == FetchErrorKind.UPSTREAM_STATUS:
            return cls.format_status_error(error.status)
        if error.kind == FetchErrorKind.DECODE_FAILURE:
            return cls.EXCHANGE_DECODE_FAILURE
        return cls.EXCHANGE_UNAVAILABLE
