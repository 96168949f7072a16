"""Upstream lookup services: weather, exchange rates and user registration."""

from .client import UpstreamClient
from .models import (
    UpstreamRequest,
    WeatherReport,
    ExchangeRate,
    FetchError,
    FetchErrorKind,
    PayloadError,
)
from .users import UserServiceClient

__all__ = [
    "UpstreamClient",
    "UserServiceClient",
    "UpstreamRequest",
    "WeatherReport",
    "ExchangeRate",
    "FetchError",
    "FetchErrorKind",
    "PayloadError",
]
