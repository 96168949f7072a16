"""
Data structures exchanged with the upstream weather and exchange services.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any


class PayloadError(ValueError):
    """Upstream body is valid JSON but not the expected shape."""


def _require(data: Any, key: str) -> Any:
    if not isinstance(data, dict):
        raise PayloadError(f"expected a JSON object, got {type(data).__name__}")
    if key not in data:
        raise PayloadError(f"missing field '{key}'")
    return data[key]


def _number(data: Dict[str, Any], key: str) -> float:
    value = _require(data, key)
    # bool is an int subclass; JSON true is not a temperature
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PayloadError(f"field '{key}' must be a number")
    try:
        result = float(value)
    except OverflowError as e:
        raise PayloadError(f"field '{key}' is out of range") from e
    # json accepts NaN and Infinity literals
    if not math.isfinite(result):
        raise PayloadError(f"field '{key}' must be finite")
    return result


def _integer(data: Dict[str, Any], key: str) -> int:
    value = _number(data, key)
    if not value.is_integer():
        raise PayloadError(f"field '{key}' must be an integer")
    return int(value)


def _text(data: Dict[str, Any], key: str) -> str:
    value = _require(data, key)
    if not isinstance(value, str):
        raise PayloadError(f"field '{key}' must be a string")
    return value


@dataclass(frozen=True)
class UpstreamRequest:
    """
    One logical call to an upstream service.

    Attributes:
        url: Service endpoint, without query string parameters
        params: Free-form query parameters (escaped when the URL is built)
        user_id: Caller identifier, sent as the X-User-ID header
        method: "GET" (query string) or "POST" (same params as JSON body)
    """
    url: str
    params: Dict[str, str] = field(default_factory=dict)
    user_id: int = 0
    method: str = "GET"

    @property
    def headers(self) -> Dict[str, str]:
        return {"X-User-ID": str(self.user_id)}


@dataclass(frozen=True)
class WeatherReport:
    """
    Current weather as returned by the weather service.

    Example payload:
        {"city": "Paris", "temp_celsius": 18.5, "feels_like": 17.0,
         "humidity": 60, "condition": "Clear"}
    """
    city: str
    temp_celsius: float
    feels_like: float
    humidity: int
    condition: str

    @classmethod
    def from_payload(cls, data: Any) -> "WeatherReport":
        return cls(
            city=_text(data, "city"),
            temp_celsius=_number(data, "temp_celsius"),
            feels_like=_number(data, "feels_like"),
            humidity=_integer(data, "humidity"),
            condition=_text(data, "condition"),
        )


@dataclass(frozen=True)
class ExchangeRate:
    """
    Currency pair quote as returned by the exchange service.

    Example payload:
        {"base": "USD", "target": "RUB", "rate": 92.1234,
         "updated": "2024-05-01 12:00"}
    """
    base: str
    target: str
    rate: float
    updated: str

    @classmethod
    def from_payload(cls, data: Any) -> "ExchangeRate":
        return cls(
            base=_text(data, "base"),
            target=_text(data, "target"),
            rate=_number(data, "rate"),
            updated=_text(data, "updated"),
        )


class FetchErrorKind(str, Enum):
    UNAVAILABLE = "unavailable"
    UPSTREAM_STATUS = "upstream_status"
    DECODE_FAILURE = "decode_failure"


@dataclass(frozen=True)
class FetchError:
    """
    Classified failure of a fetch after all attempts were used.

    Attributes:
        kind: Failure category, decided by the last attempt
        attempts: Number of attempts made
        status: HTTP status for UPSTREAM_STATUS, otherwise None
        detail: Text of the last underlying error, for logs
    """
    kind: FetchErrorKind
    attempts: int
    status: Optional[int] = None
    detail: str = ""
