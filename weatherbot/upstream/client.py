"""
Upstream HTTP client with bounded retries.
Fetches weather and exchange data from the configured lookup services.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Union

import aiohttp

from .models import (
    UpstreamRequest,
    WeatherReport,
    ExchangeRate,
    FetchError,
    FetchErrorKind,
)
from .retry import AttemptOutcome, Attempting, Succeeded, Failed, advance

logger = logging.getLogger(__name__)

Decoder = Callable[[Any], Any]


class UpstreamClient:
    """Client for the weather and exchange lookup services."""

    def __init__(
        self,
        timeout: float = 15.0,
        max_attempts: int = 3,
        retry_delay: float = 3.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        """
        Initialize upstream client.

        Args:
            timeout: Per-attempt timeout in seconds
            max_attempts: Attempts per fetch, including the first one
            retry_delay: Fixed pause between failed attempts in seconds
            sleep: Coroutine used for the pause (replaceable in tests)
        """
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self._sleep = sleep
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def get_weather(
        self,
        url: str,
        city: str,
        user_id: int,
        method: str = "GET"
    ) -> Union[WeatherReport, FetchError]:
        """
        Get current weather for a city.

        Args:
            url: Weather service endpoint
            city: Free-form city name, any script
            user_id: Telegram id of the asking user
            method: GET, or POST to send the city as a JSON body

        Returns:
            WeatherReport, or FetchError when every attempt failed
        """
        request = UpstreamRequest(url=url, params={"city": city}, user_id=user_id, method=method)
        return await self.fetch(request, WeatherReport.from_payload)

    async def get_exchange_rate(
        self,
        url: str,
        base: str,
        target: str,
        user_id: int
    ) -> Union[ExchangeRate, FetchError]:
        """Get the exchange rate for a currency pair."""
        request = UpstreamRequest(url=url, params={"base": base, "to": target}, user_id=user_id)
        return await self.fetch(request, ExchangeRate.from_payload)

    async def fetch(self, request: UpstreamRequest, decoder: Decoder) -> Any:
        """
        Run the request until it succeeds or attempts are exhausted.

        Returns:
            The decoded payload, or a FetchError
        """
        state = Attempting(1)
        while isinstance(state, Attempting):
            attempt = state.attempt
            outcome = await self._attempt(request, decoder)
            state = advance(state, outcome, self.max_attempts)

            if not outcome.succeeded:
                logger.warning(
                    f"Attempt {attempt}/{self.max_attempts}: {request.method} {request.url} "
                    f"(user={request.user_id}, params={request.params}) - {outcome.describe()}"
                )
            if isinstance(state, Attempting):
                await self._sleep(self.retry_delay)

        if isinstance(state, Succeeded):
            return state.payload

        assert isinstance(state, Failed)
        self._log_failure(request, state.error)
        return state.error

    async def _attempt(self, request: UpstreamRequest, decoder: Decoder) -> AttemptOutcome:
        """Perform one HTTP exchange. Never raises for network or payload problems."""
        session = await self._get_session()

        kwargs = {"headers": request.headers}
        if request.method == "POST":
            kwargs["json"] = request.params
        else:
            # aiohttp/yarl percent-encodes values, non-ASCII city names included
            kwargs["params"] = request.params

        try:
            async with session.request(request.method, request.url, **kwargs) as response:
                # Status is checked before touching the body
                if response.status != 200:
                    return AttemptOutcome(status=response.status)
                try:
                    data = await response.json(content_type=None)
                    payload = decoder(data)
                except ValueError as e:
                    # JSONDecodeError, UnicodeDecodeError and PayloadError
                    return AttemptOutcome(status=response.status, error=e)
                return AttemptOutcome(status=response.status, payload=payload)

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            return AttemptOutcome(error=e)

    def _log_failure(self, request: UpstreamRequest, error: FetchError) -> None:
        if error.kind == FetchErrorKind.UNAVAILABLE:
            logger.error(
                f"Upstream unavailable after {error.attempts} attempts "
                f"(user={request.user_id}, url={request.url}): {error.detail}"
            )
        elif error.kind == FetchErrorKind.UPSTREAM_STATUS:
            logger.error(
                f"Upstream returned status {error.status} after {error.attempts} attempts "
                f"(user={request.user_id}, url={request.url})"
            )
        else:
            logger.error(
                f"Upstream response decode error for user={request.user_id}, "
                f"params={request.params}: {error.detail}"
            )
