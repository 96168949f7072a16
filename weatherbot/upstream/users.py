"""
User registration client.
Forwards Telegram user details to the external user service on /auth.
"""

import asyncio
import logging
from typing import Optional

import aiohttp

logger = logging.getLogger(__name__)


class UserServiceClient:
    """Fire-and-forget client for the user service. Never retries."""

    def __init__(self, url: str, timeout: float = 15.0):
        """
        Initialize user service client.

        Args:
            url: Registration endpoint accepting a JSON POST
            timeout: Request timeout in seconds
        """
        self.url = url
        self.timeout = timeout
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

    async def register(
        self,
        user_id: int,
        username: str = "",
        first_name: str = "",
        last_name: str = ""
    ) -> bool:
        """
        Send user details to the user service.

        Returns:
            True if the service answered 200. Failures are logged, not raised.
        """
        payload = {
            "user_id": user_id,
            "username": username,
            "first_name": first_name,
            "last_name": last_name,
        }
        session = await self._get_session()

        try:
            async with session.post(self.url, json=payload) as response:
                if response.status != 200:
                    logger.error(f"User service returned status {response.status} for user={user_id}")
                    return False
                logger.info(f"Registered user {user_id} with user service")
                return True

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Failed to send user data for user={user_id}: {e}")
            return False
