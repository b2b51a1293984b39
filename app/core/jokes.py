"""
Joke service - random jokes from JokeAPI with a local fallback list
"""
import random
import logging
from typing import Optional

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)

NO_PUNCHLINE = "I tried to tell a joke, but I couldn't remember the punchline!"

FALLBACK_JOKES = [
    "Why do programmers prefer dark mode? Because light attracts bugs!",
    "How many programmers does it take to change a light bulb? None, that's a hardware problem!",
    "Why do Java developers wear glasses? Because they don't C#!",
    "What's a programmer's favorite hangout spot? The Foo Bar!",
    "Why did the functions stop calling each other? They had too many arguments!",
    "What's the object-oriented way to become wealthy? Inheritance!",
    "Why was the JavaScript developer sad? Because they didn't Node how to Express themselves!",
    "Why did the developer go broke? Because they lost their domain in a crash!",
    "What's a developer's favorite tea? Proper-tea!",
    "Why did the programmer quit their job? They didn't get arrays!",
]


class JokeAPIError(Exception):
    """Raised when a joke could not be fetched"""


class JokeClient:
    """Async JokeAPI client"""

    def __init__(
        self,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.api_url = api_url or settings.JOKE_API_URL
        self.timeout = timeout if timeout is not None else settings.JOKE_API_TIMEOUT
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def get_random_joke(self) -> str:
        """
        Fetch a random joke

        Returns:
            The joke text; two-part jokes are joined by a blank line

        Raises:
            JokeAPIError: request failed or the body is not JSON
        """
        try:
            response = await self._get_client().get(self.api_url)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise JokeAPIError(f"Failed to fetch joke: {e}") from e

        joke_type = data.get("type") if isinstance(data, dict) else None
        if joke_type == "single" and data.get("joke"):
            return data["joke"]
        if joke_type == "twopart" and data.get("setup"):
            return f"{data['setup']}\n\n{data.get('delivery', '')}"

        logger.warning(f"Unexpected JokeAPI payload: {data}")
        return NO_PUNCHLINE

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def get_fallback_joke() -> str:
    """Pick a joke from the built-in list"""
    return random.choice(FALLBACK_JOKES)


# Global joke client instance
joke_client = JokeClient()
