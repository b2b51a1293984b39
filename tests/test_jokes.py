"""
Tests for the joke client
"""
import httpx
import pytest

from app.core.jokes import (
    JokeClient, JokeAPIError, FALLBACK_JOKES, NO_PUNCHLINE, get_fallback_joke
)


def make_client(handler) -> JokeClient:
    transport = httpx.MockTransport(handler)
    return JokeClient(
        api_url="https://jokes.test/joke",
        client=httpx.AsyncClient(transport=transport)
    )


class TestJokeClient:
    """Test JokeAPI response handling"""

    @pytest.mark.asyncio
    async def test_single_joke(self):
        client = make_client(lambda request: httpx.Response(
            200, json={"type": "single", "joke": "A single joke"}
        ))
        assert await client.get_random_joke() == "A single joke"
        await client.close()

    @pytest.mark.asyncio
    async def test_twopart_joke(self):
        client = make_client(lambda request: httpx.Response(
            200, json={"type": "twopart", "setup": "Setup?", "delivery": "Delivery!"}
        ))
        assert await client.get_random_joke() == "Setup?\n\nDelivery!"
        await client.close()

    @pytest.mark.asyncio
    async def test_unexpected_payload(self):
        client = make_client(lambda request: httpx.Response(200, json={"error": True}))
        assert await client.get_random_joke() == NO_PUNCHLINE
        await client.close()

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        client = make_client(lambda request: httpx.Response(503))
        with pytest.raises(JokeAPIError):
            await client.get_random_joke()
        await client.close()

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self):
        client = make_client(lambda request: httpx.Response(200, text="not json"))
        with pytest.raises(JokeAPIError):
            await client.get_random_joke()
        await client.close()

    @pytest.mark.asyncio
    async def test_requests_configured_url(self):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, json={"type": "single", "joke": "ok"})

        client = make_client(handler)
        await client.get_random_joke()
        await client.close()
        assert seen == ["https://jokes.test/joke"]


class TestFallbackJokes:
    """Test the built-in joke list"""

    def test_fallback_joke(self):
        assert len(FALLBACK_JOKES) == 10
        assert get_fallback_joke() in FALLBACK_JOKES
