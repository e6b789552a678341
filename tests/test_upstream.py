"""
Unit tests for UpstreamClient
"""

import httpx
import pytest

from core.exceptions import UpstreamTimeout, UpstreamUnavailable
from core.pipeline import Stage
from core.request_types import PreparedRequest
from services.upstream import UpstreamClient

PREPARED = PreparedRequest(
    target_url="http://destination.test/anything",
    headers={"content-type": "text/plain", "x-identity-id": "John Doe"},
    body="!eil a si ekac ehT",
    identity="John Doe",
)


def _client(handler) -> UpstreamClient:
    return UpstreamClient(httpx.AsyncClient(transport=httpx.MockTransport(handler)), timeout=1.0)


class TestUpstreamClient:
    """Test forwarding and error mapping"""

    @pytest.mark.asyncio
    async def test_forward_posts_prepared_request(self, logger):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, text="ok", headers={"content-type": "text/plain"})

        result = await _client(handler).forward(PREPARED, logger)

        assert result.status_code == 200
        assert result.content == b"ok"
        assert result.media_type == "text/plain"
        assert seen[0].method == "POST"
        assert str(seen[0].url) == "http://destination.test/anything"
        assert seen[0].headers["x-identity-id"] == "John Doe"
        assert seen[0].content == b"!eil a si ekac ehT"

    @pytest.mark.asyncio
    async def test_error_status_is_relayed_and_logged(self, logger):
        def handler(request):
            return httpx.Response(503, text="maintenance")

        result = await _client(handler).forward(PREPARED, logger)

        assert result.status_code == 503
        assert result.content == b"maintenance"
        assert logger.errors == [("destination", 503, "maintenance")]

    @pytest.mark.asyncio
    async def test_timeout_raises_upstream_timeout(self, logger):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(UpstreamTimeout) as exc_info:
            await _client(handler).forward(PREPARED, logger)

        assert exc_info.value.status_code == 504
        assert exc_info.value.stage == Stage.FORWARDED
        assert exc_info.value.destination == PREPARED.target_url

    @pytest.mark.asyncio
    async def test_connection_error_raises_upstream_unavailable(self, logger):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(UpstreamUnavailable) as exc_info:
            await _client(handler).forward(PREPARED, logger)

        assert not isinstance(exc_info.value, UpstreamTimeout)
        assert exc_info.value.status_code == 502
        assert logger.errors[0][1] == 502

    @pytest.mark.asyncio
    async def test_non_ascii_identity_is_sent_as_utf8(self, logger):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200)

        prepared = PreparedRequest(
            target_url="http://destination.test/anything",
            headers={"x-identity-id": "Jürgen Müller"},
            body="",
            identity="Jürgen Müller",
        )

        result = await _client(handler).forward(prepared, logger)

        assert result.status_code == 200
        assert (b"x-identity-id", "Jürgen Müller".encode("utf-8")) in seen[0].headers.raw
