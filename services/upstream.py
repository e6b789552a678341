"""HTTP forwarding to the fixed destination."""

import httpx

from core.exceptions import UpstreamTimeout, UpstreamUnavailable
from core.headers import HeaderBuilder
from core.pipeline import Stage
from core.protocols import RequestLogger
from core.request_types import PreparedRequest, UpstreamResult


class UpstreamClient:
    """Forward prepared requests and relay the destination's response."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        timeout: float = 30.0,
        header_builder: HeaderBuilder | None = None,
    ) -> None:
        self._client = client
        self._timeout = timeout
        self._headers = header_builder or HeaderBuilder()

    async def forward(
        self,
        prepared: PreparedRequest,
        logger: RequestLogger,
    ) -> UpstreamResult:
        """POST the prepared request and wait for the full response."""
        try:
            response = await self._client.post(
                prepared.target_url,
                content=prepared.body.encode("utf-8", errors="surrogateescape"),
                headers=self._headers.encode_headers(prepared.headers),
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            logger.log_error("destination", UpstreamTimeout.status_code, "Upstream timeout")
            error = UpstreamTimeout("Upstream timeout", destination=prepared.target_url)
            error.stage = Stage.FORWARDED
            raise error from e
        except httpx.RequestError as e:
            logger.log_error("destination", UpstreamUnavailable.status_code, str(e))
            error = UpstreamUnavailable(
                f"Upstream connection error: {e}",
                destination=prepared.target_url,
            )
            error.stage = Stage.FORWARDED
            raise error from e

        if response.is_error:
            logger.log_error("destination", response.status_code, response.text)

        return UpstreamResult(
            status_code=response.status_code,
            content=response.content,
            media_type=response.headers.get("content-type"),
        )
