"""FastAPI route handlers."""

import json

from fastapi import Request, Response

from core.claims import claims_from_header
from core.config import Config
from core.exceptions import PerimeterError, RequestTooLarge
from core.pipeline import Stage
from core.protocols import RequestLogger
from core.request_types import InboundRequest
from ui.log_utils import write_incoming_log


def error_response(error: PerimeterError) -> Response:
    """Render a proxy error as a JSON response."""
    return Response(
        content=json.dumps({"error": error.message}),
        status_code=error.status_code,
        media_type="application/json",
    )


async def _read_inbound(request: Request, config: Config) -> InboundRequest:
    """Read the request into an InboundRequest, enforcing the body limit."""
    raw_body = await request.body()
    if len(raw_body) > config.limits.max_body_size:
        raise RequestTooLarge("Request body too large")

    # surrogateescape keeps undecodable bytes intact through the rewrite
    text_body = raw_body.decode("utf-8", errors="surrogateescape")
    headers = dict(request.headers)
    write_incoming_log(request.method, request.url.path, headers, text_body, stage=Stage.RECEIVED)
    return InboundRequest(
        method=request.method,
        path=request.url.path,
        headers=headers,
        body=text_body,
    )


async def handle_forward(
    request: Request,
    config: Config,
    logger: RequestLogger,
) -> Response:
    """Extract identity, rewrite the body and forward to the destination."""
    try:
        inbound = await _read_inbound(request, config)
        perimeter_service = request.app.state.perimeter_service
        prepared = perimeter_service.prepare(inbound)
        result = await request.app.state.upstream_client.forward(prepared, logger)
    except RequestTooLarge as e:
        logger.log_rejected(request.url.path, e.status_code, e.message)
        return error_response(e)
    except PerimeterError as e:
        return error_response(e)

    headers = {"content-type": result.media_type} if result.media_type else None
    return Response(
        content=result.content,
        status_code=result.status_code,
        headers=headers,
    )


async def handle_claims(
    request: Request,
    config: Config,
    logger: RequestLogger,
) -> Response:
    """Decode the bearer token and return its claim set."""
    try:
        claims = claims_from_header(
            request.headers.get("authorization"),
            config.identity.verification,
        )
    except PerimeterError as e:
        logger.log_rejected(request.url.path, e.status_code, e.message)
        return error_response(e)

    return Response(
        content=json.dumps(claims, default=str),
        status_code=200,
        media_type="application/json",
    )
