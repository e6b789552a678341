"""
Unit tests for the transform pipeline and perimeter service
"""

from dataclasses import replace

import pytest

from core.exceptions import MalformedCredential
from core.pipeline import Stage, TransformPipeline
from core.request_types import InboundRequest
from services.perimeter_service import PerimeterService


def _inbound(headers, body="The cake is a lie!"):
    return InboundRequest(
        method="POST",
        path="/api/jwt-terminate-rewrite-and-forward",
        headers=headers,
        body=body,
    )


class TestTransformPipeline:
    """Test step ordering and failure handling"""

    def test_steps_run_in_order(self):
        pipeline = TransformPipeline(
            [
                (Stage.CLAIM_EXTRACTED, lambda r: replace(r, body=r.body + "1")),
                (Stage.BODY_REWRITTEN, lambda r: replace(r, body=r.body + "2")),
            ]
        )

        result = pipeline.run(_inbound({}, body="0"))

        assert result.body == "012"

    def test_first_error_stops_pipeline(self):
        calls = []

        def failing(request):
            raise MalformedCredential("nope")

        def recording(request):
            calls.append(request)
            return request

        pipeline = TransformPipeline(
            [(Stage.CLAIM_EXTRACTED, failing), (Stage.BODY_REWRITTEN, recording)]
        )

        with pytest.raises(MalformedCredential) as exc_info:
            pipeline.run(_inbound({}))

        assert exc_info.value.stage == Stage.CLAIM_EXTRACTED
        assert calls == []


class TestPerimeterService:
    """Test request preparation"""

    def test_prepare_builds_outbound_request(self, config, logger, make_token):
        service = PerimeterService(config, logger)
        inbound = _inbound(
            {
                "Authorization": f"Bearer {make_token({'name': 'John Doe'})}",
                "Host": "edge.example.com",
                "Content-Type": "text/plain",
                "Content-Length": "18",
                "Connection": "keep-alive",
            }
        )

        prepared = service.prepare(inbound)

        assert prepared.target_url == "http://destination.test/anything"
        assert prepared.body == "!eil a si ekac ehT"
        assert prepared.identity == "John Doe"
        assert prepared.headers == {
            "content-type": "text/plain",
            "x-identity-id": "John Doe",
        }
        assert logger.forwarded[0]["identity"] == "John Doe"
        assert logger.forwarded[0]["path"] == "/api/jwt-terminate-rewrite-and-forward"

    def test_prepare_logs_rejection_with_stage(self, config, logger):
        service = PerimeterService(config, logger)

        with pytest.raises(MalformedCredential):
            service.prepare(_inbound({"content-type": "text/plain"}))

        assert logger.forwarded == []
        path, status, message = logger.rejected[0]
        assert status == 401
        assert message.startswith("claim-extracted: ")
