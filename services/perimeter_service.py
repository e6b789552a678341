"""Perimeter orchestration: transform steps, then destination preparation."""

from core.claims import ClaimExtractor
from core.config import Config
from core.exceptions import PerimeterError
from core.headers import HeaderBuilder
from core.pipeline import Stage, TransformPipeline
from core.protocols import RequestLogger
from core.request_types import InboundRequest, PreparedRequest
from core.transform import BodyRewriter


class PerimeterService:
    """Prepare inbound requests for forwarding to the destination."""

    def __init__(
        self,
        config: Config,
        logger: RequestLogger,
        header_builder: HeaderBuilder | None = None,
        pipeline: TransformPipeline | None = None,
    ) -> None:
        self._config = config
        self._logger = logger
        self._headers = header_builder or HeaderBuilder(config.identity.header)
        self._pipeline = pipeline or TransformPipeline(
            [
                (Stage.CLAIM_EXTRACTED, ClaimExtractor(config.identity, self._headers)),
                (Stage.BODY_REWRITTEN, BodyRewriter()),
            ]
        )

    def prepare(self, request: InboundRequest) -> PreparedRequest:
        """Run the pipeline and build the outbound request."""
        try:
            transformed = self._pipeline.run(request)
        except PerimeterError as e:
            message = f"{e.stage}: {e.message}" if e.stage else e.message
            self._logger.log_rejected(request.path, e.status_code, message)
            raise

        identity = transformed.header(self._config.identity.header)
        headers = self._headers.build_forward_headers(transformed.headers)
        self._logger.log_forward(identity, transformed.body, headers, path=request.path)
        return PreparedRequest(
            target_url=self._config.destination.url,
            headers=headers,
            body=transformed.body,
            identity=identity,
        )
