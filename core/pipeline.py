"""Ordered transform steps applied to an inbound request."""

from collections.abc import Sequence
from enum import StrEnum

from core.exceptions import PerimeterError
from core.protocols import TransformStep
from core.request_types import InboundRequest


class Stage(StrEnum):
    """Processing stages of a request, in order."""

    RECEIVED = "received"
    CLAIM_EXTRACTED = "claim-extracted"
    BODY_REWRITTEN = "body-rewritten"
    FORWARDED = "forwarded"


class TransformPipeline:
    """Thread a request through a fixed sequence of steps.

    Each entry pairs a step with the stage reached once it succeeds. The
    first error stops the pipeline and is tagged with the stage that
    could not be reached.
    """

    def __init__(self, steps: Sequence[tuple[Stage, TransformStep]]) -> None:
        self._steps = tuple(steps)

    def run(self, request: InboundRequest) -> InboundRequest:
        for stage, step in self._steps:
            try:
                request = step(request)
            except PerimeterError as e:
                e.stage = stage
                raise
        return request
