"""Shared protocol definitions."""

from typing import Protocol

from core.request_types import InboundRequest


class TransformStep(Protocol):
    """A single step of the perimeter pipeline."""

    def __call__(self, request: InboundRequest) -> InboundRequest: ...


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard)."""

    def log_forward(
        self,
        identity: str | None,
        body: str,
        headers: dict[str, str],
        *,
        path: str,
    ) -> None: ...
    def log_rejected(self, path: str, status: int, message: str) -> None: ...
    def log_error(self, route: str, status: int, message: str) -> None: ...
