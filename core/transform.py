"""Request body rewriting."""

from dataclasses import replace

from core.request_types import InboundRequest


def reverse_text(text: str | None) -> str:
    """Return the characters of ``text`` in reverse order."""
    if not text:
        return ""
    return text[::-1]


class BodyRewriter:
    """Pipeline step reversing the request body."""

    def __call__(self, request: InboundRequest) -> InboundRequest:
        return replace(request, body=reverse_text(request.body))
