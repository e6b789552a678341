"""Shared request data types."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class InboundRequest:
    """A request as received by the listener.

    Header names are lower-cased on construction so lookups and removals
    are case-insensitive. Steps return new instances instead of mutating.
    """

    method: str
    path: str
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""

    def __post_init__(self) -> None:
        normalized = {key.lower(): value for key, value in self.headers.items()}
        object.__setattr__(self, "headers", normalized)

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())


@dataclass(frozen=True)
class PreparedRequest:
    """Prepared data for the outbound request."""

    target_url: str
    headers: dict[str, str]
    body: str
    identity: str | None = None


@dataclass(frozen=True)
class UpstreamResult:
    """Destination response relayed to the caller."""

    status_code: int
    content: bytes
    media_type: str | None = None
