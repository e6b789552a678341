"""Header construction for forwarded requests."""

# Headers that describe a single connection and must not be forwarded.
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
        "content-length",
    }
)

CREDENTIAL_HEADERS = frozenset({"authorization", "host"})


class HeaderBuilder:
    """Build header sets at the perimeter."""

    def __init__(self, identity_header: str = "X-Identity-Id") -> None:
        self.identity_header = identity_header

    def replace_credential(self, headers: dict[str, str], identity: str) -> dict[str, str]:
        """Drop the raw credential and host, then add the identity header."""
        result = {
            key: value
            for key, value in headers.items()
            if key.lower() not in CREDENTIAL_HEADERS
        }
        result[self.identity_header.lower()] = identity
        return result

    def build_forward_headers(self, headers: dict[str, str]) -> dict[str, str]:
        """Strip hop-by-hop headers before sending to the destination."""
        return {
            key: str(value)
            for key, value in headers.items()
            if key.lower() not in HOP_BY_HOP_HEADERS
        }

    def encode_headers(self, headers: dict[str, str]) -> dict[str, bytes]:
        """Encode header values for the wire.

        The identity goes out as UTF-8. Other values were decoded from
        latin-1 by the listener and are sent back as they arrived.
        """
        identity_key = self.identity_header.lower()
        encoded = {}
        for key, value in headers.items():
            if key.lower() == identity_key:
                encoded[key] = value.encode("utf-8")
                continue
            try:
                encoded[key] = value.encode("latin-1")
            except UnicodeEncodeError:
                encoded[key] = value.encode("utf-8")
        return encoded
