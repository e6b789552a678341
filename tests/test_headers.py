"""
Unit tests for HeaderBuilder
"""

from core.headers import HeaderBuilder


class TestHeaderBuilder:
    """Test header substitution"""

    def test_replace_credential_is_case_insensitive(self):
        builder = HeaderBuilder()

        headers = builder.replace_credential(
            {"AUTHORIZATION": "Bearer x", "Host": "a", "Accept": "*/*"},
            "John Doe",
        )

        assert headers == {"Accept": "*/*", "x-identity-id": "John Doe"}

    def test_forward_headers_drop_hop_by_hop(self):
        headers = HeaderBuilder().build_forward_headers(
            {
                "connection": "keep-alive",
                "transfer-encoding": "chunked",
                "content-length": "10",
                "content-type": "text/plain",
                "x-identity-id": "John Doe",
            }
        )

        assert headers == {"content-type": "text/plain", "x-identity-id": "John Doe"}

    def test_encode_headers_sends_identity_as_utf8(self):
        headers = HeaderBuilder().encode_headers(
            {"x-identity-id": "Jürgen Müller", "content-type": "text/plain"}
        )

        assert headers["x-identity-id"] == "Jürgen Müller".encode("utf-8")
        assert headers["content-type"] == b"text/plain"

    def test_encode_headers_keeps_latin1_pass_through(self):
        # Listener decoded b"caf\xe9" as latin-1
        headers = HeaderBuilder().encode_headers({"x-note": "caf\xe9"})

        assert headers["x-note"] == b"caf\xe9"
