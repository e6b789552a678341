"""Bearer token parsing and identity claim extraction."""

import re
from dataclasses import replace
from typing import Any

import jwt

from core.config import IdentitySettings, VerificationSettings
from core.exceptions import MalformedCredential
from core.headers import HeaderBuilder
from core.request_types import InboundRequest

_BEARER_PATTERN = re.compile(r"^\s*Bearer\s+(\S+)\s*$", re.IGNORECASE)


def parse_bearer_token(header_value: str | None) -> str | MalformedCredential:
    """Return the token from an ``Authorization`` value, or the error.

    The error is returned, not raised.
    """
    if not header_value:
        return MalformedCredential("Missing Authorization header")
    match = _BEARER_PATTERN.match(header_value)
    if match is None:
        return MalformedCredential("Authorization header is not a Bearer credential")
    return match.group(1)


def decode_claims(
    token: str,
    verification: VerificationSettings | None = None,
) -> dict[str, Any]:
    """Decode the token payload into a claim mapping.

    Without verification settings the signature is not checked.
    """
    try:
        if verification is None:
            return jwt.decode(token, options={"verify_signature": False})
        return jwt.decode(
            token,
            verification.key,
            algorithms=verification.algorithms,
            audience=verification.audience,
            options={"verify_aud": verification.audience is not None},
        )
    except jwt.InvalidTokenError as e:
        raise MalformedCredential(f"Invalid bearer token: {e}") from e


def claims_from_header(
    header_value: str | None,
    verification: VerificationSettings | None = None,
) -> dict[str, Any]:
    """Parse an ``Authorization`` value and decode its claims."""
    token = parse_bearer_token(header_value)
    if isinstance(token, MalformedCredential):
        raise token
    return decode_claims(token, verification)


class ClaimExtractor:
    """Pipeline step replacing the bearer credential with an identity header."""

    def __init__(
        self,
        settings: IdentitySettings | None = None,
        header_builder: HeaderBuilder | None = None,
    ) -> None:
        self._settings = settings or IdentitySettings()
        self._headers = header_builder or HeaderBuilder(self._settings.header)

    def __call__(self, request: InboundRequest) -> InboundRequest:
        claims = claims_from_header(
            request.header("authorization"),
            self._settings.verification,
        )
        claim = self._settings.claim
        if claims.get(claim) is None:
            raise MalformedCredential(f"Bearer token has no '{claim}' claim")

        headers = self._headers.replace_credential(request.headers, str(claims[claim]))
        return replace(request, headers=headers)
