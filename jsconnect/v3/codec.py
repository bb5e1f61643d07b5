"""
JWT Codec
=========
Thin wrapper over PyJWT that signs response tokens and verifies request
tokens against an injectable clock.

PyJWT failures are translated into exactly two domain errors: ``Expired``
and ``SignatureInvalid``.
"""

from typing import Any, Dict

import jwt
import structlog

from ..exceptions import Expired, InvalidValue, SignatureInvalid
from .models import FIELD_CLIENT_ID, SigningAlgorithm, SigningCredentials

logger = structlog.get_logger(__name__)

ALLOWED_ALGORITHMS = [algorithm.value for algorithm in SigningAlgorithm]

# Expiry is checked against the handshake clock, not PyJWT's wall clock
_DECODE_OPTIONS = {
    "verify_signature": True,
    "require": ["exp"],
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
}


class JwtCodec:
    """Encodes and decodes jsConnect v3 tokens for one set of credentials."""

    def __init__(self, credentials: SigningCredentials):
        self.credentials = credentials

    def encode(self, claims: Dict[str, Any]) -> str:
        """
        Sign claims into a compact JWT.

        The header carries ``kid`` set to the client ID.
        """
        try:
            return jwt.encode(
                claims,
                self.credentials.secret,
                algorithm=self.credentials.algorithm.value,
                headers={FIELD_CLIENT_ID: self.credentials.client_id},
            )
        except TypeError as e:
            raise InvalidValue(f"Claims are not JSON serializable: {e}") from e

    def decode(self, token: str, now: int) -> Dict[str, Any]:
        """
        Verify a compact JWT and return its claims.

        Args:
            token: Compact JWT
            now: Current unix timestamp used for the expiry check

        Raises:
            Expired: The exp claim is at or before ``now``
            SignatureInvalid: Bad signature, disallowed algorithm, missing exp
                or malformed token
        """
        try:
            claims = jwt.decode(
                token,
                self.credentials.secret,
                algorithms=ALLOWED_ALGORITHMS,
                options=_DECODE_OPTIONS,
            )
        except jwt.PyJWTError as e:
            logger.warning(
                "jsconnect_token_rejected",
                client_id=self.credentials.client_id,
                reason=type(e).__name__,
            )
            raise SignatureInvalid(f"Signature verification failed: {e}") from e

        expires_at = _parse_exp(claims.get("exp"))
        if expires_at <= now:
            logger.warning(
                "jsconnect_token_expired",
                client_id=self.credentials.client_id,
                expired_for=now - expires_at,
            )
            raise Expired("The token has expired.")

        return claims


def _parse_exp(value: Any) -> int:
    if value is None or isinstance(value, bool):
        raise SignatureInvalid("The exp claim must be a number.")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise SignatureInvalid("The exp claim must be a number.") from None
