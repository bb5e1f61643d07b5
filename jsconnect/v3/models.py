"""
v3 Handshake Models
===================
Constants, algorithms and credentials for the JWT-based handshake.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from ..exceptions import InvalidValue
from ..validation import require_non_empty

PROTOCOL_VERSION = "python:3"

# Lifetime of response tokens in seconds
TIMEOUT = 600

MIN_SECRET_LENGTH = 16

FIELD_UNIQUE_ID = "id"
FIELD_PHOTO = "photo"
FIELD_NAME = "name"
FIELD_EMAIL = "email"
FIELD_ROLES = "roles"
FIELD_JWT = "jwt"
FIELD_STATE = "st"
FIELD_USER = "u"
FIELD_REDIRECT_URL = "rurl"
FIELD_CLIENT_ID = "kid"


class SigningAlgorithm(str, Enum):
    """HMAC algorithms accepted for v3 tokens."""
    HS256 = "HS256"
    HS384 = "HS384"
    HS512 = "HS512"

    @classmethod
    def parse(cls, value: Union[str, "SigningAlgorithm"]) -> "SigningAlgorithm":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise InvalidValue(f"Invalid signing algorithm: {value}") from None


@dataclass(frozen=True)
class SigningCredentials:
    """Client ID, shared secret and algorithm used to sign and verify tokens."""
    client_id: str
    secret: Union[str, bytes]
    algorithm: SigningAlgorithm = SigningAlgorithm.HS256

    def __post_init__(self):
        require_non_empty(self.client_id, "client_id")
        require_non_empty(self.secret, "secret")
        secret_bytes = (
            self.secret if isinstance(self.secret, bytes) else self.secret.encode("utf-8")
        )
        if len(secret_bytes) < MIN_SECRET_LENGTH:
            raise InvalidValue(
                f"The secret must be at least {MIN_SECRET_LENGTH} bytes long."
            )
        object.__setattr__(self, "algorithm", SigningAlgorithm.parse(self.algorithm))
