"""
jsConnect v3 Handshake
======================
JWT-based SSO handshake with redirect-fragment responses.
"""

from .models import (
    SigningAlgorithm,
    SigningCredentials,
    PROTOCOL_VERSION,
    TIMEOUT,
    MIN_SECRET_LENGTH,
    FIELD_UNIQUE_ID,
    FIELD_PHOTO,
    FIELD_NAME,
    FIELD_EMAIL,
    FIELD_ROLES,
    FIELD_JWT,
    FIELD_STATE,
    FIELD_USER,
    FIELD_REDIRECT_URL,
    FIELD_CLIENT_ID,
)
from .codec import JwtCodec, ALLOWED_ALGORITHMS
from .handshake import JsConnectV3, HandshakeState

__all__ = [
    # Models
    "SigningAlgorithm",
    "SigningCredentials",
    "PROTOCOL_VERSION",
    "TIMEOUT",
    "MIN_SECRET_LENGTH",
    "FIELD_UNIQUE_ID",
    "FIELD_PHOTO",
    "FIELD_NAME",
    "FIELD_EMAIL",
    "FIELD_ROLES",
    "FIELD_JWT",
    "FIELD_STATE",
    "FIELD_USER",
    "FIELD_REDIRECT_URL",
    "FIELD_CLIENT_ID",
    # Codec
    "JwtCodec",
    "ALLOWED_ALGORITHMS",
    # Handshake
    "JsConnectV3",
    "HandshakeState",
]
