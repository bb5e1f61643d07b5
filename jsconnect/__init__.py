"""
jsConnect
=========
Single-sign-on handshake for jsConnect consumers: the legacy keyed-hash
protocol (v1/v2) and the JWT protocol (v3).
"""

__version__ = "3.0.0"

# Errors
from jsconnect.exceptions import (
    JsConnectError,
    FieldNotFound,
    InvalidValue,
    Expired,
    SignatureInvalid,
)

# Models
from jsconnect.models import QueryMap, RequestContext, SsoState, UserProfile

# Configuration
from jsconnect.config import JsConnectConfig

# Validation
from jsconnect.validation import require_field, require_non_empty

# Legacy (v1/v2)
from jsconnect.legacy import (
    HashAlgorithm,
    ErrorCode,
    LegacyResult,
    build_canonical_string,
    hash_value,
    sign_fields,
    verify_signed_fields,
    verify_request,
    build_response,
    render_response,
    get_jsconnect_string,
    is_valid_callback,
)

# v3
from jsconnect.v3 import (
    JsConnectV3,
    JwtCodec,
    SigningAlgorithm,
    SigningCredentials,
)

__all__ = [
    # Errors
    "JsConnectError",
    "FieldNotFound",
    "InvalidValue",
    "Expired",
    "SignatureInvalid",
    # Models
    "QueryMap",
    "RequestContext",
    "SsoState",
    "UserProfile",
    # Configuration
    "JsConnectConfig",
    # Validation
    "require_field",
    "require_non_empty",
    # Legacy
    "HashAlgorithm",
    "ErrorCode",
    "LegacyResult",
    "build_canonical_string",
    "hash_value",
    "sign_fields",
    "verify_signed_fields",
    "verify_request",
    "build_response",
    "render_response",
    "get_jsconnect_string",
    "is_valid_callback",
    # v3
    "JsConnectV3",
    "JwtCodec",
    "SigningAlgorithm",
    "SigningCredentials",
]
