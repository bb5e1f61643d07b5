"""
Legacy jsConnect Handshake
==========================
Keyed-hash SSO handshake (protocol v1/v2) with JSON/JSONP responses.
"""

from .models import HashAlgorithm, ErrorCode, LegacyError, LegacyResult
from .canonical import build_canonical_string, stringify, url_encode
from .signature import (
    hash_value,
    check_timestamp_skew,
    sign_fields,
    compute_signature,
    verify_signed_fields,
    MAX_TIMESTAMP_SKEW_SECONDS,
)
from .handshake import (
    verify_request,
    build_response,
    render_response,
    get_jsconnect_string,
    is_valid_callback,
)

__all__ = [
    # Models
    "HashAlgorithm",
    "ErrorCode",
    "LegacyError",
    "LegacyResult",
    # Canonicalization
    "build_canonical_string",
    "stringify",
    "url_encode",
    # Signature
    "hash_value",
    "check_timestamp_skew",
    "sign_fields",
    "compute_signature",
    "verify_signed_fields",
    "MAX_TIMESTAMP_SKEW_SECONDS",
    # Handshake
    "verify_request",
    "build_response",
    "render_response",
    "get_jsconnect_string",
    "is_valid_callback",
]
