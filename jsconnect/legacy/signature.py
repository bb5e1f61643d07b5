"""
Legacy Signature Functions
==========================
Keyed-hash signing and freshness checks for jsConnect v1/v2.

The signature is ``Hash(message + secret)``, not an HMAC. Deployed
consumers recompute it exactly this way.
"""

import hashlib
import hmac
from typing import Dict, MutableMapping, Union

from .canonical import build_canonical_string
from .models import HashAlgorithm

# Replay/clock-skew window for signed requests
MAX_TIMESTAMP_SKEW_SECONDS = 30 * 60

_HASHERS = {
    HashAlgorithm.MD5: hashlib.md5,
    HashAlgorithm.SHA1: hashlib.sha1,
    HashAlgorithm.SHA256: hashlib.sha256,
}


def hash_value(data: str, algorithm: Union[str, HashAlgorithm] = HashAlgorithm.MD5) -> str:
    """
    Hash a string with the legacy algorithm.

    Args:
        data: String to hash (UTF-8 encoded)
        algorithm: md5, sha1 or sha256

    Returns:
        Lower-case hex digest
    """
    hasher = _HASHERS[HashAlgorithm.parse(algorithm)]
    return hasher(data.encode("utf-8")).hexdigest()


def check_timestamp_skew(
    timestamp: int,
    now: int,
    max_skew: int = MAX_TIMESTAMP_SKEW_SECONDS,
) -> bool:
    """Return True if the timestamp is within ``max_skew`` of ``now``."""
    return abs(now - timestamp) <= max_skew


def sign_fields(
    fields: MutableMapping,
    client_id: str,
    secret: str,
    algorithm: Union[str, HashAlgorithm] = HashAlgorithm.MD5,
    debug: bool = False,
) -> str:
    """
    Sign a field set in place.

    Adds ``clientid`` and ``signature`` to ``fields``, plus ``sigStr`` when
    ``debug`` is set.

    Returns:
        The signature
    """
    canonical = build_canonical_string(fields)
    signature = hash_value(canonical + secret, algorithm)

    fields["clientid"] = client_id
    fields["signature"] = signature
    if debug:
        fields["sigStr"] = canonical
    return signature


def compute_signature(
    fields: Dict[str, object],
    secret: str,
    algorithm: Union[str, HashAlgorithm] = HashAlgorithm.MD5,
) -> str:
    """Compute the signature of a field set without modifying it."""
    return hash_value(build_canonical_string(fields) + secret, algorithm)


def verify_signed_fields(
    signed: Dict[str, object],
    secret: str,
    algorithm: Union[str, HashAlgorithm] = HashAlgorithm.MD5,
) -> bool:
    """
    Verify a field set produced by ``sign_fields``.

    Uses constant-time comparison.
    """
    provided = signed.get("signature")
    if not isinstance(provided, str):
        return False
    fields = {
        key: value for key, value in signed.items()
        if key not in ("clientid", "signature", "sigStr")
    }
    expected = compute_signature(fields, secret, algorithm)
    return hmac.compare_digest(expected.encode(), provided.encode())
