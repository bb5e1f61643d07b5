"""
Canonical Signing String
========================
Deterministic key ordering and percent-encoding for legacy signatures.

Both ends of the handshake recompute this string independently, so every
rule here is part of the wire format.
"""

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote_plus


def stringify(value: Any) -> str:
    """Convert a profile value to the string form used on the wire."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(stringify(item) for item in value)
    return str(value)


def url_encode(value: str) -> str:
    """
    Form-encode a string for the signing string.

    Spaces become ``+``, hex digits are upper case, and only ASCII letters,
    digits and ``-_.`` are left literal. ``' ! * ( ) ~`` are always escaped.
    """
    # quote_plus keeps "~" literal
    return quote_plus(value, safe="", encoding="utf-8").replace("~", "%7E")


def build_canonical_string(fields: Mapping) -> str:
    """
    Build the canonical signing string for a set of fields.

    Args:
        fields: Field name to value mapping

    Returns:
        ``key=value`` pairs joined with ``&``, keys sorted case-insensitively
        and lower-cased
    """
    keys = sorted(fields.keys(), key=lambda key: str(key).lower())
    return "&".join(
        f"{url_encode(str(key).lower())}={url_encode(stringify(fields[key]))}"
        for key in keys
    )
