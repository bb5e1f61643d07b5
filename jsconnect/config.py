"""
jsConnect Configuration
=======================
Client credentials and handshake options, read from the environment.
"""

import os
from dataclasses import dataclass, field


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class JsConnectConfig:
    """Configuration shared by the legacy and v3 handshakes."""
    client_id: str = field(
        default_factory=lambda: os.environ.get("JSCONNECT_CLIENT_ID", "")
    )
    secret: str = field(
        default_factory=lambda: os.environ.get("JSCONNECT_SECRET", "")
    )
    # Legacy keyed-hash algorithm: md5, sha1 or sha256
    hash_algorithm: str = field(
        default_factory=lambda: os.environ.get("JSCONNECT_HASH", "md5")
    )
    # Disable only while testing an integration
    secure: bool = field(
        default_factory=lambda: _env_flag("JSCONNECT_SECURE", True)
    )
    # Adds the canonical signing string to legacy responses
    debug: bool = field(
        default_factory=lambda: _env_flag("JSCONNECT_DEBUG", False)
    )
    # v3 JWT algorithm: HS256, HS384 or HS512
    signing_algorithm: str = field(
        default_factory=lambda: os.environ.get("JSCONNECT_ALGORITHM", "HS256")
    )

    @classmethod
    def from_env(cls) -> "JsConnectConfig":
        """Build a configuration purely from environment variables."""
        return cls()
