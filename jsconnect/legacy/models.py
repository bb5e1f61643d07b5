"""
Legacy Handshake Models
=======================
Enums and result types for the jsConnect v1/v2 keyed-hash handshake.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Union

from ..exceptions import InvalidValue


class HashAlgorithm(str, Enum):
    """Digest used for the legacy ``Hash(message + secret)`` signature."""
    MD5 = "md5"
    SHA1 = "sha1"
    SHA256 = "sha256"

    @classmethod
    def parse(cls, value: Union[str, "HashAlgorithm", None]) -> "HashAlgorithm":
        """Parse an algorithm name; blank means md5."""
        if isinstance(value, cls):
            return value
        name = (value or "").strip().lower()
        if not name:
            return cls.MD5
        try:
            return cls(name)
        except ValueError:
            raise InvalidValue(f"Invalid hash algorithm: {value}") from None


class ErrorCode(str, Enum):
    """Error codes carried in legacy response bodies."""
    INVALID_REQUEST = "invalid_request"
    INVALID_CLIENT = "invalid_client"
    ACCESS_DENIED = "access_denied"


@dataclass
class LegacyError:
    """An error rendered into the response body instead of being raised."""
    code: ErrorCode
    message: str

    def as_fields(self) -> Dict[str, str]:
        return {"error": self.code.value, "message": self.message}


@dataclass
class LegacyResult:
    """Outcome of verifying a legacy request."""
    error: Optional[LegacyError] = None
    # Set on the unsigned "who am I" probe
    whoami: Optional[Dict[str, str]] = None

    @property
    def ok(self) -> bool:
        return self.error is None
