"""
jsConnect Exceptions
====================
Typed failures raised by the v3 handshake and the field validator.

Legacy (v1/v2) handshakes never raise these for request problems; their
errors are rendered into the response body instead.
"""


class JsConnectError(Exception):
    """Base exception for all jsConnect failures."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class FieldNotFound(JsConnectError):
    """Raised when a required field is missing from a collection."""

    def __init__(self, field: str, collection: str):
        self.field = field
        self.collection = collection
        super().__init__(f"Missing field: {collection}[{field}]")


class InvalidValue(JsConnectError):
    """Raised when a value is empty, malformed or otherwise unusable."""
    pass


class Expired(JsConnectError):
    """Raised when a decoded token's exp claim is in the past."""
    pass


class SignatureInvalid(JsConnectError):
    """Raised when a token's signature does not verify or it cannot be parsed."""
    pass
