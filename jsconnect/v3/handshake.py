"""
jsConnect v3 Handshake
======================
JWT-based SSO handshake.

The remote site redirects the user here with ``?jwt=<request token>``. The
request token is verified, then a response token carrying the user's
profile (or an empty profile for guests) is signed and appended to the
request's redirect URL as ``#jwt=<response token>``.

Usage:
    jsc = (
        JsConnectV3()
        .set_signing_credentials(client_id, secret)
        .set_unique_id("123")
        .set_name("alice")
    )
    location = jsc.generate_response_location(request_url)

An instance handles exactly one request.
"""

import time
from collections.abc import Mapping
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import structlog

from ..config import JsConnectConfig
from ..exceptions import InvalidValue
from ..models import QueryMap, SsoState, UserProfile
from ..validation import require_field
from .codec import JwtCodec
from .models import (
    FIELD_EMAIL,
    FIELD_JWT,
    FIELD_NAME,
    FIELD_PHOTO,
    FIELD_REDIRECT_URL,
    FIELD_ROLES,
    FIELD_STATE,
    FIELD_UNIQUE_ID,
    FIELD_USER,
    PROTOCOL_VERSION,
    TIMEOUT,
    SigningAlgorithm,
    SigningCredentials,
)

logger = structlog.get_logger(__name__)


class HandshakeState(str, Enum):
    """Lifecycle of a single handshake instance."""
    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"
    DECODED = "decoded"
    RESPONDED = "responded"


class JsConnectV3:
    """Implements the jsConnect 3 protocol for one SSO request."""

    def __init__(self):
        self._user: UserProfile = {}
        self._guest = False
        self._credentials: Optional[SigningCredentials] = None
        self._algorithm = SigningAlgorithm.HS256
        self._version: Optional[str] = None
        self._timestamp: Optional[int] = None
        self.state = HandshakeState.UNCONFIGURED

    @classmethod
    def from_config(cls, config: JsConnectConfig) -> "JsConnectV3":
        """Create a handshake signed with the configured credentials and algorithm."""
        return (
            cls()
            .set_signing_algorithm(config.signing_algorithm)
            .set_signing_credentials(config.client_id, config.secret)
        )

    # -- User profile -------------------------------------------------------

    def set_user_field(self, key: str, value: Any) -> "JsConnectV3":
        """Set a field on the current user. The value must be JSON encodable."""
        self._user[key] = value
        return self

    def get_user_field(self, key: str) -> Any:
        return self._user.get(key)

    def get_user(self) -> UserProfile:
        """Get all of the fields on the current user."""
        return self._user

    def set_unique_id(self, unique_id: str) -> "JsConnectV3":
        return self.set_user_field(FIELD_UNIQUE_ID, unique_id)

    def get_unique_id(self) -> Optional[str]:
        return self.get_user_field(FIELD_UNIQUE_ID)

    def set_name(self, name: str) -> "JsConnectV3":
        return self.set_user_field(FIELD_NAME, name)

    def get_name(self) -> Optional[str]:
        return self.get_user_field(FIELD_NAME)

    def set_email(self, email: str) -> "JsConnectV3":
        return self.set_user_field(FIELD_EMAIL, email)

    def get_email(self) -> Optional[str]:
        return self.get_user_field(FIELD_EMAIL)

    def set_photo_url(self, photo: str) -> "JsConnectV3":
        return self.set_user_field(FIELD_PHOTO, photo)

    def get_photo_url(self) -> Optional[str]:
        return self.get_user_field(FIELD_PHOTO)

    def set_roles(self, roles: List[Any]) -> "JsConnectV3":
        """Set the user's roles as a list of role names or IDs."""
        return self.set_user_field(FIELD_ROLES, list(roles))

    def get_roles(self) -> Optional[List[Any]]:
        return self.get_user_field(FIELD_ROLES)

    def set_guest(self, is_guest: bool) -> "JsConnectV3":
        """
        Mark the response as anonymous.

        Profile fields already set are kept but never sent while this is on.
        """
        self._guest = bool(is_guest)
        return self

    def is_guest(self) -> bool:
        return self._guest

    @property
    def sso_state(self) -> SsoState:
        if self._guest:
            return SsoState.guest()
        return SsoState.authenticated(self._user)

    # -- Credentials --------------------------------------------------------

    def set_signing_credentials(self, client_id: str, secret: Union[str, bytes]) -> "JsConnectV3":
        """
        Set the credentials used to sign responses and verify requests.

        Raises:
            InvalidValue: The secret is shorter than 16 bytes or a value is empty
        """
        self._credentials = SigningCredentials(client_id, secret, self._algorithm)
        if self.state == HandshakeState.UNCONFIGURED:
            self.state = HandshakeState.CONFIGURED
        return self

    def set_signing_algorithm(self, algorithm: Union[str, SigningAlgorithm]) -> "JsConnectV3":
        """Choose HS256, HS384 or HS512 for response tokens."""
        self._algorithm = SigningAlgorithm.parse(algorithm)
        if self._credentials is not None:
            self._credentials = SigningCredentials(
                self._credentials.client_id,
                self._credentials.secret,
                self._algorithm,
            )
        return self

    def get_signing_algorithm(self) -> SigningAlgorithm:
        return self._algorithm

    def get_signing_client_id(self) -> str:
        return self._credentials.client_id if self._credentials else ""

    def get_signing_secret(self) -> Union[str, bytes]:
        return self._credentials.secret if self._credentials else ""

    def get_signing_credentials(self) -> SigningCredentials:
        if self._credentials is None:
            raise InvalidValue("Signing credentials have not been set.")
        return self._credentials

    # -- Clock and version --------------------------------------------------

    def set_timestamp(self, timestamp: Union[int, float, datetime, None]) -> "JsConnectV3":
        """
        Override the clock used to sign and verify tokens.

        Naive datetimes are taken as UTC. ``None`` restores the wall clock.
        """
        if isinstance(timestamp, datetime):
            if timestamp.tzinfo is None:
                timestamp = timestamp.replace(tzinfo=timezone.utc)
            timestamp = timestamp.timestamp()
        self._timestamp = None if timestamp is None else int(timestamp)
        return self

    def get_timestamp(self) -> int:
        if self._timestamp is None:
            return int(time.time())
        return self._timestamp

    def set_version(self, version: Optional[str]) -> "JsConnectV3":
        """Override the version reported in response claims."""
        self._version = version
        return self

    def get_version(self) -> str:
        return PROTOCOL_VERSION if self._version is None else self._version

    # -- Tokens -------------------------------------------------------------

    def jwt_decode(self, token: str) -> Dict[str, Any]:
        """
        Verify a request token and return its claims.

        Raises:
            Expired: The token's exp is not after the configured clock
            InvalidValue: The instance already responded
            SignatureInvalid: The token does not verify or cannot be parsed
        """
        if self.state == HandshakeState.RESPONDED:
            raise InvalidValue("This handshake has already produced a response.")
        claims = JwtCodec(self.get_signing_credentials()).decode(token, self.get_timestamp())
        self.state = HandshakeState.DECODED
        return claims

    def jwt_encode(self, user: Mapping, state: Any) -> str:
        """Wrap a user payload and the echoed state in a response token."""
        now = self.get_timestamp()
        claims = {
            "v": self.get_version(),
            "iat": now,
            "exp": now + TIMEOUT,
            FIELD_USER: dict(user),
            FIELD_STATE: state,
        }
        return JwtCodec(self.get_signing_credentials()).encode(claims)

    def generate_response_location(self, request: Union[str, Mapping]) -> str:
        """
        Generate the redirect location answering an SSO request.

        Args:
            request: The request JWT, the full request URL, or its query
                parameters

        Returns:
            ``<rurl>#jwt=<response token>``

        Raises:
            FieldNotFound: No ``jwt`` parameter, or no ``rurl`` claim
            InvalidValue: Empty values, missing credentials, or the instance
                already responded
            Expired: The request token has expired
            SignatureInvalid: The request token does not verify
        """
        if self.state == HandshakeState.RESPONDED:
            raise InvalidValue("This handshake has already produced a response.")

        token = self._extract_token(request)
        claims = self.jwt_decode(token)

        redirect_url = require_field(FIELD_REDIRECT_URL, claims, "jwt", True)
        state = claims[FIELD_STATE] if FIELD_STATE in claims else {}
        user = {} if self.is_guest() else self.get_user()

        response = self.jwt_encode(user, state)
        self.state = HandshakeState.RESPONDED

        logger.info(
            "jsconnect_v3_response_built",
            client_id=self.get_signing_client_id(),
            guest=self.is_guest(),
            algorithm=self._algorithm.value,
        )
        return f"{redirect_url}#{FIELD_JWT}={response}"

    @staticmethod
    def _extract_token(request: Union[str, Mapping]) -> str:
        if isinstance(request, str):
            if "?" not in request and "://" not in request:
                return request
            query = QueryMap.from_url(request)
        elif isinstance(request, QueryMap):
            query = request
        elif isinstance(request, Mapping):
            query = QueryMap(request)
        else:
            raise InvalidValue("Invalid collection: query")
        return require_field(FIELD_JWT, query, "query", True)
