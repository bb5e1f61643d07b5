"""
Legacy Handshake
================
Request verification and response assembly for jsConnect v1/v2.

Errors are never raised for bad requests. They short-circuit into the
response body as ``{"error": ..., "message": ...}`` so the output can
always be rendered as JSON or JSONP.

Usage:
    from jsconnect.legacy import get_jsconnect_string

    body = get_jsconnect_string(user, request.query_string, config)
"""

import hmac
import json
import re
from collections.abc import Mapping
from typing import Dict, Optional, Union

import structlog

from ..config import JsConnectConfig
from ..exceptions import InvalidValue
from ..models import QueryMap, RequestContext, SsoState
from .canonical import stringify
from .models import ErrorCode, HashAlgorithm, LegacyError, LegacyResult
from .signature import check_timestamp_skew, hash_value, sign_fields

logger = structlog.get_logger(__name__)

RequestInput = Union[RequestContext, QueryMap, Mapping, str, None]

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1

CALLBACK_PATTERN = re.compile(r"[A-Za-z0-9_.$]+")


def _parse_timestamp(value: Optional[str]) -> int:
    """Unparsable, missing or out-of-range timestamps read as zero."""
    try:
        timestamp = int(value)
    except (TypeError, ValueError):
        return 0
    if "_" in value or not INT32_MIN <= timestamp <= INT32_MAX:
        return 0
    return timestamp


def is_valid_callback(callback: Optional[str]) -> bool:
    """Whether a JSONP callback name only uses identifier characters and dots."""
    return callback is not None and CALLBACK_PATTERN.fullmatch(callback) is not None


def _reject(code: ErrorCode, message: str, **context) -> LegacyResult:
    logger.warning("jsconnect_request_rejected", code=code.value, reason=message, **context)
    return LegacyResult(error=LegacyError(code, message))


def _whoami_fields(user: Optional[Mapping]) -> Dict[str, str]:
    if not user:
        return {"name": "", "photourl": ""}
    return {
        "name": user.get("name") or "",
        "photourl": user.get("photourl") or "",
    }


def verify_request(
    context: RequestContext,
    client_id: str,
    secret: str,
    algorithm: Union[str, HashAlgorithm] = HashAlgorithm.MD5,
    user: Optional[Mapping] = None,
) -> LegacyResult:
    """
    Verify an inbound legacy SSO request.

    Args:
        context: Query parameters plus the current timestamp
        client_id: Configured client ID
        secret: Configured shared secret
        algorithm: md5, sha1 or sha256
        user: Current user, only consulted for the unsigned "who am I" probe

    Returns:
        LegacyResult with either an error, a whoami disclosure, or success
    """
    query = context.query
    request_client_id = query.get("client_id")

    if request_client_id is None:
        return _reject(ErrorCode.INVALID_REQUEST, "The client_id parameter is missing.")

    if request_client_id != client_id:
        return _reject(
            ErrorCode.INVALID_CLIENT,
            f"Unknown client {request_client_id}.",
            client_id=request_client_id,
        )

    if "timestamp" not in query and "signature" not in query:
        logger.debug("jsconnect_whoami", client_id=client_id)
        return LegacyResult(whoami=_whoami_fields(user))

    timestamp = _parse_timestamp(query.get("timestamp"))
    if timestamp == 0:
        return _reject(
            ErrorCode.INVALID_REQUEST,
            "The timestamp is missing or invalid.",
            client_id=client_id,
        )

    provided_signature = query.get("signature")
    if provided_signature is None:
        return _reject(
            ErrorCode.INVALID_REQUEST,
            "The signature is missing.",
            client_id=client_id,
        )

    if not check_timestamp_skew(timestamp, context.now):
        return _reject(
            ErrorCode.INVALID_REQUEST,
            "The timestamp is invalid.",
            client_id=client_id,
            skew=context.now - timestamp,
        )

    expected_signature = hash_value(str(timestamp) + secret, algorithm)
    if not hmac.compare_digest(expected_signature.encode(), provided_signature.encode()):
        return _reject(ErrorCode.ACCESS_DENIED, "Signature invalid.", client_id=client_id)

    return LegacyResult()


def build_response(
    state: SsoState,
    client_id: str,
    secret: str,
    algorithm: Union[str, HashAlgorithm] = HashAlgorithm.MD5,
    debug: bool = False,
) -> Dict[str, object]:
    """
    Build the response fields for a verified request.

    Guests get a blank name and photo. Authenticated users get a copy of
    their profile signed with ``clientid`` and ``signature`` appended.
    """
    if state.is_guest:
        return {"name": "", "photourl": ""}

    fields: Dict[str, object] = dict(state.profile)
    sign_fields(fields, client_id, secret, algorithm, debug=debug)
    return fields


def render_response(fields: Mapping, callback: Optional[str] = None) -> str:
    """
    Encode response fields as JSON, or JSONP when a callback is given.

    Values are stringified and keys sorted. The callback may only contain
    letters, digits, ``_``, ``.`` and ``$``.

    Raises:
        InvalidValue: The callback contains any other character
    """
    if callback is not None and not is_valid_callback(callback):
        raise InvalidValue("The callback parameter is invalid.")
    body = json.dumps(
        {str(key): stringify(value) for key, value in fields.items()},
        sort_keys=True,
        separators=(",", ":"),
    )
    if callback is None:
        return body
    return f"{callback}({body})"


def get_jsconnect_string(
    user: Optional[Mapping],
    request: RequestInput,
    config: Optional[JsConnectConfig] = None,
    now: Optional[int] = None,
) -> str:
    """
    Run a full legacy handshake and return the response body.

    Args:
        user: Current user's profile, or None/empty for a guest
        request: Inbound query (RequestContext, QueryMap, mapping or querystring)
        config: Credentials and options, read from the environment if omitted
        now: Current unix timestamp, wall clock if omitted

    Returns:
        JSON or JSONP string
    """
    config = config or JsConnectConfig.from_env()
    if isinstance(request, RequestContext):
        context = request if now is None else RequestContext(request.query, int(now))
    else:
        context = RequestContext.from_query(request, now)

    algorithm = HashAlgorithm.parse(config.hash_algorithm)

    callback = context.query.get("callback")
    if callback is not None and not is_valid_callback(callback):
        result = _reject(
            ErrorCode.INVALID_REQUEST,
            "The callback parameter is invalid.",
            client_id=config.client_id,
        )
        return render_response(result.error.as_fields())

    if config.secure:
        result = verify_request(context, config.client_id, config.secret, algorithm, user)
    else:
        result = LegacyResult()

    if result.error is not None:
        fields = result.error.as_fields()
    elif result.whoami is not None:
        fields = result.whoami
    else:
        fields = build_response(
            SsoState.from_user(user),
            config.client_id,
            config.secret,
            algorithm,
            debug=config.debug,
        )
        logger.info(
            "jsconnect_response_built",
            client_id=config.client_id,
            guest=not user,
            algorithm=algorithm.value,
        )

    return render_response(fields, callback)
