"""
Starlette Adapter
=================
Turns handshake output into Starlette responses. Mount these in your own
routes; no routes are defined here.

Usage (FastAPI):
    from jsconnect.integrations.starlette import legacy_response, v3_redirect

    @app.get("/sso")
    async def sso(request: Request):
        return legacy_response(request, current_user(request), config)

    @app.get("/sso/v3")
    async def sso_v3(request: Request):
        jsc = JsConnectV3.from_config(config)
        return v3_redirect(request, jsc)
"""

from typing import Mapping, Optional

import structlog
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response

from ..config import JsConnectConfig
from ..exceptions import Expired, FieldNotFound, InvalidValue, SignatureInvalid
from ..legacy import get_jsconnect_string, is_valid_callback
from ..models import QueryMap
from ..v3 import JsConnectV3

logger = structlog.get_logger(__name__)

_V3_ERROR_STATUS = {
    FieldNotFound: 400,
    InvalidValue: 400,
    Expired: 401,
    SignatureInvalid: 403,
}


def legacy_response(
    request: Request,
    user: Optional[Mapping],
    config: Optional[JsConnectConfig] = None,
) -> Response:
    """Answer a legacy request with JSON, or JavaScript for JSONP."""
    query = QueryMap(request.url.query)
    body = get_jsconnect_string(user, query, config)
    jsonp = is_valid_callback(query.get("callback"))
    media_type = "application/javascript" if jsonp else "application/json"
    return Response(content=body, media_type=media_type)


def v3_redirect(request: Request, jsc: JsConnectV3) -> Response:
    """
    Redirect back to the requesting site with the signed response token.

    Handshake failures are answered with a JSON error body so the caller can
    tell a forged token (403) from a stale one (401).
    """
    try:
        location = jsc.generate_response_location(QueryMap(request.url.query))
    except (FieldNotFound, InvalidValue, Expired, SignatureInvalid) as e:
        status_code = _V3_ERROR_STATUS[type(e)]
        logger.warning(
            "jsconnect_v3_failed",
            error=type(e).__name__,
            status_code=status_code,
        )
        return JSONResponse(
            status_code=status_code,
            content={"error": type(e).__name__, "message": e.message},
        )
    return RedirectResponse(location, status_code=302)
