# backend/src/honeyward/api/middleware.py
#
# Logs every HTTP request as an "api_request" activity and runs the
# classifier over its URL. Bodies are not read here; the frontend submits
# form values through /monitor/inspect and /auth/login classifies its own.
#
# The raw path, its percent-decoded form and each decoded query value are
# submitted newline separated, so encoded and plain payloads both match.
# Decoding is done exactly once.
#
# Responses are checked on the way out: a 404 is logged as "404_not_found",
# an unhandled exception as "server_error" before it propagates.

import logging
from urllib.parse import parse_qsl, unquote_plus

from fastapi import Request
from fastapi.concurrency import run_in_threadpool

from honeyward.api.deps import client_context, session_id

logger = logging.getLogger(__name__)

URL_LOCATION = "request_url"


def _url_text(request: Request) -> str:
    # Query values only; "&" and "=" separators are not classified
    raw_path = (request.scope.get("raw_path") or b"").decode("latin-1") or request.url.path
    parts    = [raw_path]
    decoded  = unquote_plus(raw_path)
    if decoded != raw_path:
        parts.append(decoded)
    for _, value in parse_qsl(request.url.query):
        parts.append(value)
    return "\n".join(parts)


def _inspect_request(state, request: Request, context, session: str) -> None:
    state.recorder.track_activity(
        "api_request",
        session_id= session,
        context=    context,
        page=       request.url.path,
        data=       {"method": request.method, "query": request.url.query},
    )

    result = state.classifier.classify(_url_text(request), URL_LOCATION)
    if result.matched:
        state.recorder.record_classification(result, context, session)


async def log_requests(request: Request, call_next):
    state   = request.app.state
    context = None
    session = None
    try:
        context = client_context(request)
        session = session_id(request)
        # Regex work stays off the event loop
        await run_in_threadpool(_inspect_request, state, request, context, session)
    except Exception:
        logger.exception("[middleware] Request logging failed for %s", request.url.path)

    try:
        response = await call_next(request)
    except Exception as e:
        state.recorder.track_activity(
            "server_error",
            session_id= session,
            context=    context,
            page=       request.url.path,
            severity=   "high",
            data=       {"error": str(e), "method": request.method},
        )
        raise

    if response.status_code == 404:
        state.recorder.track_activity(
            "404_not_found",
            session_id= session,
            context=    context,
            page=       request.url.path,
            data=       {"method": request.method},
        )
    return response
