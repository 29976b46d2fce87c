# backend/src/honeyward/api/deps.py
#
# Request-scoped accessors for the services built in main.create_app().

from typing import List, Optional

from fastapi import Request

from honeyward.models import ClientContext
from honeyward.services.recorder import ANONYMOUS_SESSION

SESSION_HEADER = "x-session-id"


def get_classifier(request: Request):
    return request.app.state.classifier


def get_recorder(request: Request):
    return request.app.state.recorder


def get_honeypot(request: Request):
    return request.app.state.honeypot


def get_reporter(request: Request):
    return request.app.state.reporter


def get_sink(request: Request):
    return request.app.state.sink


def get_log_store(request: Request):
    return request.app.state.log_store


def session_id(request: Request) -> str:
    return request.headers.get(SESSION_HEADER) or ANONYMOUS_SESSION


def accept_languages(header: Optional[str]) -> List[str]:
    """Language tags from an Accept-Language header, quality values dropped."""
    if not header:
        return []
    tags = (part.split(";", 1)[0].strip() for part in header.split(","))
    return [t for t in tags if t and t != "*"]


def client_context(request: Request, reported: dict = None) -> ClientContext:
    """
    Client-reported attributes, with UA / IP / referrer from the request.
    When the client reports no language list, the Accept-Language header
    stands in for it; a request without one yields an empty list.
    """
    context = ClientContext.from_dict(reported)
    if context.languages is None:
        context.languages = accept_languages(request.headers.get("accept-language"))
    if not context.user_agent:
        context.user_agent = request.headers.get("user-agent")
    if not context.referrer:
        context.referrer = request.headers.get("referer")
    context.ip_address = request.client.host if request.client else None
    return context
