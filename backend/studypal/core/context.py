"""Per-request context utilities."""
from __future__ import annotations

from contextvars import ContextVar, Token
from uuid import uuid4

MAX_REQUEST_ID_LENGTH = 128

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    """Return the request id bound to the current request, if any."""
    return request_id_ctx_var.get()


def normalize_request_id(candidate: str | None) -> str:
    """Reuse a caller-supplied id when it is short and printable, else mint one."""
    if candidate:
        candidate = candidate.strip()
        if 0 < len(candidate) <= MAX_REQUEST_ID_LENGTH and candidate.isprintable():
            return candidate
    return uuid4().hex


def bind_request_id(request_id: str) -> Token:
    return request_id_ctx_var.set(request_id)


def reset_request_id(token: Token) -> None:
    request_id_ctx_var.reset(token)
