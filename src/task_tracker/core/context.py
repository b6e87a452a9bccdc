"""Request-scoped correlation helpers used by logging."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token

REQUEST_ID_HEADER = "X-Request-ID"
_UNBOUND = "-"

_request_id_ctx_var: ContextVar[str] = ContextVar("request_id", default=_UNBOUND)


def get_request_id() -> str:
    """Return the request identifier for the current execution context."""

    return _request_id_ctx_var.get()


def bind_request_id(request_id: str) -> Token[str]:
    """Bind a request identifier to the current execution context."""

    return _request_id_ctx_var.set(request_id)


def reset_request_id(token: Token[str]) -> None:
    """Reset the request identifier using the provided context token."""

    _request_id_ctx_var.reset(token)


@contextmanager
def request_id_scope(request_id: str | None) -> Iterator[str]:
    """Bind ``request_id`` for the duration of the block when one is given."""

    if not request_id:
        yield get_request_id()
        return
    token = bind_request_id(request_id)
    try:
        yield request_id
    finally:
        reset_request_id(token)


__all__ = [
    "REQUEST_ID_HEADER",
    "bind_request_id",
    "get_request_id",
    "request_id_scope",
    "reset_request_id",
]
