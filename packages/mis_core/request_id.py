from __future__ import annotations

from contextvars import ContextVar

# Tracks the request id of the current task for log records
_request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    """Return the request id bound to the current context."""
    return _request_id_ctx_var.get()


def set_request_id(request_id: str | None):
    return _request_id_ctx_var.set(request_id)


def reset_request_id(token) -> None:
    _request_id_ctx_var.reset(token)
