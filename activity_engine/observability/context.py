"""
Context-local request and evaluation state for log correlation.

Two values travel with the current task/thread:
- request_id: set per HTTP request or CLI run
- evaluated_at: the "now" a snapshot is being derived against, so warnings
  emitted while deriving status can be tied back to the evaluation instant
"""

import contextvars
import uuid
from datetime import datetime
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

_request_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "activity_request_id", default=None
)
_evaluated_at_var: contextvars.ContextVar[Optional[datetime]] = contextvars.ContextVar(
    "activity_evaluated_at", default=None
)


def get_request_id() -> Optional[str]:
    return _request_id_var.get()


def set_request_id(request_id: str) -> contextvars.Token:
    """Bind a request id without a context manager. Returns the reset token."""
    return _request_id_var.set(request_id)


def generate_request_id() -> str:
    return f"req-{uuid.uuid4().hex[:16]}"


def get_evaluated_at() -> Optional[datetime]:
    """The evaluation instant of the snapshot currently being built, if any."""
    return _evaluated_at_var.get()


class _Bound(Generic[T]):
    """Binds one value to a ContextVar for the duration of a with-block."""

    _var: contextvars.ContextVar

    def __init__(self, value: T):
        self._value = value
        self._token: Optional[contextvars.Token] = None

    def __enter__(self):
        self._token = self._var.set(self._value)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            self._var.reset(self._token)
            self._token = None


class RequestContext(_Bound[str]):
    """
    Request id for everything logged inside the block.

        with RequestContext() as ctx:          # generated req-<hex>
            service.snapshot(now)

        with RequestContext(request_id=header_value):
            ...
    """

    _var = _request_id_var

    def __init__(self, request_id: Optional[str] = None):
        super().__init__(request_id or generate_request_id())

    @property
    def request_id(self) -> str:
        return self._value


class EvaluationContext(_Bound[datetime]):
    """Binds the snapshot's `now` for one aggregation pass."""

    _var = _evaluated_at_var

    @property
    def now(self) -> datetime:
        return self._value
