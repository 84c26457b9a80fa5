"""
Run-scoped cancellation signal.

A :class:`RunContext` is created per :meth:`Agent.run` call and threaded through to the model
client.  Tools read it with :func:`current_run_context`, which is backed by a ``ContextVar`` so
concurrent runs in different threads never see each other's context.
"""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

from agentcore.errors import RunCancelledError

_CURRENT: ContextVar["RunContext | None"] = ContextVar("agentcore_run_context", default=None)


class RunContext:
    """Optional deadline plus a manual cancel flag."""

    def __init__(self, timeout: float | None = None) -> None:
        self.deadline = time.monotonic() + timeout if timeout is not None else None
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        """Request cancellation; the run stops at its next checkpoint."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set() or self.remaining() == 0.0

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or ``None`` when there is no deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def check(self) -> None:
        """Raise :class:`RunCancelledError` if the run should stop."""
        if self._cancelled.is_set():
            raise RunCancelledError("Run was cancelled")
        if self.remaining() == 0.0:
            raise RunCancelledError("Run deadline exceeded")


def current_run_context() -> RunContext | None:
    """Return the context of the run executing in this thread, if any."""
    return _CURRENT.get()


@contextmanager
def bind_run_context(ctx: RunContext) -> Iterator[RunContext]:
    """Make *ctx* visible to :func:`current_run_context` for the duration of the block."""
    token = _CURRENT.set(ctx)
    try:
        yield ctx
    finally:
        _CURRENT.reset(token)
