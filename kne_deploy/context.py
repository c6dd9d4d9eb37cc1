# /*
# Copyright 2026 The KNE Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Cooperative cancellation scopes for blocking readiness waits.

A :class:`Context` is either live or done. Once done it stays done and
reports why through :meth:`Context.error`. Blocking code registers a
callback with :meth:`Context.on_done` to be woken when that happens instead
of polling. Cancelling a context cancels every context derived from it.
External commands are never interrupted; only the waits that observe the
context are.
"""

from __future__ import annotations

import threading
from collections.abc import Callable

from kne_deploy.errors import CancellationError, ContextCanceledError, DeadlineExceededError


class Context:
    """Cancellation scope shared by the calls of one provisioning pass."""

    def __init__(self, parent: Context | None = None) -> None:
        self._lock = threading.Lock()
        self._reason: type[CancellationError] | None = None
        self._callbacks: dict[int, Callable[[], None]] = {}
        self._next_id = 0
        self._timer: threading.Timer | None = None
        self._detach: Callable[[], None] = lambda: None
        if parent is not None:
            self._detach = parent.on_done(lambda: self._finish(parent._reason or ContextCanceledError))

    @classmethod
    def background(cls) -> Context:
        """Return a root context that is never done on its own."""
        return cls()

    def with_cancel(self) -> Context:
        """Derive a child that is done when cancelled or when this context is.

        The child stays registered with this context until it is done, so
        callers must cancel it when finished, e.g. by using it as a ``with``
        block.
        """
        return Context(self)

    def with_timeout(self, seconds: float) -> Context:
        """Derive a child that becomes done after *seconds*.

        The child stays registered with this context until it expires or is
        cancelled; use it as a ``with`` block to release it early.

        Args:
            seconds: Time budget; zero or negative expires immediately.

        Returns:
            The derived context.
        """
        child = Context(self)
        if seconds <= 0:
            child._finish(DeadlineExceededError)
            return child
        timer = threading.Timer(seconds, child._finish, args=(DeadlineExceededError,))
        timer.daemon = True
        with child._lock:
            if child._reason is None:
                child._timer = timer
                timer.start()
        return child

    def cancel(self) -> None:
        self._finish(ContextCanceledError)

    def done(self) -> bool:
        with self._lock:
            return self._reason is not None

    def error(self) -> CancellationError | None:
        """Return the cancellation reason, or None while the context is live."""
        with self._lock:
            reason = self._reason
        return reason() if reason is not None else None

    def on_done(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run *callback* once the context is done.

        The callback runs immediately, on the calling thread, if the context
        is already done. Otherwise it runs on whichever thread ends the
        context.

        Returns:
            A function that unregisters the callback.
        """
        with self._lock:
            if self._reason is None:
                key = self._next_id
                self._next_id += 1
                self._callbacks[key] = callback
                return lambda: self._unregister(key)
        callback()
        return lambda: None

    def _unregister(self, key: int) -> None:
        with self._lock:
            self._callbacks.pop(key, None)

    def _finish(self, reason: type[CancellationError]) -> None:
        with self._lock:
            if self._reason is not None:
                return
            self._reason = reason
            callbacks = list(self._callbacks.values())
            self._callbacks.clear()
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
        self._detach()
        for cb in callbacks:
            cb()

    def __enter__(self) -> Context:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cancel()
