"""In-process dispatch of reconciliation passes.

The reconciler does not decide when it runs. Whatever does, kopf in
production or the ``WorkQueue`` below, only has to offer ``enqueue`` and
``next_pass`` and to never hand the same identifier to two workers at once.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Protocol, runtime_checkable

from .models import ReconcileRequest, ReconcileResult
from .utils.errors import sanitize_exception

logger = logging.getLogger(__name__)


@runtime_checkable
class Dispatcher(Protocol):
    def enqueue(self, identifier: str) -> None: ...

    def next_pass(self, timeout: float | None = None) -> str | None: ...


class Reconciler(Protocol):
    def reconcile(self, request: ReconcileRequest) -> ReconcileResult: ...


class WorkQueue:
    """A de-duplicating work queue that serializes work per identifier.

    An identifier enqueued while it is queued is dropped. One enqueued while a
    worker holds it is parked and queued again when the worker calls
    ``done``. Together this gives at most one active pass per identifier and
    no lost notifications.
    """

    def __init__(self):
        self._cond = threading.Condition()
        self._queue: deque[str] = deque()
        self._queued: set[str] = set()
        self._processing: set[str] = set()
        self._dirty: set[str] = set()
        self._timers: set[threading.Timer] = set()
        self._shutdown = False

    def __len__(self) -> int:
        with self._cond:
            return len(self._queue)

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown

    def _push(self, identifier: str) -> None:
        self._queued.add(identifier)
        self._queue.append(identifier)
        self._cond.notify()

    def enqueue(self, identifier: str) -> None:
        """Request a pass for an identifier."""
        with self._cond:
            if self._shutdown or identifier in self._queued:
                return
            if identifier in self._processing:
                self._dirty.add(identifier)
                return
            self._push(identifier)

    def enqueue_after(self, identifier: str, delay: float) -> None:
        """Request a pass for an identifier once ``delay`` seconds have passed."""
        if delay <= 0:
            self.enqueue(identifier)
            return

        def fire() -> None:
            with self._cond:
                self._timers.discard(timer)
            self.enqueue(identifier)

        timer = threading.Timer(delay, fire)
        timer.daemon = True
        with self._cond:
            if self._shutdown:
                return
            self._timers.add(timer)
        timer.start()

    def next_pass(self, timeout: float | None = None) -> str | None:
        """Take the next identifier to reconcile.

        Args:
            timeout: Seconds to wait for work, forever when None

        Returns:
            The identifier, or None on timeout or shutdown
        """
        with self._cond:
            self._cond.wait_for(lambda: self._queue or self._shutdown, timeout)
            if not self._queue or self._shutdown:
                return None
            identifier = self._queue.popleft()
            self._queued.discard(identifier)
            self._processing.add(identifier)
            return identifier

    def done(self, identifier: str) -> None:
        """Mark the pass for an identifier as finished."""
        with self._cond:
            self._processing.discard(identifier)
            if identifier in self._dirty:
                self._dirty.discard(identifier)
                self._push(identifier)

    def shutdown(self) -> None:
        """Stop handing out work and cancel delayed enqueues."""
        with self._cond:
            self._shutdown = True
            for timer in self._timers:
                timer.cancel()
            self._timers.clear()
            self._cond.notify_all()


def process_next(
    queue: WorkQueue,
    reconciler: Reconciler,
    retry_delay: float = 1.0,
    timeout: float | None = None,
) -> ReconcileResult | None:
    """Run one pass for the next queued identifier.

    Retry results and failures are put back on the queue after
    ``retry_delay``; nothing is retried inside the pass. Identifiers that are
    not ``namespace/name`` are dropped.

    Returns:
        The pass result, or None if there was no work or the pass failed
    """
    identifier = queue.next_pass(timeout=timeout)
    if identifier is None:
        return None

    try:
        request = ReconcileRequest.parse(identifier)
    except ValueError as e:
        logger.error(f"Dropping {identifier!r}: {e}")
        queue.done(identifier)
        return None

    try:
        result = reconciler.reconcile(request)
    except Exception as e:
        logger.error(f"Reconciliation of {identifier} failed: {sanitize_exception(e)}")
        queue.enqueue_after(identifier, retry_delay)
        return None
    finally:
        queue.done(identifier)

    if result.requeue:
        queue.enqueue_after(identifier, retry_delay)
    return result


def run_worker(
    queue: WorkQueue,
    reconciler: Reconciler,
    stop: threading.Event,
    retry_delay: float = 1.0,
    poll_interval: float = 0.5,
) -> None:
    """Process passes until ``stop`` is set or the queue shuts down."""
    while not stop.is_set() and not queue.is_shutdown:
        process_next(queue, reconciler, retry_delay=retry_delay, timeout=poll_interval)
