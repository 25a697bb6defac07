"""Cooperative progress reporting and cancellation.

A :class:`ProgressMonitor` is threaded through an analysis run. The
analyzer reports completed work and a status line through it, and polls
it for cancellation once per classified import and once per registry node
visited. Cancellation is backed by a :class:`threading.Event`, so another
thread (or a signal handler) may cancel a run in progress.

Typical usage::

    monitor = ProgressMonitor(callback=lambda update: print(update.task_name))
    result = UnusedDependencyAnalyzer(module, registry, oracle).run(monitor)
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Optional

from depprune.exceptions import AnalysisCancelled


@dataclass(frozen=True)
class ProgressUpdate:
    """Snapshot passed to progress callbacks."""

    completed: int
    total: int
    task_name: str


ProgressCallback = Callable[[ProgressUpdate], None]


class ProgressMonitor:
    """Work counter with a cancellation flag.

    Args:
        callback: Called with a :class:`ProgressUpdate` after every change.
        cancel_event: Event shared with whoever may cancel the run. A
            private event is created when omitted.
    """

    def __init__(
        self,
        callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        self._callback = callback
        self._cancel_event = cancel_event or threading.Event()
        self._total = 0
        self._completed = 0
        self._task_name = ""

    @property
    def total(self) -> int:
        return self._total

    @property
    def completed(self) -> int:
        return self._completed

    @property
    def task_name(self) -> str:
        return self._task_name

    def begin(self, total: int, task_name: str = "") -> None:
        """Start counting towards ``total`` units of work."""
        self._total = max(total, 0)
        self._completed = 0
        self._task_name = task_name
        self._notify()

    def worked(self, amount: int = 1) -> None:
        """Record ``amount`` completed units, never exceeding the total."""
        if amount <= 0:
            return
        self._completed = min(self._completed + amount, self._total)
        self._notify()

    def set_task_name(self, task_name: str) -> None:
        self._task_name = task_name
        self._notify()

    def cancel(self) -> None:
        """Request cancellation; the run stops at its next check."""
        self._cancel_event.set()

    def is_canceled(self) -> bool:
        return self._cancel_event.is_set()

    def check_canceled(self, module_id: Optional[str] = None) -> None:
        """Raise :class:`AnalysisCancelled` if cancellation was requested."""
        if self._cancel_event.is_set():
            raise AnalysisCancelled(module_id=module_id)

    def _notify(self) -> None:
        if self._callback is not None:
            self._callback(ProgressUpdate(self._completed, self._total, self._task_name))


def unused_count_message(count: int) -> str:
    """Return the running status line shown while classifying imports."""
    noun = "dependency" if count == 1 else "dependencies"
    return f"Analyzing: {count} unused {noun} found"
