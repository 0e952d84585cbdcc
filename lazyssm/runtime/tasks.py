"""Background worker that runs blocking remote calls off the UI thread."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from queue import Empty, Queue

from .events import TaskCrashed

logger = logging.getLogger(__name__)

PostEvent = Callable[[object], None]
RemoteTask = Callable[[PostEvent], None]


class RemoteTaskRunner:
    """Single-slot task runner; completed work comes back as queued events.

    At most one task runs at a time. ``submit`` refuses new work while a task
    is in flight instead of queueing it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._worker: threading.Thread | None = None
        self._events: Queue[object] = Queue()

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._worker is not None and self._worker.is_alive()

    def _run(self, name: str, task: RemoteTask) -> None:
        try:
            task(self._events.put)
        except Exception as exc:
            logger.exception("background task %s crashed", name)
            self._events.put(TaskCrashed(task_name=name, reason=str(exc) or type(exc).__name__))

    def submit(self, name: str, task: RemoteTask) -> bool:
        """Start ``task`` on a worker thread; return ``False`` when busy."""
        with self._lock:
            if self._worker is not None and self._worker.is_alive():
                logger.debug("refusing task %s: worker busy", name)
                return False
            worker = threading.Thread(
                target=self._run,
                args=(name, task),
                name=f"lazyssm-{name}",
                daemon=True,
            )
            self._worker = worker
        worker.start()
        return True

    def drain_events(self) -> list[object]:
        """Return all events posted since the last drain, oldest first."""
        out: list[object] = []
        while True:
            try:
                out.append(self._events.get_nowait())
            except Empty:
                break
        return out

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Join the in-flight task, if any; return whether the runner is idle."""
        with self._lock:
            worker = self._worker
        if worker is None:
            return True
        worker.join(timeout)
        return not worker.is_alive()
