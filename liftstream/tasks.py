"""Background tasks owned by a server and waited on at shutdown."""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional


class TaskGroup:
    """Starts managed background threads and waits for them on shutdown.

    Once the group is shut down, no new tasks are started. Running tasks are
    expected to notice ``is_shutdown()`` and return on their own.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._running = 0
        self._shutdown = False

    def start(self, func: Callable[[], object]) -> Optional[threading.Thread]:
        """Run ``func`` in a new thread unless the group has been shut down.

        Returns the thread, or None when the group is already shut down.
        """
        with self._cond:
            if self._shutdown:
                return None
            self._running += 1

        def run() -> None:
            try:
                func()
            finally:
                with self._cond:
                    self._running -= 1
                    self._cond.notify_all()

        thread = threading.Thread(target=run, daemon=True)
        try:
            thread.start()
        except BaseException:
            with self._cond:
                self._running -= 1
                self._cond.notify_all()
            raise
        return thread

    def shutdown(self) -> None:
        """Stop accepting new tasks; calling it again has no effect."""
        with self._cond:
            self._shutdown = True
            self._cond.notify_all()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until every started task has returned.

        Returns True if all tasks finished, False if ``timeout`` seconds
        passed first.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while self._running:
                if deadline is None:
                    self._cond.wait()
                    continue
                left = deadline - time.monotonic()
                if left <= 0:
                    return False
                self._cond.wait(left)
            return True

    def is_shutdown(self) -> bool:
        """True once ``shutdown`` has been called."""
        with self._cond:
            return self._shutdown