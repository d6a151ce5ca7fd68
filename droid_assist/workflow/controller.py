"""Start/stop surface that keeps at most one funnel run active."""

from __future__ import annotations

import logging
import threading

from .cancel import CancellationToken
from .orchestrator import RunResult, WorkflowOrchestrator

logger = logging.getLogger("droid_assist.workflow")


class WorkflowController:
    """Runs the orchestrator on one worker thread.

    A single mutex guards the start/stop transition. Starting while a run
    is active is rejected; callers stop and wait first.
    """

    def __init__(self, orchestrator: WorkflowOrchestrator):
        self.orchestrator = orchestrator
        self._lock = threading.Lock()
        self._token: CancellationToken | None = None
        self._thread: threading.Thread | None = None
        self._result: RunResult | None = None
        self._done = threading.Event()

    @property
    def running(self) -> bool:
        with self._lock:
            return self._thread is not None and self._thread.is_alive()

    @property
    def last_result(self) -> RunResult | None:
        return self._result

    def start(self, *, retry_budget: int | None = None) -> bool:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                logger.warning("funnel run already active; start rejected")
                return False
            token = CancellationToken()
            self._token = token
            self._result = None
            self._done.clear()
            thread = threading.Thread(
                target=self._work,
                args=(token, retry_budget),
                name="droid-assist-funnel",
                daemon=True,
            )
            self._thread = thread
            thread.start()
            return True

    def _work(self, token: CancellationToken, retry_budget: int | None) -> None:
        try:
            self._result = self.orchestrator.run(token, retry_budget=retry_budget)
        finally:
            self._done.set()

    def stop(self) -> bool:
        """Request cooperative cancellation; False when nothing is running."""
        with self._lock:
            if self._token is None or self._thread is None or not self._thread.is_alive():
                return False
            logger.info("stop requested")
            self._token.cancel()
            return True

    def wait(self, timeout: float | None = None) -> RunResult | None:
        """Block until the active run ends; None on timeout or if never started."""
        with self._lock:
            thread = self._thread
        if thread is None:
            return None
        if not self._done.wait(timeout):
            return None
        thread.join()
        return self._result
