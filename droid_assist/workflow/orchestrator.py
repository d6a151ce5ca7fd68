"""Retry-driven purchase funnel loop.

States: idle -> running -> {stopped, exhausted, completed}.

Each iteration checks the cancellation token, classifies the page from a
fresh snapshot and runs the matching step. Unproductive iterations spend
the retry budget; the run ends when the budget hits zero, when the order
page has been handled, or when cancellation is observed (at the loop top or
during a wait).
"""

from __future__ import annotations

import logging
import random
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..channels.dispatch import DispatchChain
from ..classifier import PageClassifier, PageState
from ..config import DEFAULT_RETRY_BUDGET, FunnelMarkers, WorkflowTiming
from ..tree.query import UiQuery
from .cancel import CancellationToken
from .steps import FunnelSteps

logger = logging.getLogger("droid_assist.workflow")

# (token, seconds) -> True when the wait ran to completion, False if cancelled.
Sleeper = Callable[[CancellationToken, float], bool]


def _token_sleep(token: CancellationToken, seconds: float) -> bool:
    return not token.wait(seconds)


class RunOutcome(str, Enum):
    STOPPED = "stopped"
    EXHAUSTED = "exhausted"
    COMPLETED = "completed"


@dataclass(frozen=True)
class RunResult:
    ok: bool
    outcome: RunOutcome
    last_state: PageState
    iterations: int = 0
    retries_left: int = 0
    state_counts: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "outcome": self.outcome.value,
            "lastState": self.last_state.value,
            "iterations": self.iterations,
            "retriesLeft": self.retries_left,
            "stateCounts": dict(self.state_counts),
        }


@dataclass
class WorkflowRun:
    token: CancellationToken
    retry_budget: int
    state: PageState = PageState.UNKNOWN
    date_cursor: int = 0
    iterations: int = 0
    state_counts: Counter = field(default_factory=Counter)

    def result(self, outcome: RunOutcome, ok: bool = False) -> RunResult:
        return RunResult(
            ok=ok,
            outcome=outcome,
            last_state=self.state,
            iterations=self.iterations,
            retries_left=self.retry_budget,
            state_counts={k.value: v for k, v in self.state_counts.items()},
        )


class _Interrupted(Exception):
    pass


class WorkflowOrchestrator:
    def __init__(
        self,
        classifier: PageClassifier,
        query: UiQuery,
        chain: DispatchChain,
        markers: FunnelMarkers,
        timing: WorkflowTiming | None = None,
        *,
        retry_budget: int = DEFAULT_RETRY_BUDGET,
        click_jitter: float = 0.0,
        sleeper: Sleeper | None = None,
        rng: random.Random | None = None,
    ):
        self.classifier = classifier
        self.timing = timing or WorkflowTiming()
        self.retry_budget = retry_budget
        self.steps = FunnelSteps(query, chain, markers, self.timing, click_jitter=click_jitter, rng=rng)
        self._sleeper = sleeper or _token_sleep

    def run(self, token: CancellationToken, *, retry_budget: int | None = None) -> RunResult:
        """Drive the funnel until stopped, exhausted or completed. Never raises."""
        budget = self.retry_budget if retry_budget is None else retry_budget
        run = WorkflowRun(token=token, retry_budget=max(1, budget))
        logger.info("funnel run started (retry budget %d)", run.retry_budget)
        try:
            result = self._run(run)
        except _Interrupted:
            logger.info("funnel run interrupted during a wait")
            result = run.result(RunOutcome.STOPPED)
        except Exception:  # noqa: BLE001
            logger.exception("funnel run crashed; reporting as stopped")
            result = run.result(RunOutcome.STOPPED)
        logger.info(
            "funnel run finished: %s ok=%s after %d iterations (last page %s)",
            result.outcome.value,
            result.ok,
            result.iterations,
            result.last_state.value,
        )
        return result

    def _pause(self, run: WorkflowRun, seconds: float) -> None:
        if not self._sleeper(run.token, seconds):
            raise _Interrupted

    def _spend(self, run: WorkflowRun) -> bool:
        """Decrement the budget; True when it is exhausted."""
        run.retry_budget -= 1
        return run.retry_budget <= 0

    def _run(self, run: WorkflowRun) -> RunResult:
        if run.token.cancelled:
            return run.result(RunOutcome.STOPPED)

        if not self.steps.prime():
            logger.warning("priming click on the buy entry failed; continuing")

        def pause(seconds: float) -> None:
            self._pause(run, seconds)

        t = self.timing
        while True:
            if run.token.cancelled:
                logger.info("funnel run stopped by request")
                return run.result(RunOutcome.STOPPED)

            run.iterations += 1
            state = self.classifier.classify().state
            run.state = state
            run.state_counts[state] += 1
            logger.debug("iteration %d: page %s", run.iterations, state.value)

            if state is PageState.CAPTCHA_CHALLENGE:
                if self.steps.solve_captcha():
                    pause(t.captcha_settle)
                    continue
                if self._spend(run):
                    return run.result(RunOutcome.EXHAUSTED)
            elif state is PageState.NETWORK_ERROR:
                if self.steps.refresh():
                    pause(t.network_settle)
                    continue
                if self._spend(run):
                    return run.result(RunOutcome.EXHAUSTED)
            elif state is PageState.ORDER_PAGE:
                ok = self.steps.submit_order()
                logger.info("order page reached; submit %s", "succeeded" if ok else "failed")
                return run.result(RunOutcome.COMPLETED, ok=ok)
            elif state is PageState.TICKET_SELECTION_PAGE:
                self.steps.select_tickets(run, pause)
            else:
                pause(t.unknown_wait)
                if self._spend(run):
                    return run.result(RunOutcome.EXHAUSTED)
