"""
Purchase funnel workflow.

Provides:
- CancellationToken: cooperative stop flag with interruptible waits
- WorkflowOrchestrator: the bounded-retry poll loop
- RunResult / RunOutcome: terminal report of a run
- WorkflowController: one active run per controller, on a worker thread
"""

from .cancel import CancellationToken
from .controller import WorkflowController
from .orchestrator import RunOutcome, RunResult, WorkflowOrchestrator, WorkflowRun
from .steps import FunnelSteps

__all__ = [
    "CancellationToken",
    "FunnelSteps",
    "RunOutcome",
    "RunResult",
    "WorkflowController",
    "WorkflowOrchestrator",
    "WorkflowRun",
]
