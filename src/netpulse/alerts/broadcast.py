"""
Best-effort fan-out to alert targets.

Each target runs independently; a failure on one never affects the others.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from netpulse.alerts.targets import AlertTarget

logger = logging.getLogger(__name__)


@dataclass
class TargetOutcome:
    """Result of one operation on one target."""

    url: str
    success: bool
    error: str = ""


@dataclass
class BroadcastResult:
    """Aggregated result of an operation sent to every target."""

    label: str
    outcomes: list[TargetOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def successes(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def failures(self) -> int:
        return self.total - self.successes

    @property
    def any_success(self) -> bool:
        """True if at least one target succeeded."""
        return self.successes > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert result to JSON-serializable dict."""
        return {
            "operation": self.label,
            "successes": self.successes,
            "failures": self.failures,
            "total": self.total,
            "targets": [
                {"url": o.url, "success": o.success, "error": o.error or None}
                for o in self.outcomes
            ],
        }


def _run_one(
    target: AlertTarget, operation: Callable[[AlertTarget], bool]
) -> TargetOutcome:
    try:
        ok = bool(operation(target))
    except Exception as e:
        return TargetOutcome(url=target.base_url, success=False, error=str(e))
    if ok:
        return TargetOutcome(url=target.base_url, success=True)
    return TargetOutcome(url=target.base_url, success=False, error="not acknowledged")


def broadcast(
    targets: Sequence[AlertTarget],
    operation: Callable[[AlertTarget], bool],
    label: str,
) -> BroadcastResult:
    """
    Run ``operation`` against every target in parallel.

    Exceptions and falsy returns are recorded as per-target failures and
    never propagate. Outcomes keep the order of ``targets``.

    Args:
        targets: Targets to address
        operation: Callable invoked with each target, returning success
        label: Operation name for logging and reporting

    Returns:
        BroadcastResult with one outcome per target
    """
    result = BroadcastResult(label=label)
    if not targets:
        return result

    with ThreadPoolExecutor(
        max_workers=len(targets), thread_name_prefix=f"alert-{label}"
    ) as pool:
        futures = [pool.submit(_run_one, t, operation) for t in targets]
        result.outcomes = [f.result() for f in futures]

    for outcome in result.outcomes:
        if not outcome.success:
            logger.warning(f"Alert {label} failed on {outcome.url}: {outcome.error}")

    return result
