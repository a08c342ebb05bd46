"""StepNavigator -- current-step state on top of the pure step table.

Transition rules live in domain/steps.py; this service only tracks where
the founder is and stamps completion when the flow reaches COMPLETE.
"""

from collections.abc import Callable
from dataclasses import dataclass

import structlog

from pivot_workflow.domain.steps import (
    INITIAL_STEP,
    TERMINAL_STEP,
    GuardResult,
    Step,
    check_guard,
    next_step,
    previous_step,
)
from pivot_workflow.schemas.decision_record import DecisionMode, DecisionRecord
from pivot_workflow.services.decision_store import DecisionStore, StoreChange

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class NavigationResult:
    """Outcome of a continue/back action."""

    moved: bool
    step: Step
    guard: GuardResult


class StepNavigator:
    def __init__(self, store: DecisionStore):
        self.store = store
        self.current_step: Step = INITIAL_STEP
        self._unsubscribe: Callable[[], None] | None = store.subscribe(self._on_store_change)

    @property
    def mode(self) -> DecisionMode | None:
        return self.store.mode

    @property
    def is_complete(self) -> bool:
        return self.current_step == TERMINAL_STEP

    def _on_store_change(self, record: DecisionRecord | None, change: StoreChange) -> None:
        if change in (StoreChange.HYDRATE, StoreChange.RESET):
            self.current_step = INITIAL_STEP

    def guard(self) -> GuardResult:
        return check_guard(self.current_step, self.store.current)

    def can_continue(self) -> bool:
        return self.guard().passed

    def complete_step(self) -> NavigationResult:
        """Advance past the current step if its guard passes.

        Repeating the call on a step whose guard passes always yields the
        same target. Only the transition into COMPLETE mutates the record.
        """
        record = self.store.current
        guard = check_guard(self.current_step, record)
        if record is None:
            return NavigationResult(False, self.current_step, guard)

        target = next_step(self.current_step, record.mode, guard.passed)
        moved = target != self.current_step
        if not moved:
            if not guard.passed:
                logger.debug("step_guard_failed", step=self.current_step.value, reason=guard.reason)
            return NavigationResult(False, self.current_step, guard)

        logger.info("step_completed", record_id=record.id, step=self.current_step.value, next_step=target.value)
        self.current_step = target
        if target == TERMINAL_STEP:
            self.store.complete_decision()
        return NavigationResult(True, target, guard)

    def go_back(self) -> NavigationResult:
        """Move to the previous step. Backward moves are never guarded."""
        unguarded = GuardResult(True)
        mode = self.mode
        if mode is None:
            return NavigationResult(False, self.current_step, unguarded)

        target = previous_step(self.current_step, mode)
        if target is None:
            return NavigationResult(False, self.current_step, unguarded)

        self.current_step = target
        return NavigationResult(True, target, unguarded)

    def reset(self) -> None:
        self.current_step = INITIAL_STEP

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
