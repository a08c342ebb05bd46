"""Step enum, mode-dependent transition table and completion guards.

Pure domain logic with no external dependencies.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from pivot_workflow.schemas.decision_record import DecisionMode, DecisionRecord

MIN_NEXT_ACTIONS = 3


class Step(StrEnum):
    PRE_MORTEM = "pre-mortem"
    PROGRESS = "progress"
    REFLECTION = "reflection"
    CONFIDENCE = "confidence"
    DECISION = "decision"
    EVIDENCE = "evidence"
    HYPOTHESIS = "hypothesis"
    MIXED_METHODS = "mixed-methods"
    TRAJECTORY = "trajectory"
    PIVOT_TYPES = "pivot-types"
    COMPLETE = "complete"


INITIAL_STEP = Step.PRE_MORTEM
TERMINAL_STEP = Step.COMPLETE

# Ordered flows; both share the pre-mortem -> progress prefix
STEP_FLOWS: dict[DecisionMode, tuple[Step, ...]] = {
    DecisionMode.EASY: (
        Step.PRE_MORTEM,
        Step.PROGRESS,
        Step.REFLECTION,
        Step.CONFIDENCE,
        Step.DECISION,
        Step.COMPLETE,
    ),
    DecisionMode.DETAILED: (
        Step.PRE_MORTEM,
        Step.PROGRESS,
        Step.EVIDENCE,
        Step.MIXED_METHODS,
        Step.HYPOTHESIS,
        Step.TRAJECTORY,
        Step.PIVOT_TYPES,
        Step.DECISION,
        Step.COMPLETE,
    ),
}


@dataclass(frozen=True)
class GuardResult:
    """Outcome of a step completion guard. A failed guard blocks "continue"."""

    passed: bool
    reason: str = ""


def _filled(*values: str | None) -> bool:
    return all(v is not None and v.strip() for v in values)


def _pre_mortem_guard(record: DecisionRecord) -> GuardResult:
    insights = list(record.pre_mortem_insights[:3])
    if len(insights) < 3 or not _filled(*insights):
        return GuardResult(False, "Complete all three insights to continue")
    return GuardResult(True)


def _reflection_guard(record: DecisionRecord) -> GuardResult:
    r = record.reframing_responses
    if not _filled(r.inheritance_question, r.contradiction_question, r.temporal_question):
        return GuardResult(False, "Complete all three reflections to continue")
    return GuardResult(True)


def _hypothesis_guard(record: DecisionRecord) -> GuardResult:
    h = record.hypothesis_tested
    if h is None or not _filled(h.statement, h.test_conducted, h.evidence_gathered):
        return GuardResult(False, "Describe the hypothesis, the test conducted and the evidence gathered")
    return GuardResult(True)


def _decision_guard(record: DecisionRecord) -> GuardResult:
    if record.decision is None:
        return GuardResult(False, "Select a decision path")
    if not _filled(record.decision_rationale):
        return GuardResult(False, "Explain the rationale for your decision")
    actions = [a for a in record.next_actions if _filled(a)]
    if len(actions) < MIN_NEXT_ACTIONS:
        return GuardResult(False, f"List at least {MIN_NEXT_ACTIONS} next actions")
    return GuardResult(True)


# Steps missing from this table have no completion requirement
COMPLETION_GUARDS: dict[Step, Callable[[DecisionRecord], GuardResult]] = {
    Step.PRE_MORTEM: _pre_mortem_guard,
    Step.REFLECTION: _reflection_guard,
    Step.HYPOTHESIS: _hypothesis_guard,
    Step.DECISION: _decision_guard,
}


def step_flow(mode: DecisionMode) -> tuple[Step, ...]:
    return STEP_FLOWS[DecisionMode(mode)]


def _position(step: Step, mode: DecisionMode) -> int:
    flow = step_flow(mode)
    try:
        return flow.index(Step(step))
    except ValueError:
        raise ValueError(f"Step {step!s} is not part of the {DecisionMode(mode)!s} flow") from None


def check_guard(step: Step, record: DecisionRecord | None) -> GuardResult:
    """Evaluate the completion guard for a step against the current record."""
    if record is None:
        return GuardResult(False, "No decision in progress")
    guard = COMPLETION_GUARDS.get(Step(step))
    if guard is None:
        return GuardResult(True)
    return guard(record)


def next_step(step: Step, mode: DecisionMode, guard_passed: bool) -> Step:
    """Return the step that follows a "continue" action.

    Pure function -- no side effects.

    Rules:
        - A failed guard keeps the current step
        - COMPLETE is absorbing
        - Otherwise advance one position in the mode's flow

    Raises:
        ValueError: If the step does not belong to the mode's flow
    """
    index = _position(step, mode)
    if not guard_passed or step == TERMINAL_STEP:
        return Step(step)
    return step_flow(mode)[index + 1]


def previous_step(step: Step, mode: DecisionMode) -> Step | None:
    """Return the step a "back" action leads to, or None at the first step.

    Backward transitions are unguarded. COMPLETE has no way back.
    """
    index = _position(step, mode)
    if index == 0 or step == TERMINAL_STEP:
        return None
    return step_flow(mode)[index - 1]


def step_number(step: Step, mode: DecisionMode) -> tuple[int, int]:
    """1-based position of a step and the number of steps before COMPLETE."""
    total = len(step_flow(mode)) - 1
    return min(_position(step, mode) + 1, total), total
