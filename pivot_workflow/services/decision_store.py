"""DecisionStore -- in-memory owner of the current decision record.

Every mutation builds a new frozen DecisionRecord (shallow merge of the
changed field group), stamps a strictly increasing updated_at and notifies
subscribers synchronously, in call order. Business validation belongs to the
step guards; the store only checks shape (via pydantic) and never raises past
its public methods: rejected changes are logged and reported as None.
"""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel

from pivot_workflow.domain.scoring import (
    compute_evidence_quality,
    compute_ltv_cac_ratio,
    compute_overall_confidence,
    compute_readiness_score,
)
from pivot_workflow.schemas.decision_record import (
    CognitiveBias,
    ConfidenceAssessment,
    DecisionMode,
    DecisionPath,
    DecisionRecord,
    Evidence,
    EvidenceQuality,
    Hypothesis,
    JobsToBeDone,
    PainPoint,
    PivotReadiness,
    PivotType,
    ProductMarketFit,
    Quote,
    ReframingResponses,
    RetentionMetrics,
    TrajectoryIndicators,
    UnitEconomics,
)

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

_ONE_TICK = timedelta(microseconds=1)


class StoreChange(StrEnum):
    """Why subscribers are being notified."""

    MUTATION = "mutation"  # user edit; persisted by the synchronizer
    HYDRATE = "hydrate"  # record replaced from storage
    RESET = "reset"  # record cleared


StoreListener = Callable[[DecisionRecord | None, StoreChange], None]


def _merge(model_cls: type[M], current: BaseModel | None, changes: dict[str, Any]) -> M:
    """Read-then-merge a partial update into a nested value object."""
    base = current.model_dump() if current is not None else {}
    return model_cls.model_validate({**base, **changes})


def _with_quality_score(evidence: Evidence) -> Evidence:
    q = evidence.quality
    if q is None:
        return evidence
    overall = compute_evidence_quality(q.source_credibility, q.sample_size, q.recency, q.directness)
    return evidence.model_copy(update={"quality": q.model_copy(update={"overall": overall})})


class DecisionStore:
    """Holds the current DecisionRecord for one workflow session."""

    def __init__(
        self,
        clock: Callable[[], datetime] | None = None,
        default_confidence_level: int = 50,
    ):
        self._record: DecisionRecord | None = None
        self._listeners: list[StoreListener] = []
        self._clock = clock or (lambda: datetime.now(UTC))
        self.default_confidence_level = default_confidence_level

    @property
    def current(self) -> DecisionRecord | None:
        return self._record

    @property
    def mode(self) -> DecisionMode | None:
        return self._record.mode if self._record is not None else None

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a change listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, change: StoreChange) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._record, change)
            except Exception:
                logger.exception("decision_listener_failed", change=change.value)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_decision(
        self, project_id: str, mode: DecisionMode, record_id: str | None = None
    ) -> DecisionRecord | None:
        """Create the record when the founder first picks a mode.

        Mode is fixed for the life of the record: once a record exists this
        is a no-op and returns None.
        """
        if self._record is not None:
            logger.warning(
                "decision_mode_change_rejected",
                record_id=self._record.id,
                current_mode=self._record.mode.value,
                requested_mode=str(mode),
            )
            return None

        try:
            record = DecisionRecord.new(
                project_id=project_id,
                mode=DecisionMode(mode),
                record_id=record_id,
                now=self._clock(),
                confidence_level=self.default_confidence_level,
            )
        except ValueError as exc:
            logger.warning("decision_start_rejected", project_id=project_id, error=str(exc))
            return None

        self._record = record
        logger.info("decision_started", record_id=record.id, project_id=project_id, mode=record.mode.value)
        self._notify(StoreChange.MUTATION)
        return record

    def hydrate(self, record: DecisionRecord | None) -> None:
        """Replace the current record with one loaded from storage.

        Distinct from user mutations: updated_at is left as stored and
        subscribers see StoreChange.HYDRATE, so nothing is written back.
        """
        self._record = record
        self._notify(StoreChange.HYDRATE)

    def reset(self) -> None:
        """Drop the current record so a new decision cycle can start."""
        self._record = None
        self._notify(StoreChange.RESET)

    # ------------------------------------------------------------------
    # Core update path
    # ------------------------------------------------------------------

    def _next_timestamp(self, previous: datetime) -> datetime:
        now = self._clock()
        if now <= previous:
            now = previous + _ONE_TICK
        return now

    def _update(
        self, mutation: str, build: Callable[[DecisionRecord], dict[str, Any] | None]
    ) -> DecisionRecord | None:
        record = self._record
        if record is None:
            logger.debug("decision_mutation_skipped", mutation=mutation, reason="no_record")
            return None

        try:
            updates = build(record)
            if updates is None:
                return None
            updated = DecisionRecord.model_validate({
                **record.model_dump(),
                "updated_at": self._next_timestamp(record.updated_at),
                **updates,
            })
        except (ValueError, TypeError, AttributeError) as exc:
            logger.warning("decision_mutation_rejected", mutation=mutation, record_id=record.id, error=str(exc))
            return None

        self._record = updated
        self._notify(StoreChange.MUTATION)
        return updated

    # ------------------------------------------------------------------
    # Debiasing
    # ------------------------------------------------------------------

    def update_pre_mortem_insights(self, insights: list[str]) -> DecisionRecord | None:
        return self._update("update_pre_mortem_insights", lambda r: {"pre_mortem_insights": list(insights)})

    def update_reframing_responses(self, **changes: str) -> DecisionRecord | None:
        return self._update(
            "update_reframing_responses",
            lambda r: {"reframing_responses": _merge(ReframingResponses, r.reframing_responses, changes)},
        )

    # ------------------------------------------------------------------
    # Assessments
    # ------------------------------------------------------------------

    def update_confidence_assessment(self, **changes: int) -> DecisionRecord | None:
        def build(r: DecisionRecord) -> dict[str, Any]:
            merged = _merge(ConfidenceAssessment, r.confidence_assessment, changes)
            overall = compute_overall_confidence(
                merged.market, merged.product, merged.team, merged.resource, merged.timing
            )
            return {"confidence_assessment": merged.model_copy(update={"overall": overall})}

        return self._update("update_confidence_assessment", build)

    def update_pivot_readiness(self, **changes: int) -> DecisionRecord | None:
        def build(r: DecisionRecord) -> dict[str, Any]:
            merged = _merge(PivotReadiness, r.pivot_readiness, changes)
            overall = compute_readiness_score(
                merged.proof, merged.insight, merged.viability, merged.organization, merged.timing
            )
            return {"pivot_readiness": merged.model_copy(update={"overall": overall})}

        return self._update("update_pivot_readiness", build)

    def set_recommended_pivot_type(self, pivot_type: PivotType) -> DecisionRecord | None:
        return self._update("set_recommended_pivot_type", lambda r: {"recommended_pivot_type": pivot_type})

    def update_hypothesis(self, hypothesis: Hypothesis) -> DecisionRecord | None:
        return self._update("update_hypothesis", lambda r: {"hypothesis_tested": hypothesis})

    def update_trajectory_indicators(self, **changes: str) -> DecisionRecord | None:
        return self._update(
            "update_trajectory_indicators",
            lambda r: {"trajectory_indicators": _merge(TrajectoryIndicators, r.trajectory_indicators, changes)},
        )

    # ------------------------------------------------------------------
    # Decision
    # ------------------------------------------------------------------

    def set_decision(self, decision: DecisionPath) -> DecisionRecord | None:
        return self._update("set_decision", lambda r: {"decision": decision})

    def update_decision_rationale(self, rationale: str) -> DecisionRecord | None:
        return self._update("update_decision_rationale", lambda r: {"decision_rationale": rationale})

    def update_next_actions(self, actions: list[str]) -> DecisionRecord | None:
        return self._update("update_next_actions", lambda r: {"next_actions": list(actions)})

    # ------------------------------------------------------------------
    # Evidence (id-keyed)
    # ------------------------------------------------------------------

    def add_evidence(self, evidence: Evidence) -> DecisionRecord | None:
        def build(r: DecisionRecord) -> dict[str, Any] | None:
            if any(e.id == evidence.id for e in r.contradictory_evidence):
                logger.warning("decision_duplicate_entry", collection="evidence", entry_id=evidence.id)
                return None
            return {"contradictory_evidence": [*r.contradictory_evidence, _with_quality_score(evidence)]}

        return self._update("add_evidence", build)

    def update_evidence(self, evidence_id: str, **changes: Any) -> DecisionRecord | None:
        def build(r: DecisionRecord) -> dict[str, Any] | None:
            if not any(e.id == evidence_id for e in r.contradictory_evidence):
                logger.warning("decision_unknown_entry", collection="evidence", entry_id=evidence_id)
                return None
            if isinstance(changes.get("quality"), dict):
                changes["quality"] = EvidenceQuality.model_validate(changes["quality"])
            evidence = [
                _with_quality_score(_merge(Evidence, e, {**changes, "id": e.id})) if e.id == evidence_id else e
                for e in r.contradictory_evidence
            ]
            return {"contradictory_evidence": evidence}

        return self._update("update_evidence", build)

    def delete_evidence(self, evidence_id: str) -> DecisionRecord | None:
        def build(r: DecisionRecord) -> dict[str, Any] | None:
            remaining = [e for e in r.contradictory_evidence if e.id != evidence_id]
            if len(remaining) == len(r.contradictory_evidence):
                logger.warning("decision_unknown_entry", collection="evidence", entry_id=evidence_id)
                return None
            return {"contradictory_evidence": remaining}

        return self._update("delete_evidence", build)

    # ------------------------------------------------------------------
    # Quantitative metrics
    # ------------------------------------------------------------------

    def update_product_market_fit(self, pmf: ProductMarketFit) -> DecisionRecord | None:
        return self._update("update_product_market_fit", lambda r: {"product_market_fit": pmf})

    def update_retention_metrics(self, retention: RetentionMetrics) -> DecisionRecord | None:
        return self._update("update_retention_metrics", lambda r: {"retention_metrics": retention})

    def update_unit_economics(self, economics: UnitEconomics | dict[str, Any]) -> DecisionRecord | None:
        def build(r: DecisionRecord) -> dict[str, Any]:
            validated = UnitEconomics.model_validate(economics)
            ratio = compute_ltv_cac_ratio(validated.ltv, validated.cac)
            return {"unit_economics": validated.model_copy(update={"ltv_cac_ratio": ratio})}

        return self._update("update_unit_economics", build)

    # ------------------------------------------------------------------
    # Qualitative insights
    # ------------------------------------------------------------------

    def update_jobs_to_be_done(self, jobs: JobsToBeDone) -> DecisionRecord | None:
        return self._update("update_jobs_to_be_done", lambda r: {"jobs_to_be_done": jobs})

    def add_pain_point(self, pain_point: PainPoint) -> DecisionRecord | None:
        def build(r: DecisionRecord) -> dict[str, Any] | None:
            if any(p.id == pain_point.id for p in r.pain_points):
                logger.warning("decision_duplicate_entry", collection="pain_points", entry_id=pain_point.id)
                return None
            return {"pain_points": [*r.pain_points, pain_point]}

        return self._update("add_pain_point", build)

    def update_pain_point(self, pain_point_id: str, **changes: Any) -> DecisionRecord | None:
        def build(r: DecisionRecord) -> dict[str, Any] | None:
            if not any(p.id == pain_point_id for p in r.pain_points):
                logger.warning("decision_unknown_entry", collection="pain_points", entry_id=pain_point_id)
                return None
            return {
                "pain_points": [
                    _merge(PainPoint, p, {**changes, "id": p.id}) if p.id == pain_point_id else p
                    for p in r.pain_points
                ]
            }

        return self._update("update_pain_point", build)

    def delete_pain_point(self, pain_point_id: str) -> DecisionRecord | None:
        def build(r: DecisionRecord) -> dict[str, Any] | None:
            remaining = [p for p in r.pain_points if p.id != pain_point_id]
            if len(remaining) == len(r.pain_points):
                logger.warning("decision_unknown_entry", collection="pain_points", entry_id=pain_point_id)
                return None
            return {"pain_points": remaining}

        return self._update("delete_pain_point", build)

    def add_customer_quote(self, quote: Quote) -> DecisionRecord | None:
        def build(r: DecisionRecord) -> dict[str, Any] | None:
            if any(q.id == quote.id for q in r.customer_quotes):
                logger.warning("decision_duplicate_entry", collection="customer_quotes", entry_id=quote.id)
                return None
            return {"customer_quotes": [*r.customer_quotes, quote]}

        return self._update("add_customer_quote", build)

    def update_customer_quote(self, quote_id: str, **changes: Any) -> DecisionRecord | None:
        def build(r: DecisionRecord) -> dict[str, Any] | None:
            if not any(q.id == quote_id for q in r.customer_quotes):
                logger.warning("decision_unknown_entry", collection="customer_quotes", entry_id=quote_id)
                return None
            return {
                "customer_quotes": [
                    _merge(Quote, q, {**changes, "id": q.id}) if q.id == quote_id else q
                    for q in r.customer_quotes
                ]
            }

        return self._update("update_customer_quote", build)

    def delete_customer_quote(self, quote_id: str) -> DecisionRecord | None:
        def build(r: DecisionRecord) -> dict[str, Any] | None:
            remaining = [q for q in r.customer_quotes if q.id != quote_id]
            if len(remaining) == len(r.customer_quotes):
                logger.warning("decision_unknown_entry", collection="customer_quotes", entry_id=quote_id)
                return None
            return {"customer_quotes": remaining}

        return self._update("delete_customer_quote", build)

    # ------------------------------------------------------------------
    # Reflection
    # ------------------------------------------------------------------

    def update_lessons_learned(self, lessons: list[str]) -> DecisionRecord | None:
        return self._update("update_lessons_learned", lambda r: {"lessons_learned": list(lessons)})

    def add_bias_identified(self, bias: CognitiveBias) -> DecisionRecord | None:
        def build(r: DecisionRecord) -> dict[str, Any] | None:
            bias_value = CognitiveBias(bias)
            if bias_value in r.biases_identified:
                return None
            return {"biases_identified": [*r.biases_identified, bias_value]}

        return self._update("add_bias_identified", build)

    def remove_bias_identified(self, bias: CognitiveBias) -> DecisionRecord | None:
        def build(r: DecisionRecord) -> dict[str, Any] | None:
            remaining = [b for b in r.biases_identified if b != bias]
            if len(remaining) == len(r.biases_identified):
                return None
            return {"biases_identified": remaining}

        return self._update("remove_bias_identified", build)

    def update_confidence_level(self, level: int) -> DecisionRecord | None:
        return self._update("update_confidence_level", lambda r: {"confidence_level": level})

    def update_advisors_consulted(self, advisors: list[str]) -> DecisionRecord | None:
        return self._update("update_advisors_consulted", lambda r: {"external_advisors_consulted": list(advisors)})

    def add_time_spent(self, minutes: int) -> DecisionRecord | None:
        return self._update("add_time_spent", lambda r: {"time_spent_minutes": r.time_spent_minutes + minutes})

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    def complete_decision(self) -> DecisionRecord | None:
        """Stamp completed_at once. The record is terminal afterwards."""

        def build(r: DecisionRecord) -> dict[str, Any] | None:
            if r.completed_at is not None:
                return None
            stamp = self._next_timestamp(r.updated_at)
            return {"completed_at": stamp, "updated_at": stamp}

        updated = self._update("complete_decision", build)
        if updated is not None:
            logger.info("decision_completed", record_id=updated.id, decision=str(updated.decision))
        return updated
