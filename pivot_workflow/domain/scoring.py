"""Scoring engine for the decision workflow.

Pure domain functions -- no side effects, no I/O, fully deterministic.
Missing inputs yield None (or SignalStrength.UNKNOWN) instead of raising.

Rounding is half-up (floor(x + 0.5)) everywhere, never banker's rounding:
a 2.5 readiness average is 3.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum

from pivot_workflow.domain.catalog import (
    INTERVIEWS_TARGET,
    LTV_CAC_RATIO_MIN,
    LTV_CAC_RATIO_MIXED,
    PMF_PATCH_MIN,
    PMF_PROCEED_THRESHOLD,
    RETENTION_DAY7_GOOD,
    RETENTION_DAY7_MIXED,
)
from pivot_workflow.schemas.decision_record import DecisionPath, DecisionRecord, Trajectory

# Weights for the five confidence dimensions (sum to 1.0)
CONFIDENCE_WEIGHTS: dict[str, float] = {
    "market": 0.30,
    "product": 0.25,
    "team": 0.20,
    "resource": 0.15,
    "timing": 0.10,
}

TRAJECTORY_POINTS: dict[Trajectory, int] = {
    Trajectory.IMPROVING: 2,
    Trajectory.FLAT: 1,
    Trajectory.DECLINING: 0,
}


class SignalStrength(StrEnum):
    STRONG = "strong"
    MIXED = "mixed"
    WEAK = "weak"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Recommendation:
    decision: DecisionPath
    reasoning: str


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def compute_overall_confidence(
    market: float | None,
    product: float | None,
    team: float | None,
    resource: float | None,
    timing: float | None,
) -> int | None:
    """Weighted average of the five confidence dimensions (each 0-100).

    Returns None if any dimension is missing.
    """
    if None in (market, product, team, resource, timing):
        return None
    return round_half_up(
        market * CONFIDENCE_WEIGHTS["market"]
        + product * CONFIDENCE_WEIGHTS["product"]
        + team * CONFIDENCE_WEIGHTS["team"]
        + resource * CONFIDENCE_WEIGHTS["resource"]
        + timing * CONFIDENCE_WEIGHTS["timing"]
    )


def compute_evidence_quality(
    source_credibility: int | None,
    sample_size: int | None,
    recency: int | None,
    directness: int | None,
) -> int | None:
    """Evidence quality score: four 1-5 ratings mapped onto 20-100."""
    ratings = (source_credibility, sample_size, recency, directness)
    if None in ratings:
        return None
    return round_half_up((sum(ratings) / 20) * 100)


def compute_readiness_score(
    proof: int | None,
    insight: int | None,
    viability: int | None,
    organization: int | None,
    timing: int | None,
) -> int | None:
    """PIVOT readiness overall: rounded mean of the five 1-5 dimensions."""
    dimensions = (proof, insight, viability, organization, timing)
    if None in dimensions:
        return None
    return round_half_up(sum(dimensions) / 5)


def compute_ltv_cac_ratio(ltv: float | None, cac: float | None) -> float | None:
    """LTV:CAC ratio, or None when either side is missing or CAC is not positive."""
    if ltv is None or cac is None or cac <= 0:
        return None
    return ltv / cac


def classify_pmf_signal(pmf_score: float | None) -> SignalStrength:
    if pmf_score is None:
        return SignalStrength.UNKNOWN
    if pmf_score >= PMF_PROCEED_THRESHOLD:
        return SignalStrength.STRONG
    if pmf_score >= PMF_PATCH_MIN:
        return SignalStrength.MIXED
    return SignalStrength.WEAK


def classify_retention_signal(day7_retention: float | None) -> SignalStrength:
    if day7_retention is None:
        return SignalStrength.UNKNOWN
    if day7_retention >= RETENTION_DAY7_GOOD:
        return SignalStrength.STRONG
    if day7_retention >= RETENTION_DAY7_MIXED:
        return SignalStrength.MIXED
    return SignalStrength.WEAK


def classify_economics_signal(ltv_cac_ratio: float | None) -> SignalStrength:
    if ltv_cac_ratio is None:
        return SignalStrength.UNKNOWN
    if ltv_cac_ratio >= LTV_CAC_RATIO_MIN:
        return SignalStrength.STRONG
    if ltv_cac_ratio >= LTV_CAC_RATIO_MIXED:
        return SignalStrength.MIXED
    return SignalStrength.WEAK


def classify_trajectory(
    pmf: Trajectory | None,
    retention: Trajectory | None,
    engagement: Trajectory | None,
    sentiment: Trajectory | None,
) -> Trajectory | None:
    """Combine four leading-indicator trends into one overall trajectory.

    improving=2, flat=1, declining=0; average >= 1.5 is improving,
    >= 0.75 is flat, anything lower is declining.
    """
    indicators = (pmf, retention, engagement, sentiment)
    if None in indicators:
        return None
    avg = sum(TRAJECTORY_POINTS[Trajectory(i)] for i in indicators) / 4

    if avg >= 1.5:
        return Trajectory.IMPROVING
    if avg >= 0.75:
        return Trajectory.FLAT
    return Trajectory.DECLINING


def recommend_decision(pmf_score: float | None, trajectory: Trajectory | None) -> Recommendation | None:
    """Recommend proceed / patch / pivot from current PMF and its trajectory.

    A missing PMF score counts as 0. Returns None without a trajectory.

    Rules:
        - PMF >= 40: Patch if declining, otherwise Proceed (flat included)
        - PMF 25-39: Patch if improving, otherwise Pivot
        - PMF < 25: Patch if improving, otherwise Pivot
    """
    if trajectory is None:
        return None
    current_pmf = pmf_score or 0

    if current_pmf >= PMF_PROCEED_THRESHOLD:
        if trajectory == Trajectory.DECLINING:
            return Recommendation(
                DecisionPath.PATCH,
                "Strong PMF but declining trajectory suggests structural issues need fixing",
            )
        return Recommendation(
            DecisionPath.PROCEED,
            "Strong PMF score and a trajectory that is not declining: clear signal to scale",
        )

    if current_pmf >= PMF_PATCH_MIN:
        if trajectory == Trajectory.IMPROVING:
            return Recommendation(
                DecisionPath.PATCH,
                "Improving trajectory is encouraging: targeted changes could push you over threshold",
            )
        return Recommendation(
            DecisionPath.PIVOT,
            "Trajectory in the patch zone is not improving: consider a strategic shift",
        )

    if trajectory == Trajectory.IMPROVING:
        return Recommendation(
            DecisionPath.PATCH,
            "Low score but improving trend: recent changes may be working, give them time",
        )
    return Recommendation(
        DecisionPath.PIVOT,
        "Low PMF without improving trajectory: strategic shift likely needed",
    )


def confidence_label(value: int | None) -> str | None:
    if value is None:
        return None
    if value >= 80:
        return "Very High"
    if value >= 60:
        return "High"
    if value >= 40:
        return "Medium"
    if value >= 20:
        return "Low"
    return "Very Low"


def readiness_level(overall: int | None) -> str | None:
    if overall is None:
        return None
    if overall >= 4:
        return "High"
    if overall >= 3:
        return "Medium"
    return "Low"


@dataclass(frozen=True)
class ProgressSummary:
    """Discovery progress shown on the shared "progress" step."""

    interviews_count: int
    interviews_benchmark: int
    assumptions_total: int
    assumptions_validated: int
    assumptions_invalidated: int
    validation_rate: int
    pmf_score: int | None
    pmf_benchmark: int = PMF_PROCEED_THRESHOLD


def compute_progress_summary(
    interviews_count: int,
    assumptions_total: int,
    assumptions_validated: int,
    assumptions_invalidated: int,
    validated_confidences: Sequence[float] = (),
) -> ProgressSummary:
    """Summarize discovery work and derive a PMF readiness score (0-100).

    The score is a composite, not a survey result:
        - 40%: share of assumptions tested (validated or invalidated)
        - 30%: share of tested assumptions that validated
        - 20%: completed interviews against the 50-interview benchmark (capped)
        - 10%: average confidence (1-5) of validated assumptions

    pmf_score is None until there is at least one assumption and one interview.
    """
    tested = assumptions_validated + assumptions_invalidated
    validation_rate = round_half_up(tested / assumptions_total * 100) if assumptions_total > 0 else 0

    pmf_score: int | None = None
    if assumptions_total > 0 and interviews_count > 0:
        validation_component = (validation_rate / 100) * 40
        success_rate = assumptions_validated / tested if tested > 0 else 0
        success_component = success_rate * 30
        interview_component = min(interviews_count / INTERVIEWS_TARGET, 1.0) * 20
        avg_confidence = sum(validated_confidences) / len(validated_confidences) if validated_confidences else 0
        confidence_component = (avg_confidence / 5) * 10
        pmf_score = round_half_up(
            validation_component + success_component + interview_component + confidence_component
        )

    return ProgressSummary(
        interviews_count=interviews_count,
        interviews_benchmark=INTERVIEWS_TARGET,
        assumptions_total=assumptions_total,
        assumptions_validated=assumptions_validated,
        assumptions_invalidated=assumptions_invalidated,
        validation_rate=validation_rate,
        pmf_score=pmf_score,
    )


@dataclass(frozen=True)
class DecisionInsights:
    """Every derived score for a record, computed in one pass."""

    overall_confidence: int | None = None
    confidence_label: str | None = None
    readiness_score: int | None = None
    readiness_level: str | None = None
    ltv_cac_ratio: float | None = None
    pmf_signal: SignalStrength = SignalStrength.UNKNOWN
    retention_signal: SignalStrength = SignalStrength.UNKNOWN
    economics_signal: SignalStrength = SignalStrength.UNKNOWN
    trajectory: Trajectory | None = None
    recommendation: Recommendation | None = None
    evidence_quality: dict[str, int | None] = field(default_factory=dict)


def compute_decision_insights(record: DecisionRecord | None) -> DecisionInsights:
    """Derive all scores from a record. An absent record yields empty insights."""
    if record is None:
        return DecisionInsights()

    overall_confidence = None
    if record.confidence_assessment is not None:
        ca = record.confidence_assessment
        overall_confidence = compute_overall_confidence(ca.market, ca.product, ca.team, ca.resource, ca.timing)

    readiness = None
    if record.pivot_readiness is not None:
        pr = record.pivot_readiness
        readiness = compute_readiness_score(pr.proof, pr.insight, pr.viability, pr.organization, pr.timing)

    ratio = None
    if record.unit_economics is not None:
        ratio = compute_ltv_cac_ratio(record.unit_economics.ltv, record.unit_economics.cac)

    pmf_score = record.product_market_fit.pmf_score if record.product_market_fit else None
    day7 = record.retention_metrics.day7 if record.retention_metrics else None

    trajectory = None
    if record.trajectory_indicators is not None:
        ti = record.trajectory_indicators
        trajectory = classify_trajectory(ti.pmf, ti.retention, ti.engagement, ti.sentiment)

    evidence_quality = {}
    for evidence in record.contradictory_evidence:
        q = evidence.quality
        evidence_quality[evidence.id] = (
            compute_evidence_quality(q.source_credibility, q.sample_size, q.recency, q.directness) if q else None
        )

    return DecisionInsights(
        overall_confidence=overall_confidence,
        confidence_label=confidence_label(overall_confidence),
        readiness_score=readiness,
        readiness_level=readiness_level(readiness),
        ltv_cac_ratio=ratio,
        pmf_signal=classify_pmf_signal(pmf_score),
        retention_signal=classify_retention_signal(day7),
        economics_signal=classify_economics_signal(ratio),
        trajectory=trajectory,
        recommendation=recommend_decision(pmf_score, trajectory),
        evidence_quality=evidence_quality,
    )
