"""Tests for the scoring engine.

Tests enforce pure function behavior:
- Deterministic outputs
- Missing inputs yield None / unknown, never exceptions
- Half-up rounding
"""

import pytest

from pivot_workflow.domain.scoring import (
    SignalStrength,
    classify_economics_signal,
    classify_pmf_signal,
    classify_retention_signal,
    classify_trajectory,
    compute_decision_insights,
    compute_evidence_quality,
    compute_ltv_cac_ratio,
    compute_overall_confidence,
    compute_progress_summary,
    compute_readiness_score,
    confidence_label,
    readiness_level,
    recommend_decision,
    round_half_up,
)
from pivot_workflow.schemas.decision_record import (
    ConfidenceAssessment,
    DecisionMode,
    DecisionPath,
    DecisionRecord,
    Evidence,
    EvidenceQuality,
    PivotReadiness,
    ProductMarketFit,
    RetentionMetrics,
    Trajectory,
    TrajectoryIndicators,
    UnitEconomics,
)

pytestmark = pytest.mark.unit

I, F, D = Trajectory.IMPROVING, Trajectory.FLAT, Trajectory.DECLINING


# ============================================================================
# Weighted scores
# ============================================================================


def test_round_half_up_never_rounds_to_even():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(64.49) == 64


def test_overall_confidence_weighted_example():
    """80/70/60/50/40 -> 24 + 17.5 + 12 + 7.5 + 4 = 65."""
    assert compute_overall_confidence(80, 70, 60, 50, 40) == 65


def test_overall_confidence_extremes():
    assert compute_overall_confidence(0, 0, 0, 0, 0) == 0
    assert compute_overall_confidence(100, 100, 100, 100, 100) == 100


def test_overall_confidence_missing_dimension_is_none():
    assert compute_overall_confidence(80, None, 60, 50, 40) is None


def test_evidence_quality_bounds():
    assert compute_evidence_quality(5, 5, 5, 5) == 100
    assert compute_evidence_quality(1, 1, 1, 1) == 20
    assert compute_evidence_quality(3, 3, 3, 3) == 60


def test_evidence_quality_missing_rating_is_none():
    assert compute_evidence_quality(5, None, 5, 5) is None


def test_readiness_score_mean():
    assert compute_readiness_score(3, 3, 3, 3, 3) == 3
    assert compute_readiness_score(5, 5, 5, 5, 5) == 5
    assert compute_readiness_score(1, 1, 1, 1, 1) == 1


def test_readiness_score_rounds_half_up():
    """Mean of 3.4 rounds down; mean of 3.6 rounds up."""
    assert compute_readiness_score(3, 3, 3, 4, 4) == 3
    assert compute_readiness_score(3, 4, 4, 4, 3) == 4


def test_readiness_score_missing_is_none():
    assert compute_readiness_score(3, 3, None, 3, 3) is None


def test_ltv_cac_ratio():
    assert compute_ltv_cac_ratio(900, 300) == 3.0
    assert compute_ltv_cac_ratio(100, 0) is None
    assert compute_ltv_cac_ratio(100, -5) is None
    assert compute_ltv_cac_ratio(None, 300) is None
    assert compute_ltv_cac_ratio(900, None) is None


# ============================================================================
# Signal classification
# ============================================================================


@pytest.mark.parametrize(
    "score,expected",
    [
        (None, SignalStrength.UNKNOWN),
        (0, SignalStrength.WEAK),
        (24.9, SignalStrength.WEAK),
        (25, SignalStrength.MIXED),
        (39, SignalStrength.MIXED),
        (40, SignalStrength.STRONG),
        (100, SignalStrength.STRONG),
    ],
)
def test_classify_pmf_signal(score, expected):
    assert classify_pmf_signal(score) == expected


def test_classify_retention_signal():
    assert classify_retention_signal(None) == SignalStrength.UNKNOWN
    assert classify_retention_signal(45) == SignalStrength.STRONG
    assert classify_retention_signal(20) == SignalStrength.MIXED
    assert classify_retention_signal(5) == SignalStrength.WEAK


def test_classify_economics_signal():
    assert classify_economics_signal(None) == SignalStrength.UNKNOWN
    assert classify_economics_signal(3.0) == SignalStrength.STRONG
    assert classify_economics_signal(2.0) == SignalStrength.MIXED
    assert classify_economics_signal(1.0) == SignalStrength.WEAK


# ============================================================================
# Trajectory
# ============================================================================


def test_trajectory_exactly_one_point_five_is_improving():
    """2+2+1+1 = 6 / 4 = 1.5."""
    assert classify_trajectory(I, I, F, F) == Trajectory.IMPROVING


def test_trajectory_exactly_point_seven_five_is_flat():
    """1+1+1+0 = 3 / 4 = 0.75."""
    assert classify_trajectory(F, F, F, D) == Trajectory.FLAT


def test_trajectory_point_five_is_declining():
    """1+1+0+0 = 2 / 4 = 0.5."""
    assert classify_trajectory(F, F, D, D) == Trajectory.DECLINING


def test_trajectory_all_flat_is_flat():
    assert classify_trajectory(F, F, F, F) == Trajectory.FLAT


def test_trajectory_accepts_string_values():
    assert classify_trajectory("improving", "improving", "improving", "declining") == Trajectory.IMPROVING


def test_trajectory_missing_indicator_is_none():
    assert classify_trajectory(I, None, I, I) is None


# ============================================================================
# Recommendation table
# ============================================================================


@pytest.mark.parametrize(
    "pmf,trajectory,expected",
    [
        (45, I, DecisionPath.PROCEED),
        (45, F, DecisionPath.PROCEED),
        (45, D, DecisionPath.PATCH),
        (30, I, DecisionPath.PATCH),
        (30, F, DecisionPath.PIVOT),
        (30, D, DecisionPath.PIVOT),
        (10, I, DecisionPath.PATCH),
        (10, F, DecisionPath.PIVOT),
        (10, D, DecisionPath.PIVOT),
        (40, F, DecisionPath.PROCEED),
        (25, I, DecisionPath.PATCH),
    ],
)
def test_recommend_decision_table(pmf, trajectory, expected):
    recommendation = recommend_decision(pmf, trajectory)
    assert recommendation is not None
    assert recommendation.decision == expected
    assert recommendation.reasoning


def test_recommend_decision_missing_pmf_counts_as_zero():
    assert recommend_decision(None, I).decision == DecisionPath.PATCH
    assert recommend_decision(None, D).decision == DecisionPath.PIVOT


def test_recommend_decision_missing_trajectory_is_none():
    assert recommend_decision(50, None) is None


# ============================================================================
# Labels
# ============================================================================


def test_confidence_label_thresholds():
    assert confidence_label(80) == "Very High"
    assert confidence_label(65) == "High"
    assert confidence_label(40) == "Medium"
    assert confidence_label(20) == "Low"
    assert confidence_label(19) == "Very Low"
    assert confidence_label(None) is None


def test_readiness_level_thresholds():
    assert readiness_level(5) == "High"
    assert readiness_level(3) == "Medium"
    assert readiness_level(2) == "Low"
    assert readiness_level(None) is None


# ============================================================================
# Progress summary
# ============================================================================


def test_progress_summary_composite_score():
    """10 assumptions, 5 validated, 0 invalidated, 25 interviews, confidence 4."""
    summary = compute_progress_summary(
        interviews_count=25,
        assumptions_total=10,
        assumptions_validated=5,
        assumptions_invalidated=0,
        validated_confidences=[4, 4, 4, 4, 4],
    )
    # 50% tested -> 20, 100% success -> 30, 25/50 interviews -> 10, 4/5 -> 8
    assert summary.validation_rate == 50
    assert summary.pmf_score == 68
    assert summary.interviews_benchmark == 50
    assert summary.pmf_benchmark == 40


def test_progress_summary_interviews_capped():
    summary = compute_progress_summary(200, 1, 1, 0, [5])
    assert summary.pmf_score == 100


def test_progress_summary_without_interviews_has_no_score():
    summary = compute_progress_summary(0, 10, 3, 2)
    assert summary.pmf_score is None
    assert summary.validation_rate == 50


def test_progress_summary_without_assumptions_has_no_score():
    summary = compute_progress_summary(12, 0, 0, 0)
    assert summary.pmf_score is None
    assert summary.validation_rate == 0


# ============================================================================
# Insights
# ============================================================================


def test_insights_for_missing_record_are_empty():
    insights = compute_decision_insights(None)
    assert insights.overall_confidence is None
    assert insights.recommendation is None
    assert insights.pmf_signal == SignalStrength.UNKNOWN


def test_insights_for_full_record():
    record = DecisionRecord.new("project-001", DecisionMode.DETAILED, record_id="d-1").model_copy(
        update={
            "confidence_assessment": ConfidenceAssessment(market=80, product=70, team=60, resource=50, timing=40),
            "pivot_readiness": PivotReadiness(proof=4, insight=4, viability=4, organization=4, timing=4),
            "unit_economics": UnitEconomics(ltv=600, cac=200),
            "product_market_fit": ProductMarketFit(pmf_score=42),
            "retention_metrics": RetentionMetrics(day7=18),
            "trajectory_indicators": TrajectoryIndicators(pmf=I, retention=I, engagement=F, sentiment=F),
            "contradictory_evidence": [
                Evidence(id="e1", description="Churn spike", source="Analytics", quality=EvidenceQuality(
                    source_credibility=5, sample_size=5, recency=5, directness=5)),
                Evidence(id="e2", description="Anecdote", source="Call"),
            ],
        }
    )

    insights = compute_decision_insights(record)

    assert insights.overall_confidence == 65
    assert insights.confidence_label == "High"
    assert insights.readiness_score == 4
    assert insights.readiness_level == "High"
    assert insights.ltv_cac_ratio == 3.0
    assert insights.economics_signal == SignalStrength.STRONG
    assert insights.pmf_signal == SignalStrength.STRONG
    assert insights.retention_signal == SignalStrength.WEAK
    assert insights.trajectory == Trajectory.IMPROVING
    assert insights.recommendation.decision == DecisionPath.PROCEED
    assert insights.evidence_quality == {"e1": 100, "e2": None}
