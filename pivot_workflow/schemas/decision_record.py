"""Decision record Pydantic models.

One DecisionRecord exists per (project, open decision cycle). Every model is
frozen: the DecisionStore produces a new instance for each change and nested
objects are replaced wholesale.
"""

import uuid
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field


class DecisionMode(StrEnum):
    """Workflow depth, chosen once before the first step."""

    EASY = "easy"
    DETAILED = "detailed"


class DecisionPath(StrEnum):
    """The three outcomes a founder can choose."""

    PROCEED = "proceed"
    PATCH = "patch"
    PIVOT = "pivot"


class CognitiveBias(StrEnum):
    CONFIRMATION = "confirmation"
    SUNK_COST = "sunk-cost"
    OVERCONFIDENCE = "overconfidence"
    ESCALATION_OF_COMMITMENT = "escalation-of-commitment"
    OPTIMISM = "optimism"


class PivotType(StrEnum):
    ZOOM_IN = "zoom-in"
    ZOOM_OUT = "zoom-out"
    CUSTOMER_SEGMENT = "customer-segment"
    CUSTOMER_NEED = "customer-need"
    PLATFORM = "platform"
    BUSINESS_ARCHITECTURE = "business-architecture"
    VALUE_CAPTURE = "value-capture"
    ENGINE_OF_GROWTH = "engine-of-growth"
    CHANNEL = "channel"
    TECHNOLOGY = "technology"


class Trajectory(StrEnum):
    """Direction of a metric over recent time."""

    IMPROVING = "improving"
    FLAT = "flat"
    DECLINING = "declining"


class HypothesisResult(StrEnum):
    VALIDATED = "validated"
    INVALIDATED = "invalidated"
    INCONCLUSIVE = "inconclusive"
    PENDING = "pending"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


# ──────────────────────────────────────────────────────────────────────────────
# Detailed-mode evidence and metrics
# ──────────────────────────────────────────────────────────────────────────────


class EvidenceQuality(_Frozen):
    """Four 1-5 ratings plus the derived 20-100 quality score."""

    source_credibility: int = Field(default=3, ge=1, le=5)
    sample_size: int = Field(default=3, ge=1, le=5)
    recency: int = Field(default=3, ge=1, le=5)
    directness: int = Field(default=3, ge=1, le=5)
    overall: int | None = None


class Evidence(_Frozen):
    id: str
    description: str
    source: str
    contradicts: bool = True
    quality: EvidenceQuality | None = None


class ProductMarketFit(_Frozen):
    pmf_score: float | None = Field(default=None, ge=0, le=100)
    survey_responses: int = Field(default=0, ge=0)
    methodology: str = "Sean Ellis test"


class RetentionMetrics(_Frozen):
    day1: float | None = Field(default=None, ge=0, le=100)
    day7: float | None = Field(default=None, ge=0, le=100)
    day30: float | None = Field(default=None, ge=0, le=100)


class UnitEconomics(_Frozen):
    ltv: float | None = None
    cac: float | None = None
    ltv_cac_ratio: float | None = None
    monthly_burn: float | None = None
    months_runway: float | None = None


class JobsToBeDone(_Frozen):
    functional_job: str
    emotional_job: str | None = None
    social_job: str | None = None


class PainPoint(_Frozen):
    id: str
    description: str
    frequency: str = "high"
    intensity: str = "high"


class Quote(_Frozen):
    id: str
    text: str
    source: str
    sentiment: str = "negative"


class Hypothesis(_Frozen):
    """The single most recent hypothesis cycle."""

    statement: str = ""
    test_conducted: str = ""
    evidence_gathered: str = ""
    result: HypothesisResult = HypothesisResult.INCONCLUSIVE
    next_hypothesis: str | None = None


class TrajectoryIndicators(_Frozen):
    """Founder-tagged direction of the four leading indicators."""

    pmf: Trajectory = Trajectory.FLAT
    retention: Trajectory = Trajectory.FLAT
    engagement: Trajectory = Trajectory.FLAT
    sentiment: Trajectory = Trajectory.FLAT


# ──────────────────────────────────────────────────────────────────────────────
# Debiasing and self-assessment
# ──────────────────────────────────────────────────────────────────────────────


class ReframingResponses(_Frozen):
    inheritance_question: str = ""  # "If you inherited this project today..."
    contradiction_question: str = ""  # "What evidence contradicts your view?"
    temporal_question: str = ""  # "What would this week's data tell a newcomer?"


class ConfidenceAssessment(_Frozen):
    """Five confidence dimensions (0-100) and their weighted overall score."""

    market: int = Field(default=50, ge=0, le=100)
    product: int = Field(default=50, ge=0, le=100)
    team: int = Field(default=50, ge=0, le=100)
    resource: int = Field(default=50, ge=0, le=100)
    timing: int = Field(default=50, ge=0, le=100)
    overall: int | None = None


class PivotReadiness(_Frozen):
    """PIVOT readiness checklist: Proof, Insight, Viability, Organization, Timing (1-5)."""

    proof: int = Field(default=3, ge=1, le=5)
    insight: int = Field(default=3, ge=1, le=5)
    viability: int = Field(default=3, ge=1, le=5)
    organization: int = Field(default=3, ge=1, le=5)
    timing: int = Field(default=3, ge=1, le=5)
    overall: int | None = None


def _utcnow() -> datetime:
    return datetime.now(UTC)


class DecisionRecord(_Frozen):
    """Complete state of one proceed / patch / pivot decision cycle."""

    # Identity
    id: str
    project_id: str
    mode: DecisionMode
    iteration_id: str | None = None

    # Outcome
    decision: DecisionPath | None = None
    decision_rationale: str = ""
    next_actions: list[str] = Field(default_factory=list)

    # Cognitive debiasing
    pre_mortem_insights: list[str] = Field(default_factory=list)
    reframing_responses: ReframingResponses = Field(default_factory=ReframingResponses)
    contradictory_evidence: list[Evidence] = Field(default_factory=list)

    # Quantitative metrics (detailed mode)
    product_market_fit: ProductMarketFit | None = None
    retention_metrics: RetentionMetrics | None = None
    unit_economics: UnitEconomics | None = None

    # Qualitative insights (detailed mode)
    jobs_to_be_done: JobsToBeDone | None = None
    pain_points: list[PainPoint] = Field(default_factory=list)
    customer_quotes: list[Quote] = Field(default_factory=list)

    # Assessments
    confidence_assessment: ConfidenceAssessment | None = None
    pivot_readiness: PivotReadiness | None = None
    recommended_pivot_type: PivotType | None = None
    hypothesis_tested: Hypothesis | None = None
    trajectory_indicators: TrajectoryIndicators | None = None

    # Reflection
    lessons_learned: list[str] = Field(default_factory=list)
    biases_identified: list[CognitiveBias] = Field(default_factory=list)
    confidence_level: int = Field(default=50, ge=0, le=100)
    external_advisors_consulted: list[str] = Field(default_factory=list)
    time_spent_minutes: int = Field(default=0, ge=0)

    # Lifecycle
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    completed_at: datetime | None = None

    @classmethod
    def new(
        cls,
        project_id: str,
        mode: DecisionMode,
        record_id: str | None = None,
        now: datetime | None = None,
        confidence_level: int = 50,
    ) -> Self:
        """Create a fresh, empty record for a project at the moment a mode is chosen."""
        now = now or _utcnow()
        return cls(
            id=record_id or str(uuid.uuid4()),
            project_id=project_id,
            mode=mode,
            confidence_level=confidence_level,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def to_store_fields(self) -> dict[str, Any]:
        """JSON-safe field mapping written to the decision record store."""
        return self.model_dump(mode="json")

    @classmethod
    def from_store(cls, data: dict[str, Any]) -> Self:
        return cls.model_validate(data)
