"""Reference content for the decision workflow.

Benchmarks, decision criteria, the ten pivot types and the cognitive bias
glossary. Static data only -- no logic beyond lookups.
"""

from dataclasses import dataclass

from pivot_workflow.schemas.decision_record import CognitiveBias, DecisionPath, PivotType

# Thresholds the scoring engine and the progress step compare against
PMF_PROCEED_THRESHOLD = 40
PMF_PATCH_MIN = 25
INTERVIEWS_TARGET = 50
VALIDATION_RATE_MIN = 50
LTV_CAC_RATIO_MIN = 3.0
LTV_CAC_RATIO_MIXED = 1.5
RETENTION_DAY7_GOOD = 40
RETENTION_DAY7_MIXED = 20


@dataclass(frozen=True)
class DecisionCriteria:
    description: str
    indicators: tuple[str, ...]


DECISION_CRITERIA: dict[DecisionPath, DecisionCriteria] = {
    DecisionPath.PROCEED: DecisionCriteria(
        description="Continue with incremental improvements",
        indicators=("PMF score >40%", "Retention curves flattening", "LTV:CAC >3:1"),
    ),
    DecisionPath.PATCH: DecisionCriteria(
        description="Make structural changes without abandoning core",
        indicators=("PMF 25-40%", "Single channel/segment issues", "Feature gaps identified"),
    ),
    DecisionPath.PIVOT: DecisionCriteria(
        description="Fundamental strategic change",
        indicators=("PMF <25%", "Declining retention", "No viable unit economics"),
    ),
}


@dataclass(frozen=True)
class PivotTypeDetail:
    type: PivotType
    label: str
    description: str
    examples: tuple[str, ...]
    when_to_use: str


PIVOT_TYPES: dict[PivotType, PivotTypeDetail] = {
    PivotType.ZOOM_IN: PivotTypeDetail(
        type=PivotType.ZOOM_IN,
        label="Zoom-in Pivot",
        description="One feature becomes the whole product",
        examples=("Instagram (photo filters from Burbn)", "YouTube (dating site video feature)"),
        when_to_use="When one feature has significantly higher engagement than others",
    ),
    PivotType.ZOOM_OUT: PivotTypeDetail(
        type=PivotType.ZOOM_OUT,
        label="Zoom-out Pivot",
        description="Product becomes a single feature of a larger product",
        examples=("Groupon (The Point activism platform)", "Slack (gaming company internal tool)"),
        when_to_use="When the product is too narrow and needs broader value proposition",
    ),
    PivotType.CUSTOMER_SEGMENT: PivotTypeDetail(
        type=PivotType.CUSTOMER_SEGMENT,
        label="Customer Segment Pivot",
        description="Same problem, different customer segment",
        examples=("Dropbox (consumers to enterprise)", "Slack (gaming to business)"),
        when_to_use="When a different segment shows much stronger product-market fit",
    ),
    PivotType.CUSTOMER_NEED: PivotTypeDetail(
        type=PivotType.CUSTOMER_NEED,
        label="Customer Need Pivot",
        description="Same customer, different problem",
        examples=("Twitter (podcasting to microblogging)", "Pinterest (shopping to inspiration)"),
        when_to_use="When you discover a more urgent problem for the same customer",
    ),
    PivotType.PLATFORM: PivotTypeDetail(
        type=PivotType.PLATFORM,
        label="Platform Pivot",
        description="Application to platform or vice versa",
        examples=("Shopify (store to platform)", "Flickr (gaming to photo sharing)"),
        when_to_use="When enabling others creates more value than doing it yourself",
    ),
    PivotType.BUSINESS_ARCHITECTURE: PivotTypeDetail(
        type=PivotType.BUSINESS_ARCHITECTURE,
        label="Business Architecture Pivot",
        description="High margin/low volume to low margin/high volume, or the reverse",
        examples=("Amazon (books to everything)", "Netflix (DVD to streaming)"),
        when_to_use="When unit economics require different business model",
    ),
    PivotType.VALUE_CAPTURE: PivotTypeDetail(
        type=PivotType.VALUE_CAPTURE,
        label="Value Capture Pivot",
        description="Change in monetization model",
        examples=("LinkedIn (subscriptions to freemium)", "Evernote (paid to freemium)"),
        when_to_use="When current monetization doesn't match value delivered",
    ),
    PivotType.ENGINE_OF_GROWTH: PivotTypeDetail(
        type=PivotType.ENGINE_OF_GROWTH,
        label="Engine of Growth Pivot",
        description="Switch between viral, sticky and paid growth",
        examples=("Facebook (viral growth)", "Salesforce (paid growth)"),
        when_to_use="When current growth engine is not scalable",
    ),
    PivotType.CHANNEL: PivotTypeDetail(
        type=PivotType.CHANNEL,
        label="Channel Pivot",
        description="Change in distribution strategy",
        examples=("Dell (retail to direct)", "Dollar Shave Club (retail to DTC)"),
        when_to_use="When a different channel has better unit economics",
    ),
    PivotType.TECHNOLOGY: PivotTypeDetail(
        type=PivotType.TECHNOLOGY,
        label="Technology Pivot",
        description="Same solution via different technology",
        examples=("Netflix (DVD to streaming)", "Apple (hardware to services)"),
        when_to_use="When new technology enables better solution delivery",
    ),
}


BIAS_DESCRIPTIONS: dict[CognitiveBias, str] = {
    CognitiveBias.CONFIRMATION: "Seeking evidence that confirms existing beliefs while ignoring contradictory data",
    CognitiveBias.SUNK_COST: "Continuing a course of action due to past investment rather than future value",
    CognitiveBias.OVERCONFIDENCE: "Overestimating the accuracy of your predictions and assessments",
    CognitiveBias.ESCALATION_OF_COMMITMENT: "Increasing commitment to a decision despite negative feedback",
    CognitiveBias.OPTIMISM: "Systematic underestimation of risks and overestimation of success probability",
}


def get_pivot_type_detail(pivot_type: PivotType | None) -> PivotTypeDetail | None:
    """Look up display details for a pivot type; None passes through."""
    if pivot_type is None:
        return None
    return PIVOT_TYPES[PivotType(pivot_type)]
