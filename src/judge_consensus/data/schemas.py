"""Pydantic schemas for judge evaluation and consensus data structures."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, computed_field


class TaskCategory(str, Enum):
    """Evaluation domains, each judged with its own rubric."""

    SINGLE_HOP_FACTUAL = "single_hop_factual"  # Direct retrieval of a single fact
    MULTI_HOP_REASONING = "multi_hop_reasoning"  # Connecting 2+ disparate facts
    SYNTHESIS = "synthesis"  # Multi-document summary / meta-analysis
    CODE_GENERATION = "code_generation"  # Technical logic, syntax accuracy
    INSTRUCTION_FOLLOWING = "instruction_following"  # Constraint satisfaction
    RAG_QUALITY = "rag_quality"  # Citation / grounding accuracy
    SAFETY = "safety"  # Robustness, adversarial resistance
    LATENCY = "latency"  # Cost / speed tradeoff


class BiasDirection(str, Enum):
    """Systematic direction of judge scores relative to human scores."""

    LENIENT = "lenient"
    STRICT = "strict"
    ALIGNED = "aligned"


class Winner(str, Enum):
    """Winner of a pairwise comparison."""

    SYSTEM = "system"
    BASELINE = "baseline"
    TIE = "tie"


class VoteChoice(str, Enum):
    """A single judge's sufficiency vote."""

    SYNTHESIS_WINS = "synthesis_wins"
    CRITIQUE_WINS = "critique_wins"


# =============================================================================
# CALIBRATION
# =============================================================================


class ScorePair(BaseModel):
    """One human/judge score observation on the 1-5 scale."""

    model_config = ConfigDict(populate_by_name=True)

    sample_id: str = Field(..., alias="sampleId", description="Identifier of the scored sample")
    human_score: float = Field(..., alias="humanScore", ge=1, le=5, description="Human score (1-5)")
    llm_score: float = Field(..., alias="llmScore", ge=1, le=5, description="Judge score (1-5)")
    category: str | None = Field(None, description="Optional category used for per-category calibration")


class CalibrationResult(BaseModel):
    """Outcome of comparing a set of score pairs."""

    pearson_r: float = Field(..., ge=-1, le=1, description="Pearson correlation, human vs judge")
    is_calibrated: bool = Field(..., description="True when pearson_r >= threshold")
    sample_count: int = Field(..., ge=0)
    mean_human: float = 0.0
    mean_llm: float = 0.0
    std_human: float = 0.0
    std_llm: float = 0.0
    bias_direction: BiasDirection = BiasDirection.ALIGNED
    bias_magnitude: float = Field(0.0, ge=0, description="|mean judge - mean human|")
    recommendations: list[str] = Field(default_factory=list)
    threshold: float = Field(0.85, description="Correlation threshold the verdict was made against")


class DriftReport(BaseModel):
    """Comparison of a fresh correlation against a stored baseline."""

    current_r: float
    baseline_r: float
    drift_amount: float = Field(..., description="current_r - baseline_r")
    has_drifted: bool = Field(..., description="True when |drift_amount| > threshold")
    threshold: float = 0.05
    samples_compared: int = 0
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Capture time of the report",
    )


class ScoresMetadata(BaseModel):
    """Provenance of a calibration data file."""

    model_config = ConfigDict(populate_by_name=True)

    evaluator: str
    date_collected: str = Field(..., alias="dateCollected")
    notes: str | None = None


class ScoresFile(BaseModel):
    """On-disk calibration data: human-labeled score pairs."""

    model_config = ConfigDict(populate_by_name=True)

    version: str = "1.0"
    score_pairs: list[ScorePair] = Field(default_factory=list, alias="scorePairs")
    metadata: ScoresMetadata | None = None


# =============================================================================
# PAIRWISE COMPARISON
# =============================================================================


class ComparisonResult(BaseModel):
    """Outcome of one debiased system-vs-baseline comparison."""

    winner: Winner
    reasoning: str = ""
    system_score: float = Field(
        0.0,
        description="Average of both trials, one decimal; kept on position-inconsistent ties",
    )
    baseline_score: float = Field(
        0.0,
        description="Average of both trials, one decimal; kept on position-inconsistent ties",
    )
    position_consistent: bool = Field(
        True, description="False when the trials disagreed; the winner is then a forced tie"
    )
    siu_applied: bool = Field(False, description="True when the verbosity correction decided the winner")


class GoldStandard(BaseModel):
    """Reference answer for a benchmark sample."""

    model_config = ConfigDict(populate_by_name=True)

    answer: str
    atomic_facts: list[str] = Field(default_factory=list, alias="atomicFacts")
    sources: list[str] = Field(default_factory=list)


class SampleResponses(BaseModel):
    """Pre-computed answers from the two systems under comparison."""

    system: str | None = Field(None, validation_alias=AliasChoices("system", "mcp"))
    baseline: str | None = Field(None, validation_alias=AliasChoices("baseline", "perplexity"))
    generated_at: str | None = Field(None, validation_alias=AliasChoices("generated_at", "generatedAt"))


class ComparisonSample(BaseModel):
    """A benchmark sample for pairwise comparison."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    category: TaskCategory
    query: str
    gold_standard: GoldStandard | None = Field(None, alias="goldStandard")
    responses: SampleResponses = Field(default_factory=SampleResponses)


class ComparisonOutcome(BaseModel):
    """A comparison result paired with the sample it was computed for."""

    sample: ComparisonSample
    result: ComparisonResult


# =============================================================================
# CHALLENGE & VOTE
# =============================================================================


class ChallengeCritique(BaseModel):
    """One critique point raised against a synthesis."""

    section: str = Field("overview", description="overview, global, or qN")
    issue: str

    def __str__(self) -> str:
        return f"[{self.section}] {self.issue}"


class ChallengeResult(BaseModel):
    """Output of attacking a synthesis."""

    critiques: list[ChallengeCritique] = Field(default_factory=list)
    raw_response: str = ""
    parse_method: str = Field("json", description="Which parsing stage produced the critiques")

    @computed_field
    @property
    def has_significant_gaps(self) -> bool:
        return len(self.critiques) > 0


class VoteDetail(BaseModel):
    """One judge's vote, kept with the model that cast it."""

    model: str
    vote: VoteChoice
    reasoning: str = ""
    critical_gaps: list[str] = Field(default_factory=list)
    defaulted: bool = Field(False, description="True when the vote is a fallback, not a parsed judgment")


class SufficiencyVote(BaseModel):
    """Aggregated ensemble vote on synthesis vs. critique."""

    sufficient: bool
    votes_for: int = Field(0, ge=0, description="synthesis_wins votes")
    votes_against: int = Field(0, ge=0, description="critique_wins votes")
    critical_gaps: list[str] = Field(default_factory=list)
    details: list[VoteDetail] = Field(default_factory=list)
