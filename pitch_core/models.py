"""Typed rubric, conversation and analysis models."""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

ALLOWED_ROLES: frozenset[str] = frozenset({"user", "assistant", "system"})


class ConversationMessage(BaseModel):
    """One role-tagged chat turn."""

    role: str
    content: str


class Criterion(BaseModel):
    """One scored dimension of a rubric."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str
    scoring_guide: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("scoring_guide", "scoringGuide"),
    )
    weight: float = 1.0


class RubricDraft(BaseModel):
    """A rubric that passed schema validation but is not persisted yet."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: Optional[str] = None
    target_duration_seconds: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("target_duration_seconds", "targetDurationSeconds"),
    )
    max_duration_seconds: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("max_duration_seconds", "maxDurationSeconds"),
    )
    criteria: list[Criterion]
    context_summary: Optional[str] = None
    guiding_questions: list[str] = Field(default_factory=list)


class SamplingParams(BaseModel):
    """Sampling parameters sent with a completion request."""

    temperature: float = 0.7
    max_tokens: int = 2000
    json_mode: bool = True


# ===================
# Analysis
# ===================
class AnalysisSummary(BaseModel):
    """Headline feedback for a pitch."""

    overall_score: float
    overall_notes: str
    top_strengths: list[str] = Field(default_factory=list)
    top_improvements: list[str] = Field(default_factory=list)


class CriterionScore(BaseModel):
    """Score and notes for one rubric criterion."""

    criterion_label: str
    score: float
    notes: str
    evidence_quotes: list[str] = Field(default_factory=list)
    missing: bool = False


class LineNote(BaseModel):
    """Feedback anchored to a verbatim quote."""

    quote: str
    type: str = "suggestion"
    comment: str
    action: Optional[str] = None
    priority: str = "medium"


class TimingInfo(BaseModel):
    """Timing metrics computed from the transcript, not by the model."""

    word_count: int
    target_seconds: Optional[float] = None
    max_seconds: Optional[float] = None
    audio_seconds: Optional[float] = None
    words_per_minute: Optional[int] = None


class PitchAnalysis(BaseModel):
    """Validated rubric-based feedback on a transcript."""

    summary: AnalysisSummary
    rubric_scores: list[CriterionScore]
    line_by_line: list[LineNote] = Field(default_factory=list)
    timing: Optional[TimingInfo] = None
    weighted_score: Optional[float] = None
