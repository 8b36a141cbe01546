"""Transcript analysis: local timing metrics, output schema and weighted scoring."""

import re
from typing import Any, Optional, Sequence, Union

from pydantic import ValidationError

from .models import CriterionScore, PitchAnalysis, RubricDraft, TimingInfo
from .schema import FieldKind, FieldSpec, ObjectSchema, Rejected, rejection_from_model_error, strip_nulls, validate

MIN_SCORE = 0.0
MAX_SCORE = 10.0

SUMMARY_SCHEMA = ObjectSchema(
    name="summary",
    fields=(
        FieldSpec("overall_score", FieldKind.NUMBER, required=True, minimum=MIN_SCORE, maximum=MAX_SCORE),
        FieldSpec("overall_notes", FieldKind.TEXT, required=True),
        FieldSpec("top_strengths", FieldKind.ARRAY, items=FieldKind.TEXT),
        FieldSpec("top_improvements", FieldKind.ARRAY, items=FieldKind.TEXT),
    ),
)

CRITERION_SCORE_SCHEMA = ObjectSchema(
    name="rubric score",
    fields=(
        FieldSpec("criterion_label", FieldKind.TEXT, required=True, non_empty=True),
        FieldSpec("score", FieldKind.NUMBER, required=True, minimum=MIN_SCORE, maximum=MAX_SCORE),
        FieldSpec("notes", FieldKind.TEXT, required=True),
        FieldSpec("evidence_quotes", FieldKind.ARRAY, items=FieldKind.TEXT),
        FieldSpec("missing", FieldKind.BOOLEAN),
    ),
)

LINE_NOTE_SCHEMA = ObjectSchema(
    name="line note",
    fields=(
        FieldSpec("quote", FieldKind.TEXT, required=True, non_empty=True),
        FieldSpec("type", FieldKind.TEXT),
        FieldSpec("comment", FieldKind.TEXT, required=True),
        FieldSpec("action", FieldKind.TEXT),
        FieldSpec("priority", FieldKind.TEXT),
    ),
)

ANALYSIS_SCHEMA = ObjectSchema(
    name="analysis",
    fields=(
        FieldSpec("summary", FieldKind.OBJECT, required=True, schema=SUMMARY_SCHEMA),
        FieldSpec(
            "rubric_scores",
            FieldKind.ARRAY,
            required=True,
            min_items=1,
            item_label="rubric scores",
            items=CRITERION_SCORE_SCHEMA,
        ),
        FieldSpec("line_by_line", FieldKind.ARRAY, items=LINE_NOTE_SCHEMA),
    ),
)

_WORD_PATTERN = re.compile(r"\S+")


def count_words(transcript: Optional[str]) -> int:
    """Count whitespace-separated words."""
    if not transcript:
        return 0
    return len(_WORD_PATTERN.findall(transcript))


def words_per_minute(word_count: int, audio_seconds: Optional[float]) -> Optional[int]:
    """Speaking pace, or None when the duration is unknown or not positive."""
    if not audio_seconds or audio_seconds <= 0:
        return None
    return round(word_count / audio_seconds * 60)


def compute_timing(
    transcript: str,
    rubric: RubricDraft,
    audio_seconds: Optional[float] = None,
) -> TimingInfo:
    """Timing metrics that are never left to the model."""
    word_count = count_words(transcript)
    return TimingInfo(
        word_count=word_count,
        target_seconds=rubric.target_duration_seconds,
        max_seconds=rubric.max_duration_seconds,
        audio_seconds=audio_seconds,
        words_per_minute=words_per_minute(word_count, audio_seconds),
    )


def weighted_score(scores: Sequence[CriterionScore], rubric: RubricDraft) -> Optional[float]:
    """
    Weight-averaged score over the rubric's criteria.

    Scores are matched to criteria by label, case-insensitively. Criteria the
    model did not score are skipped. Returns None when nothing matched.
    """
    weights = {c.name.strip().lower(): c.weight for c in rubric.criteria}

    total = 0.0
    weight_sum = 0.0
    for item in scores:
        weight = weights.get(item.criterion_label.strip().lower())
        if weight is None:
            continue
        total += weight * item.score
        weight_sum += weight

    if weight_sum == 0:
        return None
    score = total / weight_sum
    # Clamp to the 0..10 scale
    score = max(MIN_SCORE, min(MAX_SCORE, score))
    return round(score, 1)


def validate_analysis(value: Any) -> Union[PitchAnalysis, Rejected]:
    """Validate model output against the analysis schema."""
    result = validate(value, ANALYSIS_SCHEMA)
    if isinstance(result, Rejected):
        return result
    data = strip_nulls(result.value)
    try:
        return PitchAnalysis(
            summary=data["summary"],
            rubric_scores=data["rubric_scores"],
            line_by_line=data.get("line_by_line", []),
        )
    except ValidationError as e:
        return rejection_from_model_error(e)


def finalize_analysis(
    analysis: PitchAnalysis,
    transcript: str,
    rubric: RubricDraft,
    audio_seconds: Optional[float] = None,
) -> PitchAnalysis:
    """Attach locally computed timing and the weighted score."""
    return analysis.model_copy(update={
        "timing": compute_timing(transcript, rubric, audio_seconds),
        "weighted_score": weighted_score(analysis.rubric_scores, rubric),
    })
