"""Rubric draft schemas, validation and boundary translation.

Three rubric shapes exist in stored data and model output:

- legacy criteria ``{key, label}``,
- builder criteria ``{id, name, description, scoringGuide}``,
- copilot responses ``{name, context_summary, guiding_questions, criteria[].scoring_guide}``.

``RubricDraft`` is the single internal representation; everything else is
translated here before or after validation.
"""

from typing import Any, Optional, Union

from pydantic import ValidationError

from .models import RubricDraft
from .schema import FieldKind, FieldSpec, ObjectSchema, Rejected, rejection_from_model_error, strip_nulls, validate

MIN_CRITERIA = 3

CRITERION_SCHEMA = ObjectSchema(
    name="criterion",
    fields=(
        FieldSpec("name", FieldKind.TEXT, required=True, non_empty=True),
        FieldSpec("description", FieldKind.TEXT, required=True, non_empty=True),
        FieldSpec("scoring_guide", FieldKind.TEXT, aliases=("scoringGuide",)),
        FieldSpec("weight", FieldKind.NUMBER, minimum=0, exclusive_minimum=True),
    ),
)

RUBRIC_DRAFT_SCHEMA = ObjectSchema(
    name="rubric draft",
    fields=(
        FieldSpec("title", FieldKind.TEXT, required=True, non_empty=True),
        FieldSpec("description", FieldKind.TEXT),
        FieldSpec("target_duration_seconds", FieldKind.NUMBER, aliases=("targetDurationSeconds",)),
        FieldSpec("max_duration_seconds", FieldKind.NUMBER, aliases=("maxDurationSeconds",)),
        FieldSpec(
            "criteria",
            FieldKind.ARRAY,
            required=True,
            min_items=MIN_CRITERIA,
            item_label="criteria",
            items=CRITERION_SCHEMA,
        ),
        FieldSpec("context_summary", FieldKind.TEXT),
        FieldSpec("guiding_questions", FieldKind.ARRAY, items=FieldKind.TEXT),
    ),
)

COPILOT_CRITERION_SCHEMA = ObjectSchema(
    name="criterion",
    fields=(
        FieldSpec("name", FieldKind.TEXT, required=True, non_empty=True),
        FieldSpec("description", FieldKind.TEXT, required=True, non_empty=True),
        FieldSpec("scoring_guide", FieldKind.TEXT, required=True, non_empty=True),
        FieldSpec("weight", FieldKind.NUMBER, minimum=0, exclusive_minimum=True),
    ),
)

COPILOT_RUBRIC_SCHEMA = ObjectSchema(
    name="copilot rubric",
    fields=(
        FieldSpec("name", FieldKind.TEXT, required=True, non_empty=True),
        FieldSpec("context_summary", FieldKind.TEXT, required=True, non_empty=True),
        FieldSpec("guiding_questions", FieldKind.ARRAY, required=True, items=FieldKind.TEXT),
        FieldSpec(
            "criteria",
            FieldKind.ARRAY,
            required=True,
            min_items=MIN_CRITERIA,
            item_label="criteria",
            items=COPILOT_CRITERION_SCHEMA,
        ),
    ),
)


def validate_rubric_draft(value: Any) -> Union[RubricDraft, Rejected]:
    """
    Validate a parsed JSON value as a rubric draft.

    Returns:
        A RubricDraft when every check passes, otherwise the Rejected result
    """
    result = validate(value, RUBRIC_DRAFT_SCHEMA)
    if isinstance(result, Rejected):
        return result
    try:
        return RubricDraft.model_validate(strip_nulls(result.value))
    except ValidationError as e:
        return rejection_from_model_error(e)


def validate_copilot_rubric(
    value: Any,
    target_duration_seconds: Optional[float] = None,
) -> Union[RubricDraft, Rejected]:
    """Validate a copilot response and translate it to a RubricDraft."""
    result = validate(value, COPILOT_RUBRIC_SCHEMA)
    if isinstance(result, Rejected):
        return result

    data = strip_nulls(result.value)
    try:
        return RubricDraft(
            title=data["name"],
            description=None,
            target_duration_seconds=target_duration_seconds,
            criteria=data["criteria"],
            context_summary=data["context_summary"],
            guiding_questions=data["guiding_questions"],
        )
    except ValidationError as e:
        return rejection_from_model_error(e)


def _first_present(obj: dict, *keys: str) -> Any:
    for key in keys:
        if obj.get(key) is not None:
            return obj[key]
    return None


def normalize_criterion(criterion: Any) -> Any:
    """
    Translate one stored or legacy criterion into the canonical shape.

    Values that are not objects are returned unchanged so the validator can
    reject them with a precise reason.
    """
    if not isinstance(criterion, dict):
        return criterion

    if "name" not in criterion and criterion.get("label"):
        label = criterion["label"]
        legacy = {"name": label, "description": criterion.get("description") or label}
        if "weight" in criterion:
            legacy["weight"] = criterion["weight"]
        return legacy

    normalized = {
        "name": criterion.get("name"),
        "description": criterion.get("description"),
        "scoring_guide": _first_present(criterion, "scoring_guide", "scoringGuide"),
    }
    if "weight" in criterion:
        normalized["weight"] = criterion["weight"]
    return normalized


PAYLOAD_KEY_ALIASES = {
    "targetDurationSeconds": "target_duration_seconds",
    "maxDurationSeconds": "max_duration_seconds",
    "contextSummary": "context_summary",
    "guidingQuestions": "guiding_questions",
    "name": "title",
}


def normalize_rubric_payload(payload: Any) -> Any:
    """
    Translate a draft-like payload into the canonical shape.

    camelCase keys and a copilot-style ``name`` are renamed unless the
    canonical key already holds a value; criteria go through ``normalize_criterion``.
    """
    if not isinstance(payload, dict):
        return payload

    normalized = dict(payload)
    for alias, canonical in PAYLOAD_KEY_ALIASES.items():
        if alias in normalized:
            value = normalized.pop(alias)
            if normalized.get(canonical) is None:
                normalized[canonical] = value

    criteria = normalized.get("criteria")
    if isinstance(criteria, list):
        normalized["criteria"] = [normalize_criterion(c) for c in criteria]
    return normalized
