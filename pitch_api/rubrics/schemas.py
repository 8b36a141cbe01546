"""Rubric Pydantic schemas."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

from pitch_core.models import Criterion

RubricSource = Literal["manual", "ai_builder", "copilot", "upload"]


class RubricCreate(BaseModel):
    """
    A draft-like payload to store.

    Any rubric shape is accepted here (legacy ``{key, label}`` criteria,
    camelCase keys); it is normalised and validated by the service.
    """

    model_config = ConfigDict(extra="allow")

    source: RubricSource = "manual"


class RubricUpdate(BaseModel):
    """Partial update merged into the stored rubric before re-validation."""

    model_config = ConfigDict(extra="allow")


class RubricResponse(BaseModel):
    """Schema for a stored rubric."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    target_duration_seconds: Optional[float] = None
    max_duration_seconds: Optional[float] = None
    criteria: list[Criterion]
    context_summary: Optional[str] = None
    guiding_questions: list[str] = []
    source: str
    is_template: bool
    created_at: datetime
    updated_at: datetime
