"""Transcript analysis request and response schemas."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from pitch_core.models import PitchAnalysis


class AnalysisRequest(BaseModel):
    """A transcript to analyse against an inline, stored or default rubric."""

    transcript: str = Field(..., min_length=1)
    rubric_id: Optional[int] = None
    rubric: Optional[dict[str, Any]] = None
    pitch_context: Optional[str] = None
    audio_seconds: Optional[float] = Field(default=None, ge=0)


class AnalysisResponse(BaseModel):
    """Validated feedback plus the rubric it was scored against."""

    ok: bool = True
    rubric_title: str
    analysis: PitchAnalysis
