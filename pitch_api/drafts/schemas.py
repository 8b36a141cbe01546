"""Request and response schemas for the rubric drafting endpoints."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from pitch_core.models import RubricDraft


class GenerateRequest(BaseModel):
    """Conversational builder request."""

    model_config = ConfigDict(populate_by_name=True)

    # Items are filtered by the prompt builder rather than rejected here
    messages: list[Any] = Field(..., min_length=1)
    current_draft: Optional[dict[str, Any]] = Field(default=None, alias="currentDraft")


class CopilotRequest(BaseModel):
    """Single-shot or refinement request."""

    model_config = ConfigDict(populate_by_name=True)

    context_text: str = Field(..., alias="contextText")
    target_length_seconds: Optional[float] = Field(default=None, alias="targetLengthSeconds", ge=0)
    rubric_type: Optional[str] = Field(default=None, alias="rubricType")
    user_edits: Optional[str] = Field(default=None, alias="userEdits")
    current_rubric: Optional[str] = Field(default=None, alias="currentRubric")


class ParseTextRequest(BaseModel):
    """Pasted rubric text."""

    text: str = ""


class DraftResponse(BaseModel):
    """Successful pipeline result."""

    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    draft_rubric: RubricDraft = Field(..., alias="draftRubric")
