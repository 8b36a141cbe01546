"""Transcript analysis routes."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from pitch_api.analysis.schemas import AnalysisRequest, AnalysisResponse
from pitch_api.auth.models import User
from pitch_api.config import Settings, get_settings
from pitch_api.dependencies import authenticated_body, get_current_user, get_db, get_pipeline
from pitch_api.rubrics.service import RubricService, validate_payload
from pitch_core.logging_config import get_logger
from pitch_core.models import RubricDraft
from pitch_core.pipeline import RubricPipeline

router = APIRouter(prefix="/analysis", tags=["Analysis"])
logger = get_logger("api.analysis")


def resolve_rubric(data: AnalysisRequest, user: User, db: Session) -> RubricDraft:
    """Inline rubric first, then a stored rubric id, then the first template."""
    if data.rubric is not None:
        return validate_payload(data.rubric)

    service = RubricService(db)
    if data.rubric_id is not None:
        rubric = service.get_visible(data.rubric_id, user)
        if not rubric:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rubric not found")
        return rubric.to_draft()

    template = service.default_template()
    if not template:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No rubric templates available")
    return template.to_draft()


@router.post("", response_model=AnalysisResponse)
async def analyze_transcript(
    data: AnalysisRequest = Depends(authenticated_body(AnalysisRequest)),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    pipeline: RubricPipeline = Depends(get_pipeline),
    settings: Settings = Depends(get_settings),
):
    """Rubric-based feedback on a pitch transcript."""
    rubric = resolve_rubric(data, current_user, db)
    analysis = await pipeline.analyze(
        data.transcript,
        rubric,
        pitch_context=data.pitch_context,
        audio_seconds=data.audio_seconds,
        sampling=settings.analysis_sampling,
    )
    logger.info(
        "Analysed transcript for user %s against '%s' (weighted score %s)",
        current_user.id,
        rubric.title,
        analysis.weighted_score,
    )
    return AnalysisResponse(rubric_title=rubric.title, analysis=analysis)
