"""LLM-backed rubric drafting routes."""

import json
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import ValidationError
from starlette.datastructures import UploadFile

from pitch_api.auth.models import User
from pitch_api.config import Settings, get_settings
from pitch_api.dependencies import authenticated_body, get_current_user, get_pipeline
from pitch_api.drafts.schemas import CopilotRequest, DraftResponse, GenerateRequest, ParseTextRequest
from pitch_api.rubrics.service import validate_payload
from pitch_core.drafts import normalize_rubric_payload
from pitch_core.exceptions import ClientInputError
from pitch_core.logging_config import get_logger
from pitch_core.pipeline import RubricPipeline

router = APIRouter(prefix="/rubrics", tags=["Rubric drafts"])
logger = get_logger("api.drafts")

UNSUPPORTED_UPLOADS = (".pdf", ".png", ".jpg", ".jpeg")
MAX_UPLOAD_BYTES = 1_000_000


@router.post("/generate", response_model=DraftResponse)
async def generate_draft(
    data: GenerateRequest = Depends(authenticated_body(GenerateRequest)),
    current_user: User = Depends(get_current_user),
    pipeline: RubricPipeline = Depends(get_pipeline),
    settings: Settings = Depends(get_settings),
):
    """Draft or refine a rubric from a builder conversation."""
    current_draft = normalize_rubric_payload(data.current_draft) if data.current_draft else None
    draft = await pipeline.generate_draft(data.messages, current_draft, sampling=settings.draft_sampling)
    logger.info("Generated rubric draft for user %s (%d criteria)", current_user.id, len(draft.criteria))
    return DraftResponse(draft_rubric=draft)


@router.post("/copilot", response_model=DraftResponse)
async def copilot(
    data: CopilotRequest = Depends(authenticated_body(CopilotRequest)),
    current_user: User = Depends(get_current_user),
    pipeline: RubricPipeline = Depends(get_pipeline),
    settings: Settings = Depends(get_settings),
):
    """Generate a rubric from a pitch description, or refine the current one."""
    draft = await pipeline.copilot(
        data.context_text,
        target_length_seconds=data.target_length_seconds,
        rubric_type=data.rubric_type,
        user_edits=data.user_edits,
        current_rubric=data.current_rubric,
        sampling=settings.draft_sampling,
    )
    logger.info("Copilot rubric for user %s (%d criteria)", current_user.id, len(draft.criteria))
    return DraftResponse(draft_rubric=draft)


async def _read_upload(upload: UploadFile) -> Any:
    """
    Turn an uploaded rubric into either a payload to validate directly or text to parse.

    Returns a dict for ``.json`` files that already carry a ``criteria`` array,
    otherwise the text to send to the model.
    """
    filename = (upload.filename or "").lower()
    if filename.endswith(UNSUPPORTED_UPLOADS):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                "Image/PDF parsing is not supported. Please upload a JSON or text file, "
                "or paste the rubric text."
            ),
        )

    raw = await upload.read(MAX_UPLOAD_BYTES + 1)
    if len(raw) > MAX_UPLOAD_BYTES:
        raise ClientInputError("Uploaded file is too large", subject="rubric")
    text = raw.decode("utf-8", errors="replace")

    if filename.endswith(".json"):
        try:
            value = json.loads(text)
        except json.JSONDecodeError:
            return text
        if isinstance(value, dict) and isinstance(value.get("criteria"), list):
            return value
        return json.dumps(value, indent=2, ensure_ascii=False)

    return text


@router.post("/parse", response_model=DraftResponse)
async def parse_rubric(
    request: Request,
    current_user: User = Depends(get_current_user),
    pipeline: RubricPipeline = Depends(get_pipeline),
    settings: Settings = Depends(get_settings),
):
    """
    Structure a rubric from pasted text (JSON ``{text}``) or an uploaded file
    (multipart field ``rubric_file``).
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        upload = form.get("rubric_file")
        if not isinstance(upload, UploadFile):
            raise ClientInputError('No file provided. Use field name "rubric_file".', subject="rubric")
        source = await _read_upload(upload)
        if isinstance(source, dict):
            logger.info("Validated uploaded rubric JSON for user %s", current_user.id)
            return DraftResponse(draft_rubric=validate_payload(source))
        text = source
    else:
        try:
            body = await request.json()
            text = ParseTextRequest.model_validate(body).text
        except (ValueError, ValidationError):
            raise ClientInputError('Text is required. Provide { text: "..." } in request body.', subject="rubric")

    draft = await pipeline.parse_rubric(text, sampling=settings.parse_sampling)
    logger.info("Parsed rubric for user %s (%d criteria)", current_user.id, len(draft.criteria))
    return DraftResponse(draft_rubric=draft)
