"""Prompt -> completion -> JSON extraction -> schema validation."""

from typing import Any, Callable, Optional, TypeVar, Union

from .analysis import count_words, finalize_analysis, validate_analysis, words_per_minute
from .completion import CompletionClient
from .drafts import normalize_rubric_payload, validate_copilot_rubric, validate_rubric_draft
from .exceptions import DraftValidationError, JSONExtractionError, PitchCoachError
from .extraction import extract_json
from .logging_config import get_logger
from .models import PitchAnalysis, RubricDraft, SamplingParams
from .prompts import (
    Message,
    build_analysis_messages,
    build_copilot_messages,
    build_draft_messages,
    build_parse_messages,
)
from .schema import Rejected

logger = get_logger("pipeline")

T = TypeVar("T")
Validator = Callable[[Any], Union[T, Rejected]]

PREVIEW_LENGTH = 500


class RubricPipeline:
    """
    Run one model request through extraction and validation.

    Every LLM-backed operation goes through ``run``; the public helpers only
    differ in the prompt they build and the validator they pass.
    """

    def __init__(self, client: CompletionClient):
        self.client = client

    async def run(
        self,
        messages: list[Message],
        validator: Validator,
        sampling: Optional[SamplingParams] = None,
        subject: str = "rubric draft",
        extraction_subject: Optional[str] = None,
    ) -> Any:
        """
        Invoke the model once and return the validated value.

        ``subject`` names the result in error bodies; ``extraction_subject``
        overrides it when no JSON could be recovered.

        Raises:
            ConfigurationError: If the model is not configured
            UpstreamError: If the completion call failed or returned nothing
            JSONExtractionError: If no JSON could be recovered from the output
            DraftValidationError: If the JSON does not match the schema
        """
        try:
            text = await self.client.invoke(messages, sampling)
        except PitchCoachError as e:
            e.subject = subject
            raise

        try:
            value = extract_json(text)
        except JSONExtractionError as e:
            logger.error(
                "JSON extraction failed for %s: %s | response preview: %r",
                subject,
                e,
                text[:PREVIEW_LENGTH],
            )
            e.subject = extraction_subject or subject
            raise

        result = validator(value)
        if isinstance(result, Rejected):
            logger.error("Invalid %s structure at %s: %s", subject, result.path or "<root>", result.reason)
            raise DraftValidationError(result, subject=subject)

        return result

    async def generate_draft(
        self,
        conversation: list[Any],
        current_draft: Optional[Any] = None,
        sampling: Optional[SamplingParams] = None,
    ) -> RubricDraft:
        """Conversational rubric builder."""
        messages = build_draft_messages(conversation, current_draft)
        return await self.run(messages, validate_rubric_draft, sampling, subject="rubric draft")

    async def copilot(
        self,
        context_text: str,
        target_length_seconds: Optional[float] = None,
        rubric_type: Optional[str] = None,
        user_edits: Optional[str] = None,
        current_rubric: Optional[str] = None,
        sampling: Optional[SamplingParams] = None,
    ) -> RubricDraft:
        """Single-shot rubric from a pitch description, or a refinement of one."""
        messages = build_copilot_messages(
            context_text,
            target_length_seconds=target_length_seconds,
            rubric_type=rubric_type,
            user_edits=user_edits,
            current_rubric=current_rubric,
        )

        def validator(value: Any) -> Union[RubricDraft, Rejected]:
            return validate_copilot_rubric(value, target_duration_seconds=target_length_seconds)

        return await self.run(
            messages, validator, sampling, subject="rubric", extraction_subject="rubric response"
        )

    async def parse_rubric(self, text: str, sampling: Optional[SamplingParams] = None) -> RubricDraft:
        """Structure free-form rubric text."""
        messages = build_parse_messages(text)

        def validator(value: Any) -> Union[RubricDraft, Rejected]:
            return validate_rubric_draft(normalize_rubric_payload(value))

        return await self.run(messages, validator, sampling, subject="rubric")

    async def analyze(
        self,
        transcript: str,
        rubric: RubricDraft,
        pitch_context: Optional[str] = None,
        audio_seconds: Optional[float] = None,
        sampling: Optional[SamplingParams] = None,
    ) -> PitchAnalysis:
        """Rubric-based feedback on a transcript, with locally computed timing."""
        wpm = words_per_minute(count_words(transcript), audio_seconds)
        messages = build_analysis_messages(
            transcript,
            rubric,
            pitch_context=pitch_context,
            audio_seconds=audio_seconds,
            wpm=wpm,
        )
        analysis = await self.run(messages, validate_analysis, sampling, subject="analysis")
        return finalize_analysis(analysis, transcript, rubric, audio_seconds)
