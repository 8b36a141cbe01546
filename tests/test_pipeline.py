"""Tests for the end-to-end rubric pipeline with a fake model."""

import asyncio

import pytest

from pitch_core.exceptions import (
    ClientInputError,
    DraftValidationError,
    JSONExtractionError,
    MissingCredentialsError,
    UpstreamError,
)
from pitch_core.models import PitchAnalysis, RubricDraft
from pitch_core.pipeline import RubricPipeline
from pitch_core.schema import RejectionKind
from tests.conftest import (
    analysis_payload,
    as_model_output,
    copilot_payload,
    create_completion_client,
    draft_payload,
)

CONVERSATION = [{"role": "user", "content": "A 2 minute seed pitch rubric please"}]


def make_pipeline(text=None, error=None, api_key="test-openai-key"):
    """Factory for a pipeline over a FakeLM."""
    return RubricPipeline(create_completion_client(text=text, error=error, api_key=api_key))


class TestGenerateDraft:
    """Test the conversational builder."""

    def test_clean_output(self):
        """Test clean JSON becomes a draft."""
        pipeline = make_pipeline(as_model_output(draft_payload(target_duration_seconds=120)))
        draft = asyncio.run(pipeline.generate_draft(CONVERSATION))
        assert isinstance(draft, RubricDraft)
        assert draft.title == "Seed pitch"
        assert draft.target_duration_seconds == 120

    def test_fenced_output_after_prose(self):
        """Test chatty output with a fenced block is recovered."""
        text = f"Sure! Here is your rubric:\n```json\n{as_model_output(draft_payload())}\n```\nGood luck!"
        draft = asyncio.run(make_pipeline(text).generate_draft(CONVERSATION))
        assert [c.name for c in draft.criteria] == ["A", "B", "C"]

    def test_no_json(self):
        """Test prose output is an extraction error for the draft."""
        with pytest.raises(JSONExtractionError) as exc_info:
            asyncio.run(make_pipeline("I cannot help with that.").generate_draft(CONVERSATION))
        assert exc_info.value.subject == "rubric draft"

    def test_too_few_criteria(self):
        """Test a schema failure carries the rejection."""
        pipeline = make_pipeline(as_model_output(draft_payload(criteria_count=2)))
        with pytest.raises(DraftValidationError) as exc_info:
            asyncio.run(pipeline.generate_draft(CONVERSATION))
        assert exc_info.value.rejection.kind is RejectionKind.TOO_FEW_ITEMS
        assert exc_info.value.path == "criteria"
        assert "got 2" in str(exc_info.value)

    def test_no_user_turn_makes_no_call(self):
        """Test input errors are raised before the model is called."""
        pipeline = make_pipeline("unused")
        with pytest.raises(ClientInputError):
            asyncio.run(pipeline.generate_draft([{"role": "assistant", "content": "hi"}]))
        assert pipeline.client._lm.calls == []

    def test_upstream_error(self):
        """Test provider failures propagate as upstream errors."""
        with pytest.raises(UpstreamError):
            asyncio.run(make_pipeline(error=RuntimeError("boom")).generate_draft(CONVERSATION))

    def test_missing_credentials(self):
        """Test a missing key is reported as a configuration error."""
        with pytest.raises(MissingCredentialsError):
            asyncio.run(make_pipeline("unused", api_key=None).generate_draft(CONVERSATION))

    def test_single_call(self):
        """Test the model is called exactly once even on failure."""
        pipeline = make_pipeline(as_model_output(draft_payload(criteria_count=1)))
        with pytest.raises(DraftValidationError):
            asyncio.run(pipeline.generate_draft(CONVERSATION))
        assert len(pipeline.client._lm.calls) == 1


class TestCopilot:
    """Test the single-shot copilot."""

    def test_translates(self):
        """Test copilot output becomes a draft carrying the requested duration."""
        pipeline = make_pipeline(as_model_output(copilot_payload()))
        draft = asyncio.run(pipeline.copilot("Seed pitch to angels", target_length_seconds=180))
        assert draft.title == "Investor pitch - seed round"
        assert draft.target_duration_seconds == 180

    def test_errors_use_rubric_subject(self):
        """Test copilot failures are reported against the rubric."""
        pipeline = make_pipeline(as_model_output({"name": "No criteria"}))
        with pytest.raises(DraftValidationError) as exc_info:
            asyncio.run(pipeline.copilot("Demo day"))
        assert exc_info.value.subject == "rubric"

    def test_no_json_names_the_response(self):
        """Test copilot output without JSON is reported against the rubric response."""
        with pytest.raises(JSONExtractionError) as exc_info:
            asyncio.run(make_pipeline("Happy to help with that!").copilot("Demo day"))
        assert exc_info.value.subject == "rubric response"

    def test_upstream_subject(self):
        """Test client errors are re-labelled with the operation's subject."""
        with pytest.raises(UpstreamError) as exc_info:
            asyncio.run(make_pipeline(error=RuntimeError("down")).copilot("Demo day"))
        assert exc_info.value.subject == "rubric"


class TestParseRubric:
    """Test free-text rubric parsing."""

    def test_camel_case_output(self):
        """Test camelCase model output is normalised before validation."""
        payload = draft_payload(targetDurationSeconds=90, guidingQuestions=["Why you?"])
        draft = asyncio.run(make_pipeline(as_model_output(payload)).parse_rubric("Hook, Problem, Ask"))
        assert draft.target_duration_seconds == 90
        assert draft.guiding_questions == ["Why you?"]

    def test_legacy_labels(self):
        """Test legacy label criteria from the model are accepted."""
        payload = {"title": "T", "criteria": [{"key": "a", "label": "A"}, {"key": "b", "label": "B"}, {"key": "c", "label": "C"}]}
        draft = asyncio.run(make_pipeline(as_model_output(payload)).parse_rubric("A B C"))
        assert [c.description for c in draft.criteria] == ["A", "B", "C"]


class TestAnalyze:
    """Test transcript analysis."""

    @pytest.fixture
    def rubric(self):
        payload = draft_payload(target_duration_seconds=60)
        for criterion, name in zip(payload["criteria"], ["Hook", "Problem", "Solution"]):
            criterion["name"] = name
        payload["criteria"][0]["weight"] = 2
        return RubricDraft.model_validate(payload)

    def test_timing_and_weighted_score(self, rubric):
        """Test timing is computed locally and scores are weighted."""
        output = analysis_payload()
        output["rubric_scores"][0]["score"] = 10
        output["rubric_scores"][1]["score"] = 4
        output["rubric_scores"][2]["score"] = 6

        pipeline = make_pipeline(as_model_output(output))
        analysis = asyncio.run(pipeline.analyze("one two three four five six", rubric, audio_seconds=3))

        assert isinstance(analysis, PitchAnalysis)
        assert analysis.timing.word_count == 6
        assert analysis.timing.words_per_minute == 120
        assert analysis.timing.target_seconds == 60
        # (2*10 + 4 + 6) / 4
        assert analysis.weighted_score == 7.5

    def test_pace_in_prompt(self, rubric):
        """Test the computed pace is sent to the model."""
        pipeline = make_pipeline(as_model_output(analysis_payload()))
        asyncio.run(pipeline.analyze("one two three four five six", rubric, audio_seconds=3))
        assert "Speaking pace: 120 WPM" in pipeline.client._lm.calls[0]["messages"][1]["content"]

    def test_invalid_output(self, rubric):
        """Test a schema failure is reported against the analysis."""
        output = analysis_payload()
        output["rubric_scores"] = []
        with pytest.raises(DraftValidationError) as exc_info:
            asyncio.run(make_pipeline(as_model_output(output)).analyze("hello", rubric))
        assert exc_info.value.subject == "analysis"
        assert exc_info.value.path == "rubric_scores"
