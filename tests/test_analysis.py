"""Tests for analysis timing, scoring and validation."""

import pytest

from pitch_core.analysis import (
    compute_timing,
    count_words,
    finalize_analysis,
    validate_analysis,
    weighted_score,
    words_per_minute,
)
from pitch_core.models import CriterionScore, PitchAnalysis, RubricDraft
from pitch_core.schema import Rejected, RejectionKind
from tests.conftest import analysis_payload, draft_payload


def make_rubric(weights):
    """Rubric with criteria A, B, C... carrying the given weights."""
    payload = draft_payload(criteria_count=len(weights), target_duration_seconds=90, max_duration_seconds=120)
    for criterion, weight in zip(payload["criteria"], weights):
        criterion["weight"] = weight
    return RubricDraft.model_validate(payload)


def score(label, value):
    return CriterionScore(criterion_label=label, score=value, notes="")


class TestTiming:
    """Test locally computed timing."""

    @pytest.mark.parametrize(
        "text,expected",
        [("", 0), (None, 0), ("one", 1), ("  one\ttwo\nthree  ", 3), ("don't stop-now, ok?", 3)],
    )
    def test_count_words(self, text, expected):
        """Test whitespace-separated word counting."""
        assert count_words(text) == expected

    @pytest.mark.parametrize("seconds", [None, 0, -5])
    def test_wpm_unknown(self, seconds):
        """Test pace is unknown without a positive duration."""
        assert words_per_minute(100, seconds) is None

    def test_wpm_rounds(self):
        """Test pace is rounded to a whole number."""
        assert words_per_minute(100, 40) == 150
        assert words_per_minute(10, 7) == 86

    def test_compute_timing(self):
        """Test timing carries the rubric durations."""
        timing = compute_timing("a b c d", make_rubric([1, 1, 1]), audio_seconds=2)
        assert timing.word_count == 4
        assert timing.target_seconds == 90
        assert timing.max_seconds == 120
        assert timing.audio_seconds == 2
        assert timing.words_per_minute == 120


class TestWeightedScore:
    """Test the weighted average over matched criteria."""

    def test_equal_weights(self):
        """Test equal weights give the plain mean."""
        rubric = make_rubric([1, 1, 1])
        assert weighted_score([score("A", 6), score("B", 7), score("C", 8)], rubric) == 7.0

    def test_weights_apply(self):
        """Test weights change the average."""
        rubric = make_rubric([3, 1, 1])
        assert weighted_score([score("A", 10), score("B", 5), score("C", 5)], rubric) == 8.0

    def test_labels_match_case_insensitively(self):
        """Test labels are matched ignoring case and surrounding space."""
        rubric = make_rubric([1, 1, 1])
        assert weighted_score([score(" a ", 4), score("b", 6)], rubric) == 5.0

    def test_unmatched_labels_skipped(self):
        """Test scores for unknown criteria are ignored."""
        rubric = make_rubric([1, 1, 1])
        assert weighted_score([score("A", 9), score("Delivery", 1)], rubric) == 9.0

    def test_nothing_matched(self):
        """Test None when no score matches a criterion."""
        assert weighted_score([score("Z", 5)], make_rubric([1, 1, 1])) is None
        assert weighted_score([], make_rubric([1, 1, 1])) is None

    def test_rounded_to_one_decimal(self):
        """Test the result has one decimal place."""
        rubric = make_rubric([1, 1, 1])
        assert weighted_score([score("A", 7), score("B", 7), score("C", 8)], rubric) == 7.3


class TestValidateAnalysis:
    """Test the analysis output contract."""

    def test_accepts(self):
        """Test a well-formed analysis."""
        result = validate_analysis(analysis_payload())
        assert isinstance(result, PitchAnalysis)
        assert [s.criterion_label for s in result.rubric_scores] == ["Hook", "Problem", "Solution"]
        assert result.line_by_line[0].type == "praise"
        assert result.timing is None

    def test_nulls_and_missing_optionals(self):
        """Test optional fields may be null or absent."""
        payload = analysis_payload()
        payload["line_by_line"] = None
        payload["rubric_scores"][0]["evidence_quotes"] = None
        result = validate_analysis(payload)
        assert result.line_by_line == []
        assert result.rubric_scores[0].evidence_quotes == []

    def test_unknown_note_type_kept(self):
        """Test free-form note types and priorities do not fail validation."""
        payload = analysis_payload()
        payload["line_by_line"][0]["type"] = "observation"
        assert validate_analysis(payload).line_by_line[0].type == "observation"

    @pytest.mark.parametrize(
        "mutate,path,kind",
        [
            (lambda p: p.pop("summary"), "summary", RejectionKind.MISSING_FIELD),
            (lambda p: p["summary"].update(overall_score=11), "summary.overall_score", RejectionKind.OUT_OF_RANGE),
            (lambda p: p["rubric_scores"][1].update(score=-1), "rubric_scores[1].score", RejectionKind.OUT_OF_RANGE),
            (lambda p: p["rubric_scores"][0].update(criterion_label=""), "rubric_scores[0].criterion_label", RejectionKind.EMPTY_VALUE),
            (lambda p: p.update(rubric_scores=[]), "rubric_scores", RejectionKind.TOO_FEW_ITEMS),
            (lambda p: p["line_by_line"][0].pop("quote"), "line_by_line[0].quote", RejectionKind.MISSING_FIELD),
        ],
    )
    def test_rejects(self, mutate, path, kind):
        """Test each analysis check."""
        payload = analysis_payload()
        mutate(payload)
        result = validate_analysis(payload)
        assert isinstance(result, Rejected)
        assert result.path == path
        assert result.kind is kind

    def test_finalize(self):
        """Test finalisation attaches timing and the weighted score."""
        rubric = make_rubric([1, 1, 1])
        analysis = validate_analysis(analysis_payload(labels=["A", "B", "C"], score=6))
        final = finalize_analysis(analysis, "just four words here", rubric, audio_seconds=None)
        assert final.timing.word_count == 4
        assert final.timing.words_per_minute is None
        assert final.weighted_score == 6.0
        assert analysis.timing is None
