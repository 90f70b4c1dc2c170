"""Tests for data schemas and file loading."""

import json

import pytest
from pydantic import ValidationError

from judge_consensus.data import (
    ChallengeCritique,
    ChallengeResult,
    ComparisonSample,
    ScorePair,
    TaskCategory,
    example_score_pairs,
    example_scores_file,
    load_comparison_samples,
    load_scores_file,
    save_scores_file,
)
from judge_consensus.errors import DataFileError


class TestScorePair:
    """Test score pair validation."""

    def test_camel_case_aliases(self):
        pair = ScorePair.model_validate({"sampleId": "x", "humanScore": 4, "llmScore": 3.5})
        assert pair.sample_id == "x"
        assert pair.llm_score == 3.5
        assert pair.category is None

    def test_snake_case_names(self):
        pair = ScorePair(sample_id="x", human_score=2, llm_score=2)
        assert pair.human_score == 2

    def test_score_out_of_range(self):
        with pytest.raises(ValidationError):
            ScorePair(sample_id="x", human_score=6, llm_score=3)
        with pytest.raises(ValidationError):
            ScorePair(sample_id="x", human_score=3, llm_score=0)


class TestChallengeResult:
    """Test the gaps flag on challenge results."""

    def test_no_critiques_no_gaps(self):
        assert not ChallengeResult().has_significant_gaps

    def test_critiques_mean_gaps(self):
        result = ChallengeResult(critiques=[ChallengeCritique(issue="Missing dosage")])
        assert result.has_significant_gaps
        assert str(result.critiques[0]) == "[overview] Missing dosage"

    def test_flag_is_serialized(self):
        result = ChallengeResult(critiques=[ChallengeCritique(section="q1", issue="x")])
        assert result.model_dump()["has_significant_gaps"] is True


class TestScoresFile:
    """Test loading and saving calibration data files."""

    def test_load(self, tmp_path, scores_file_data):
        path = tmp_path / "scores.json"
        path.write_text(json.dumps(scores_file_data))
        scores = load_scores_file(path)
        assert len(scores.score_pairs) == 5
        assert scores.score_pairs[0].category == "ccr"
        assert scores.metadata.evaluator == "reviewer-1"
        assert scores.metadata.date_collected == "2025-01-15"

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataFileError, match="not found"):
            load_scores_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(DataFileError, match="Invalid JSON"):
            load_scores_file(path)

    def test_invalid_score(self, tmp_path, scores_file_data):
        scores_file_data["scorePairs"][0]["humanScore"] = 9
        path = tmp_path / "scores.json"
        path.write_text(json.dumps(scores_file_data))
        with pytest.raises(DataFileError, match="Invalid calibration data"):
            load_scores_file(path)

    def test_save_uses_wire_format(self, tmp_path):
        path = tmp_path / "out" / "scores.json"
        save_scores_file(example_scores_file(), path)
        data = json.loads(path.read_text())
        assert "scorePairs" in data
        assert data["scorePairs"][0]["sampleId"] == "hp-01"
        assert data["metadata"]["dateCollected"] == "2025-01-01"
        assert "notes" not in data["metadata"]

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "scores.json"
        save_scores_file(example_scores_file(), path)
        assert load_scores_file(path).score_pairs == example_score_pairs()


class TestComparisonSamples:
    """Test loading pairwise benchmark datasets."""

    SAMPLE = {
        "id": "syn-001",
        "category": "synthesis",
        "query": "Summarize the evidence",
        "goldStandard": {"answer": "Reference", "atomicFacts": ["f1", "f2"]},
        "responses": {"system": "System answer", "baseline": "Baseline answer"},
    }

    def test_load_list(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text(json.dumps([self.SAMPLE]))
        samples = load_comparison_samples(path)
        assert samples[0].category is TaskCategory.SYNTHESIS
        assert samples[0].gold_standard.atomic_facts == ["f1", "f2"]
        assert samples[0].responses.system == "System answer"

    def test_load_wrapped(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text(json.dumps({"samples": [self.SAMPLE, self.SAMPLE]}))
        assert len(load_comparison_samples(path)) == 2

    def test_legacy_response_keys(self):
        sample = ComparisonSample.model_validate({
            **self.SAMPLE,
            "responses": {"mcp": "New system", "perplexity": "Old system"},
        })
        assert sample.responses.system == "New system"
        assert sample.responses.baseline == "Old system"

    def test_unknown_category(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text(json.dumps([{**self.SAMPLE, "category": "poetry"}]))
        with pytest.raises(DataFileError):
            load_comparison_samples(path)

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text(json.dumps("nope"))
        with pytest.raises(DataFileError):
            load_comparison_samples(path)


def test_example_pairs():
    """The built-in example set covers three categories."""
    pairs = example_score_pairs()
    assert len(pairs) == 10
    assert {p.category for p in pairs} == {"ccr", "citation_fidelity", "specificity"}
