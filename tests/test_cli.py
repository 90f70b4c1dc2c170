"""Tests for the command-line interface."""

import json

import pytest
from typer.testing import CliRunner

from conftest import pairwise_json
from judge_consensus.cli import app
from judge_consensus.config import EngineConfig
from judge_consensus.judges import JudgeInvoker, ScriptedBackend
from judge_consensus.storage import FileResultStore

runner = CliRunner()


@pytest.fixture
def scores_path(tmp_path, scores_file_data):
    path = tmp_path / "scores.json"
    path.write_text(json.dumps(scores_file_data))
    return path


@pytest.fixture
def empty_env(monkeypatch, tmp_path):
    for key in ("GEMINI_API_KEY", "OPENAI_API_KEY", "ANTHROPIC_API_KEY"):
        monkeypatch.setenv(key, "unset")
        monkeypatch.delenv(key)
    path = tmp_path / ".env"
    path.write_text("")
    return path


class TestCalibrateCommand:
    """Test the calibrate command."""

    def test_calibrated(self, scores_path):
        result = runner.invoke(app, ["calibrate", str(scores_path)])
        assert result.exit_code == 0
        assert "Loaded 5 score pairs" in result.output
        assert "Status: CALIBRATED" in result.output

    def test_threshold_not_met(self, scores_path):
        result = runner.invoke(app, ["calibrate", str(scores_path), "--threshold", "1.0"])
        assert result.exit_code == 1
        assert "NOT CALIBRATED" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["calibrate", str(tmp_path / "none.json")])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_config_file(self, scores_path, tmp_path):
        config_path = tmp_path / "engine.yaml"
        EngineConfig(calibration_threshold=0.999).save(config_path)
        result = runner.invoke(app, ["calibrate", str(scores_path), "--config", str(config_path)])
        assert result.exit_code == 1

    def test_config_bias_tolerance_reaches_category_table(self, tmp_path):
        pairs = [
            {"sampleId": f"s-{i}", "humanScore": h, "llmScore": h + 0.5, "category": "ccr"}
            for i, h in enumerate([1, 2, 3, 4, 4])
        ]
        data_path = tmp_path / "lenient.json"
        data_path.write_text(json.dumps({"scorePairs": pairs}))
        config_path = tmp_path / "engine.yaml"
        EngineConfig(bias_tolerance=1.0).save(config_path)

        result = runner.invoke(app, ["calibrate", str(data_path), "--config", str(config_path)])
        assert result.exit_code == 0
        assert "Calibration by Category" in result.output
        assert "lenient" not in result.output


class TestDriftCommand:
    """Test the drift command."""

    def test_stable(self, scores_path):
        result = runner.invoke(app, ["drift", str(scores_path), "--baseline-r", "0.95"])
        assert result.exit_code == 0
        assert "STABLE" in result.output

    def test_drift_reported(self, scores_path):
        result = runner.invoke(app, ["drift", str(scores_path), "--baseline-r", "0.5"])
        assert result.exit_code == 0
        assert "DRIFT DETECTED" in result.output

    def test_fail_on_drift(self, scores_path):
        result = runner.invoke(
            app, ["drift", str(scores_path), "--baseline-r", "0.5", "--fail-on-drift"]
        )
        assert result.exit_code == 1


def test_rubrics_command():
    result = runner.invoke(app, ["rubrics"])
    assert result.exit_code == 0
    assert "Category Rubrics" in result.output


def test_example_command():
    result = runner.invoke(app, ["example"])
    assert result.exit_code == 0
    assert "Running calibration on 10 example score pairs" in result.output
    assert "JUDGE CALIBRATION REPORT" in result.output


class TestBenchmarkCommand:
    """Test the benchmark command with a scripted judge."""

    @pytest.fixture
    def dataset(self, tmp_path):
        samples = [
            {
                "id": f"rag-{i}",
                "category": "rag_quality",
                "query": "Which sources support the claim?",
                "responses": {"system": "system says", "baseline": "baseline says"},
            }
            for i in range(5)
        ]
        path = tmp_path / "dataset.json"
        path.write_text(json.dumps({"samples": samples}))
        return path

    def test_no_keys(self, dataset, empty_env):
        result = runner.invoke(app, ["benchmark", str(dataset), "--env-file", str(empty_env)])
        assert result.exit_code == 1
        assert "No judge API keys" in result.output

    def test_decision_matrix(self, dataset, empty_env, monkeypatch, tmp_path):
        def judge(prompt, config):
            if prompt.index("system says") < prompt.index("baseline says"):
                return pairwise_json("1", 5, 2)
            return pairwise_json("2", 2, 5)

        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        monkeypatch.setattr(
            EngineConfig,
            "build_invoker",
            lambda self, backend=None: JudgeInvoker(ScriptedBackend(responder=judge)),
        )
        store_dir = tmp_path / "store"
        result = runner.invoke(
            app,
            ["benchmark", str(dataset), "--env-file", str(empty_env), "--store", str(store_dir), "--seed", "0"],
        )
        assert result.exit_code == 0, result.output
        assert "DECISION MATRIX" in result.output
        assert "Citation-critical tasks: USE SYSTEM" in result.output
        assert len(FileResultStore(store_dir).list("comparison/")) == 5
