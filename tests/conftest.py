"""Pytest configuration and fixtures."""

import json

import pytest

from judge_consensus.data.schemas import ScorePair
from judge_consensus.judges import JudgeConfig, JudgeInvoker, ScriptedBackend
from judge_consensus.observability import CountingObserver


def make_pairs(human, llm, category=None, prefix="s"):
    """Build score pairs from parallel score lists."""
    return [
        ScorePair(sample_id=f"{prefix}-{i}", human_score=h, llm_score=l, category=category)
        for i, (h, l) in enumerate(zip(human, llm))
    ]


def pairwise_json(winner, score_1, score_2, reasoning="Compared on rubric"):
    """A well-formed pairwise judge response."""
    return json.dumps({
        "response_1_claims": ["claim a"],
        "response_2_claims": ["claim b"],
        "response_1_evaluation": "ok",
        "response_2_evaluation": "ok",
        "winner": winner,
        "response_1_score": score_1,
        "response_2_score": score_2,
        "reasoning": reasoning,
    })


def vote_json(vote, gaps=(), reasoning="One sentence"):
    """A well-formed vote response."""
    return json.dumps({"vote": vote, "reasoning": reasoning, "critical_gaps": list(gaps)})


@pytest.fixture
def observer():
    """Observer that counts events and fallbacks."""
    return CountingObserver()


@pytest.fixture
def judge_config():
    """Judge config that never reaches a real provider."""
    return JudgeConfig(provider="gemini", model="judge-model", api_key="test-key", timeout_s=5)


@pytest.fixture
def voter_configs():
    """Three-member voting ensemble."""
    return [
        JudgeConfig(provider="gemini", model="voter-a", timeout_s=5),
        JudgeConfig(provider="openai", model="voter-b", timeout_s=5),
        JudgeConfig(provider="anthropic", model="voter-c", timeout_s=5),
    ]


@pytest.fixture
def scripted():
    """Factory for an invoker over a ScriptedBackend."""
    def _make(**kwargs):
        backend = ScriptedBackend(**kwargs)
        return JudgeInvoker(backend=backend), backend
    return _make


@pytest.fixture
def perfect_pairs():
    """Five pairs with identical human and judge scores."""
    return make_pairs([1, 2, 3, 4, 5], [1, 2, 3, 4, 5])


@pytest.fixture
def scores_file_data():
    """Calibration data file content in its on-disk (camelCase) form."""
    return {
        "version": "1.0",
        "scorePairs": [
            {"sampleId": "a-1", "humanScore": 4, "llmScore": 4, "category": "ccr"},
            {"sampleId": "a-2", "humanScore": 2, "llmScore": 2.5, "category": "ccr"},
            {"sampleId": "a-3", "humanScore": 5, "llmScore": 4.5},
            {"sampleId": "a-4", "humanScore": 3, "llmScore": 3},
            {"sampleId": "a-5", "humanScore": 1, "llmScore": 1.5},
        ],
        "metadata": {"evaluator": "reviewer-1", "dateCollected": "2025-01-15"},
    }
