"""Tests for judge configuration, backends, invocation and the voting ensemble."""

import threading
import time
from types import SimpleNamespace

import pytest

from judge_consensus.errors import JudgeCallError
from judge_consensus.judges import (
    JudgeConfig,
    JudgeInvoker,
    LiteLLMBackend,
    ScriptedBackend,
    default_voting_configs,
    is_retryable_exception,
    litellm_model_key,
)


class RateLimitError(Exception):
    """Stand-in named like the provider's transient error."""


class TestJudgeConfig:
    """Test judge configuration."""

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown provider"):
            JudgeConfig(provider="mistral", model="x")

    def test_key_hidden(self):
        config = JudgeConfig(provider="openai", model="gpt-5-nano", api_key="sk-secret")
        assert "sk-secret" not in repr(config)
        assert "api_key" not in config.to_dict()

    def test_overrides(self, judge_config):
        critical = judge_config.with_overrides(timeout_s=60)
        assert critical.timeout_s == 60
        assert judge_config.timeout_s == 5
        assert critical.label == "gemini/judge-model"


class TestLiteLLMBackend:
    """Test the LiteLLM backend with a patched completion call."""

    @staticmethod
    def _response(text):
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])

    def test_model_key(self):
        assert litellm_model_key(JudgeConfig("gemini", "gemini-2.5-flash-lite")) == "gemini/gemini-2.5-flash-lite"
        assert litellm_model_key(JudgeConfig("openai", "openai/gpt-5-nano")) == "openai/gpt-5-nano"

    def test_request_parameters(self, monkeypatch):
        captured = {}

        def fake_completion(**kwargs):
            captured.update(kwargs)
            return self._response("hello")

        monkeypatch.setattr("judge_consensus.judges.backends.litellm.completion", fake_completion)
        config = JudgeConfig("anthropic", "claude-haiku-4.5", api_key="k", timeout_s=12, max_output_tokens=50)
        assert LiteLLMBackend().complete("prompt", config) == "hello"
        assert captured["model"] == "anthropic/claude-haiku-4.5"
        assert captured["messages"] == [{"role": "user", "content": "prompt"}]
        assert captured["max_tokens"] == 50
        assert captured["timeout"] == 12
        assert captured["api_key"] == "k"

    def test_retries_transient_errors(self, monkeypatch):
        calls = []

        def flaky(**kwargs):
            calls.append(kwargs)
            if len(calls) == 1:
                raise RateLimitError("slow down")
            return self._response("ok")

        monkeypatch.setattr("judge_consensus.judges.backends.litellm.completion", flaky)
        backend = LiteLLMBackend(max_attempts=2, min_wait_s=0, max_wait_s=0)
        assert backend.complete("p", JudgeConfig("gemini", "m")) == "ok"
        assert len(calls) == 2

    def test_does_not_retry_other_errors(self, monkeypatch):
        calls = []

        def broken(**kwargs):
            calls.append(kwargs)
            raise KeyError("bad request")

        monkeypatch.setattr("judge_consensus.judges.backends.litellm.completion", broken)
        with pytest.raises(KeyError):
            LiteLLMBackend(min_wait_s=0, max_wait_s=0).complete("p", JudgeConfig("gemini", "m"))
        assert len(calls) == 1

    def test_retryable_detection(self):
        assert is_retryable_exception(RateLimitError())
        assert is_retryable_exception(RuntimeError("Rate limit exceeded"))
        assert not is_retryable_exception(ValueError("bad"))


class TestJudgeInvoker:
    """Test single and parallel invocation."""

    def test_success(self, scripted, judge_config):
        invoker, backend = scripted(responses=["a useful judge answer"])
        response = invoker.invoke("prompt", judge_config)
        assert response.ok
        assert response.content == "a useful judge answer"
        assert response.model == "judge-model"
        assert backend.calls[0][0] == "prompt"

    def test_failure_non_critical(self, scripted, judge_config):
        invoker, _ = scripted(responses=[RuntimeError("provider down")])
        response = invoker.invoke("prompt", judge_config)
        assert not response.ok
        assert response.content == ""
        assert "provider down" in response.error

    def test_failure_critical(self, scripted, judge_config):
        invoker, _ = scripted(responses=[RuntimeError("provider down")])
        with pytest.raises(JudgeCallError) as exc_info:
            invoker.invoke("prompt", judge_config, critical=True)
        assert exc_info.value.model == "judge-model"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_short_content_critical(self, scripted, judge_config):
        invoker, _ = scripted(responses=["tiny"])
        with pytest.raises(JudgeCallError, match="insufficient content"):
            invoker.invoke("prompt", judge_config, critical=True)

    def test_short_content_non_critical(self, scripted, judge_config):
        invoker, _ = scripted(responses=["tiny"])
        assert invoker.invoke("prompt", judge_config).content == "tiny"

    def test_parallel_preserves_order(self, scripted, voter_configs):
        def slow_first(prompt, config):
            if config.model == "voter-a":
                time.sleep(0.05)
            return f"answer from {config.model}"

        invoker, _ = scripted(responder=slow_first)
        responses = invoker.invoke_parallel("prompt", voter_configs)
        assert [r.content for r in responses] == [
            "answer from voter-a",
            "answer from voter-b",
            "answer from voter-c",
        ]

    def test_parallel_failure_isolated(self, scripted, voter_configs):
        invoker, _ = scripted(by_model={"voter-b": RuntimeError("boom")}, default="fine response")
        responses = invoker.invoke_parallel("prompt", voter_configs)
        assert [r.ok for r in responses] == [True, False, True]

    def test_parallel_runs_concurrently(self, scripted, voter_configs):
        active = []
        peak = []
        lock = threading.Lock()

        def track(prompt, config):
            with lock:
                active.append(config.model)
                peak.append(len(active))
            time.sleep(0.05)
            with lock:
                active.remove(config.model)
            return "done with it"

        invoker, _ = scripted(responder=track)
        invoker.invoke_parallel("prompt", voter_configs)
        assert max(peak) > 1

    def test_parallel_timeout(self, voter_configs):
        release = threading.Event()

        def hang(prompt, config):
            if config.model == "voter-c":
                release.wait(2)
            return "late or not"

        configs = [c.with_overrides(timeout_s=0.05) for c in voter_configs]
        invoker = JudgeInvoker(backend=ScriptedBackend(responder=hang), timeout_grace_s=0.05)
        try:
            responses = invoker.invoke_parallel("prompt", configs)
        finally:
            release.set()
        assert responses[0].ok and responses[1].ok
        assert not responses[2].ok
        assert "Timed out" in responses[2].error

    def test_parallel_timeouts_independent_of_order(self, voter_configs):
        release = threading.Event()

        def hang(prompt, config):
            release.wait(3)
            return "too late"

        configs = [c.with_overrides(timeout_s=0.2) for c in voter_configs]
        invoker = JudgeInvoker(backend=ScriptedBackend(responder=hang), timeout_grace_s=0)
        start = time.monotonic()
        try:
            responses = invoker.invoke_parallel("prompt", configs)
        finally:
            release.set()
        assert time.monotonic() - start < 1.5
        assert [r.ok for r in responses] == [False, False, False]
        assert all("Timed out" in r.error for r in responses)

    def test_parallel_critical_all_failed(self, scripted, voter_configs):
        invoker, _ = scripted(responses=[RuntimeError("down")] * 3)
        with pytest.raises(JudgeCallError) as exc_info:
            invoker.invoke_parallel("prompt", voter_configs, critical=True)
        assert exc_info.value.model == "voter-a, voter-b, voter-c"

    def test_parallel_critical_enough_succeeded(self, scripted, voter_configs):
        invoker, _ = scripted(by_model={"voter-a": RuntimeError("down")}, default="fine response")
        responses = invoker.invoke_parallel("prompt", voter_configs, critical=True, min_successful=2)
        assert sum(r.ok for r in responses) == 2

    def test_many_empty(self, scripted):
        invoker, _ = scripted()
        assert invoker.invoke_many([]) == []


class TestScriptedBackend:
    """Test the scripted backend itself."""

    def test_by_model_list_consumed(self, judge_config):
        backend = ScriptedBackend(by_model={"judge-model": ["first", "second"]}, default="after")
        assert [backend.complete("p", judge_config) for _ in range(3)] == ["first", "second", "after"]
        assert backend.call_count == 3


class TestDefaultVotingConfigs:
    """Test ensemble construction from available credentials."""

    def test_no_keys(self):
        assert default_voting_configs() == []

    def test_all_providers(self):
        configs = default_voting_configs("g", "o", "a")
        assert [c.provider for c in configs] == ["gemini", "openai", "anthropic"]
        assert [c.model for c in configs] == ["gemini-2.5-flash-lite", "gpt-5-nano", "claude-haiku-4.5"]

    def test_gemini_only_filled_to_three(self):
        configs = default_voting_configs(gemini_key="g")
        assert len(configs) == 3
        assert all(c.provider == "gemini" for c in configs)
        assert all(c.api_key == "g" for c in configs)

    def test_even_count_trimmed(self):
        configs = default_voting_configs(openai_key="o", anthropic_key="a")
        assert len(configs) == 1
        assert configs[0].provider == "openai"

    def test_single_provider(self):
        configs = default_voting_configs(anthropic_key="a", timeout_s=9)
        assert len(configs) == 1
        assert configs[0].timeout_s == 9
