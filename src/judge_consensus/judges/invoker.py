"""
Judge invocation with critical mode and parallel fan-out.

Every judge call in the package goes through ``JudgeInvoker``:
- ``invoke``: one call; failures become an error-flagged empty response
  unless ``critical`` is set, in which case ``JudgeCallError`` is raised
- ``invoke_parallel``: one prompt, many configs, results in config order
- ``invoke_many``: heterogeneous (prompt, config) requests, results in order
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeout

from judge_consensus.errors import JudgeCallError
from judge_consensus.judges.backends import LiteLLMBackend
from judge_consensus.judges.protocols import CompletionBackend, JudgeConfig, JudgeResponse

logger = logging.getLogger(__name__)

DEFAULT_MIN_CONTENT_LENGTH = 10


class JudgeInvoker:
    """Runs judge calls against a completion backend."""

    def __init__(
        self,
        backend: CompletionBackend | None = None,
        max_workers: int = 5,
        timeout_grace_s: float = 5.0,
        min_content_length: int = DEFAULT_MIN_CONTENT_LENGTH,
    ):
        """
        Initialize the invoker.

        Args:
            backend: Backend performing provider requests (LiteLLM by default)
            max_workers: Upper bound on concurrent calls in a batch
            timeout_grace_s: Slack added to each call's timeout before a
                parallel batch gives up waiting on it
            min_content_length: Minimum content length for a critical call
        """
        self.backend = backend or LiteLLMBackend()
        self.max_workers = max_workers
        self.timeout_grace_s = timeout_grace_s
        self.min_content_length = min_content_length

    def invoke(
        self,
        prompt: str,
        config: JudgeConfig,
        critical: bool = False,
        min_content_length: int | None = None,
    ) -> JudgeResponse:
        """
        Call a single judge.

        Args:
            prompt: Prompt text
            config: Judge configuration
            critical: Raise instead of returning an error-flagged response
            min_content_length: Overrides the invoker default for this call

        Returns:
            JudgeResponse; on non-critical failure ``content`` is empty and
            ``error`` holds the message

        Raises:
            JudgeCallError: In critical mode, on failure or insufficient content
        """
        start_time = time.time()
        try:
            content = self.backend.complete(prompt, config)
        except Exception as e:
            logger.error("[Judge] %s failed: %s", config.model, e)
            if critical:
                raise JudgeCallError(f"Critical judge call failed: {e}", config.model, e) from e
            return JudgeResponse(
                model=config.model,
                content="",
                error=str(e) or type(e).__name__,
                latency_ms=int((time.time() - start_time) * 1000),
            )

        content = content or ""
        if min_content_length is None:
            min_content_length = self.min_content_length
        if critical and len(content) < min_content_length:
            raise JudgeCallError(
                f"Critical judge call returned insufficient content "
                f"({len(content)} chars, need {min_content_length})",
                config.model,
            )

        return JudgeResponse(
            model=config.model,
            content=content,
            latency_ms=int((time.time() - start_time) * 1000),
        )

    def invoke_many(self, requests: Sequence[tuple[str, JudgeConfig]]) -> list[JudgeResponse]:
        """
        Run independent (prompt, config) requests concurrently.

        A failing or timed-out call never cancels its siblings; it surfaces as
        that call's error-flagged response. Every call's deadline is measured
        from submission, so its timeout does not depend on its position.

        Args:
            requests: Prompt/config pairs

        Returns:
            Responses in the same order as ``requests``
        """
        if not requests:
            return []

        executor = ThreadPoolExecutor(max_workers=min(self.max_workers, len(requests)))
        try:
            submitted_at = time.monotonic()
            futures = [executor.submit(self.invoke, prompt, config) for prompt, config in requests]
            results: list[JudgeResponse] = []
            for future, (_, config) in zip(futures, requests):
                deadline = submitted_at + config.timeout_s + self.timeout_grace_s
                try:
                    results.append(future.result(timeout=max(0.0, deadline - time.monotonic())))
                except FuturesTimeout:
                    logger.error("[Judge] %s timed out after %.0fs", config.model, config.timeout_s)
                    results.append(JudgeResponse(
                        model=config.model,
                        content="",
                        error=f"Timed out after {config.timeout_s}s",
                    ))
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        return results

    def invoke_parallel(
        self,
        prompt: str,
        configs: Sequence[JudgeConfig],
        critical: bool = False,
        min_successful: int = 1,
    ) -> list[JudgeResponse]:
        """
        Send one prompt to several judges concurrently.

        Args:
            prompt: Prompt text
            configs: Judge configurations
            critical: Raise if fewer than ``min_successful`` calls succeed
            min_successful: Minimum successful responses in critical mode

        Returns:
            Responses in the same order as ``configs``

        Raises:
            JudgeCallError: In critical mode, when too few calls succeed
        """
        logger.info("[Judge] Calling %d models in parallel...", len(configs))
        start_time = time.time()

        results = self.invoke_many([(prompt, config) for config in configs])

        successful = sum(1 for r in results if r.ok)
        logger.info(
            "[Judge] %d/%d succeeded in %.1fs", successful, len(configs), time.time() - start_time
        )

        if critical and successful < min_successful:
            raise JudgeCallError(
                f"Critical parallel judge calls failed: only {successful}/{min_successful} "
                f"required responses succeeded",
                ", ".join(c.model for c in configs),
            )
        return results
