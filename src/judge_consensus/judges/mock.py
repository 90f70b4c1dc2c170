"""Scripted backend for running the engine without API calls."""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Callable, Iterable
from typing import Union

from judge_consensus.judges.protocols import JudgeConfig

# A script item is returned as text, raised if it is an exception, or
# called with (prompt, config) if it is callable
ScriptItem = Union[str, BaseException, Callable[[str, JudgeConfig], str]]


class ScriptedBackend:
    """
    Backend that replays canned judge output.

    Lookup order for each call: ``responder``, then ``by_model`` (keyed by
    model name; a list is consumed in order), then the shared ``responses``
    queue, then ``default``.
    """

    def __init__(
        self,
        responses: Iterable[ScriptItem] | None = None,
        by_model: dict[str, ScriptItem | list[ScriptItem]] | None = None,
        responder: Callable[[str, JudgeConfig], str] | None = None,
        default: str = "",
    ):
        self._queue: deque[ScriptItem] = deque(responses or [])
        self._by_model: dict[str, deque[ScriptItem] | ScriptItem] = {}
        for model, script in (by_model or {}).items():
            self._by_model[model] = deque(script) if isinstance(script, list) else script
        self.responder = responder
        self.default = default
        self.calls: list[tuple[str, JudgeConfig]] = []
        self._lock = threading.Lock()

    def _next_item(self, config: JudgeConfig) -> ScriptItem:
        if self.responder is not None:
            return self.responder
        script = self._by_model.get(config.model)
        if isinstance(script, deque):
            if script:
                return script.popleft()
        elif script is not None:
            return script
        if self._queue:
            return self._queue.popleft()
        return self.default

    def complete(self, prompt: str, config: JudgeConfig) -> str:
        with self._lock:
            self.calls.append((prompt, config))
            item = self._next_item(config)

        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return item(prompt, config)
        return item

    @property
    def call_count(self) -> int:
        """Number of completions requested."""
        return len(self.calls)
