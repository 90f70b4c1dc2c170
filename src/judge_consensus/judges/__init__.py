"""Judge invocation: configs, backends, parallel fan-out."""

from judge_consensus.judges.backends import LiteLLMBackend, is_retryable_exception, litellm_model_key
from judge_consensus.judges.invoker import DEFAULT_MIN_CONTENT_LENGTH, JudgeInvoker
from judge_consensus.judges.mock import ScriptedBackend
from judge_consensus.judges.protocols import (
    PROVIDERS,
    CompletionBackend,
    JudgeConfig,
    JudgeResponse,
    Provider,
)
from judge_consensus.judges.voting import VOTING_MODELS, default_voting_configs

__all__ = [
    "DEFAULT_MIN_CONTENT_LENGTH",
    "PROVIDERS",
    "VOTING_MODELS",
    "CompletionBackend",
    "JudgeConfig",
    "JudgeInvoker",
    "JudgeResponse",
    "LiteLLMBackend",
    "Provider",
    "ScriptedBackend",
    "default_voting_configs",
    "is_retryable_exception",
    "litellm_model_key",
]
