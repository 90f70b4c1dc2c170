"""
judge-consensus: evaluation and consensus engine for LLM-as-judge pipelines.

Components:
- calibration: judge-vs-human correlation, drift detection
- comparison: position-swapped pairwise comparison with verbosity correction
- consensus: adversarial challenge, multi-model voting, quality gate
- benchmark: paired bootstrap significance and decision matrix
"""

from judge_consensus.calibration import calibrate, calibrate_by_category, detect_drift
from judge_consensus.comparison import PairwiseComparator
from judge_consensus.config import EngineConfig
from judge_consensus.consensus import ChallengeGenerator, ConsensusVoter, QualityGate
from judge_consensus.data import (
    CalibrationResult,
    ChallengeResult,
    ComparisonResult,
    DriftReport,
    ScorePair,
    SufficiencyVote,
    TaskCategory,
    Winner,
)
from judge_consensus.errors import JudgeCallError, JudgeConsensusError
from judge_consensus.judges import JudgeConfig, JudgeInvoker

__version__ = "0.1.0"

__all__ = [
    "CalibrationResult",
    "ChallengeGenerator",
    "ChallengeResult",
    "ComparisonResult",
    "ConsensusVoter",
    "DriftReport",
    "EngineConfig",
    "JudgeCallError",
    "JudgeConfig",
    "JudgeConsensusError",
    "JudgeInvoker",
    "PairwiseComparator",
    "QualityGate",
    "ScorePair",
    "SufficiencyVote",
    "TaskCategory",
    "Winner",
    "calibrate",
    "calibrate_by_category",
    "detect_drift",
]
