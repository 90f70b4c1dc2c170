"""
Verbosity-bias correction for pairwise comparison.

Two corrections, applied to synthesis-category comparisons:
- Score-per-Info-Unit (SIU): ``score / ln(word_count + 1)``
- The 25/5 rule: an answer that is >25% longer but <5% better is a tie
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from judge_consensus.data.schemas import Winner

LENGTH_RATIO_LIMIT = 1.25
SCORE_RATIO_LIMIT = 1.05


def word_count(text: str) -> int:
    """Whitespace-delimited word count."""
    return len(text.split())


def score_per_info_unit(score: float, words: int) -> float:
    """Length-normalized score; 0 for an empty answer."""
    if words <= 0:
        return 0.0
    return score / math.log(words + 1)


def twenty_five_five_rule(
    system_score: float,
    baseline_score: float,
    system_words: int,
    baseline_words: int,
    length_ratio_limit: float = LENGTH_RATIO_LIMIT,
    score_ratio_limit: float = SCORE_RATIO_LIMIT,
) -> bool:
    """
    True when the higher-scoring side is much longer but barely better.

    Fires symmetrically for either side. Equal scores never fire.
    """
    if system_score == baseline_score:
        return False
    if system_score > baseline_score:
        higher_score, lower_score = system_score, baseline_score
        higher_words, lower_words = system_words, baseline_words
    else:
        higher_score, lower_score = baseline_score, system_score
        higher_words, lower_words = baseline_words, system_words

    if lower_score <= 0:
        return False
    length_ratio = higher_words / max(lower_words, 1)
    score_ratio = higher_score / lower_score
    return length_ratio > length_ratio_limit and score_ratio < score_ratio_limit


@dataclass
class VerbosityAssessment:
    """Outcome of the verbosity correction."""

    winner: Winner
    system_words: int
    baseline_words: int
    system_siu: float
    baseline_siu: float
    rule_fired: bool

    def describe(self) -> str:
        """One-line explanation for the comparison reasoning."""
        if self.rule_fired:
            return (
                f"25/5 rule: longer answer ({max(self.system_words, self.baseline_words)} vs "
                f"{min(self.system_words, self.baseline_words)} words) scored <5% better; forced tie"
            )
        return (
            f"SIU system={self.system_siu:.3f} ({self.system_words} words), "
            f"baseline={self.baseline_siu:.3f} ({self.baseline_words} words)"
        )


def assess_verbosity(
    system_score: float,
    baseline_score: float,
    system_text: str,
    baseline_text: str,
    length_ratio_limit: float = LENGTH_RATIO_LIMIT,
    score_ratio_limit: float = SCORE_RATIO_LIMIT,
) -> VerbosityAssessment:
    """
    Decide a winner with length normalization.

    The 25/5 rule is checked first and forces a tie; otherwise the side with
    the higher SIU wins.

    Args:
        system_score: Averaged judge score for the system answer
        baseline_score: Averaged judge score for the baseline answer
        system_text: System answer text
        baseline_text: Baseline answer text
        length_ratio_limit: Word-count ratio above which a side counts as longer
        score_ratio_limit: Score ratio below which a side counts as barely better

    Returns:
        VerbosityAssessment with the corrected winner
    """
    system_words = word_count(system_text)
    baseline_words = word_count(baseline_text)
    system_siu = score_per_info_unit(system_score, system_words)
    baseline_siu = score_per_info_unit(baseline_score, baseline_words)

    fired = twenty_five_five_rule(
        system_score,
        baseline_score,
        system_words,
        baseline_words,
        length_ratio_limit=length_ratio_limit,
        score_ratio_limit=score_ratio_limit,
    )

    if fired:
        winner = Winner.TIE
    elif system_siu > baseline_siu:
        winner = Winner.SYSTEM
    elif baseline_siu > system_siu:
        winner = Winner.BASELINE
    else:
        winner = Winner.TIE

    return VerbosityAssessment(
        winner=winner,
        system_words=system_words,
        baseline_words=baseline_words,
        system_siu=system_siu,
        baseline_siu=baseline_siu,
        rule_fired=fired,
    )
