"""
Symmetric, debiased pairwise comparison.

Runs the same comparison twice with the answers' positions swapped. If the
two trials disagree on the winner the result is a tie (position bias). For
synthesis tasks the verbosity correction then decides the winner; for every
other category trial 1's winner stands.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from judge_consensus.comparison.rubrics import get_rubric
from judge_consensus.comparison.verbosity import (
    LENGTH_RATIO_LIMIT,
    SCORE_RATIO_LIMIT,
    assess_verbosity,
)
from judge_consensus.data.schemas import (
    ComparisonResult,
    ComparisonSample,
    TaskCategory,
    Winner,
)
from judge_consensus.errors import JudgeConsensusError
from judge_consensus.judges.invoker import JudgeInvoker
from judge_consensus.judges.protocols import JudgeConfig, JudgeResponse
from judge_consensus.observability import EvaluationObserver, LoggingObserver
from judge_consensus.parsing import PairwiseJudgment, ParseFailure, parse_judge_json

logger = logging.getLogger(__name__)

COMPARISON_PROMPT = """You are an expert research evaluator comparing two responses to the same query.

**Query:** {query}

{reference_section}{rubric}

---

**Response 1:**
{response_1}

---

**Response 2:**
{response_2}

---

## Instructions

Work in this order and do not assign scores before finishing steps 1 and 2:
1. List the key claims each response makes.
2. Evaluate each response against the rubric, referring to its claims.
3. Score each response from 1 to 5 and declare the winner.

Judge content only. The order in which the responses appear is arbitrary.

## Output Format

Return ONLY valid JSON:
{{
  "response_1_claims": ["<claim>", "..."],
  "response_2_claims": ["<claim>", "..."],
  "response_1_evaluation": "<evaluation against the rubric>",
  "response_2_evaluation": "<evaluation against the rubric>",
  "winner": "1" | "2" | "tie",
  "response_1_score": <1-5>,
  "response_2_score": <1-5>,
  "reasoning": "<brief comparison>"
}}"""


class ComparisonError(JudgeConsensusError):
    """A trial could not be completed; the comparison collapses to a tie."""


def round_half_up(value: float, digits: int = 1) -> float:
    """Round halves away from zero for non-negative scores (3.25 -> 3.3)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


@dataclass
class TrialResult:
    """One trial's verdict mapped back onto system/baseline."""

    trial: int
    system_first: bool
    winner: Winner
    system_score: float
    baseline_score: float
    reasoning: str


class PairwiseComparator:
    """
    Pairwise judge with position-swap and verbosity corrections.

    Example:
        comparator = PairwiseComparator(JudgeInvoker(), judge_config)
        result = comparator.compare(query, system_answer, baseline_answer, TaskCategory.SYNTHESIS)
    """

    def __init__(
        self,
        invoker: JudgeInvoker,
        judge_config: JudgeConfig,
        observer: EvaluationObserver | None = None,
        concurrent_trials: bool = True,
        length_ratio_limit: float = LENGTH_RATIO_LIMIT,
        score_ratio_limit: float = SCORE_RATIO_LIMIT,
    ):
        """
        Initialize the comparator.

        Args:
            invoker: Judge invoker
            judge_config: Judge used for both trials
            observer: Receives comparison events and fallbacks
            concurrent_trials: Issue both trials at once instead of one after the other
            length_ratio_limit: 25/5 rule length threshold
            score_ratio_limit: 25/5 rule score threshold
        """
        self.invoker = invoker
        self.judge_config = judge_config
        self.observer = observer or LoggingObserver()
        self.concurrent_trials = concurrent_trials
        self.length_ratio_limit = length_ratio_limit
        self.score_ratio_limit = score_ratio_limit

    def build_prompt(
        self,
        query: str,
        response_1: str,
        response_2: str,
        category: TaskCategory,
        reference_answer: str | None = None,
    ) -> str:
        """Build a trial prompt with the given answers in positions 1 and 2."""
        reference_section = ""
        if reference_answer:
            reference_section = f"**Reference Answer:**\n{reference_answer}\n\n"
        return COMPARISON_PROMPT.format(
            query=query,
            reference_section=reference_section,
            rubric=get_rubric(category).to_prompt_string(),
            response_1=response_1,
            response_2=response_2,
        )

    def compare(
        self,
        query: str,
        system_response: str,
        baseline_response: str,
        category: TaskCategory | str,
        reference_answer: str | None = None,
    ) -> ComparisonResult:
        """
        Compare a system answer against a baseline answer.

        Any failed call or unparseable trial collapses the comparison to a
        tie with both scores 0 and the error in ``reasoning``.

        Args:
            query: The original query
            system_response: Answer from the system under test
            baseline_response: Answer from the baseline
            category: Task category selecting the rubric
            reference_answer: Optional gold-standard answer

        Returns:
            ComparisonResult
        """
        category = TaskCategory(category)
        prompt_1 = self.build_prompt(query, system_response, baseline_response, category, reference_answer)
        prompt_2 = self.build_prompt(query, baseline_response, system_response, category, reference_answer)

        try:
            trial_1, trial_2 = self._run_trials(prompt_1, prompt_2)
        except ComparisonError as e:
            self.observer.record_fallback("pairwise", str(e), category=category.value)
            return ComparisonResult(
                winner=Winner.TIE,
                reasoning=f"Error: {e}",
                system_score=0.0,
                baseline_score=0.0,
            )

        system_score = (trial_1.system_score + trial_2.system_score) / 2
        baseline_score = (trial_1.baseline_score + trial_2.baseline_score) / 2

        if trial_1.winner != trial_2.winner:
            self.observer.record_event(
                "position_inconsistency",
                category=category.value,
                trial_1=trial_1.winner.value,
                trial_2=trial_2.winner.value,
            )
            return ComparisonResult(
                winner=Winner.TIE,
                reasoning=(
                    f"Position inconsistency: trial 1 chose {trial_1.winner.value}, "
                    f"trial 2 chose {trial_2.winner.value}; forced tie"
                ),
                system_score=round_half_up(system_score),
                baseline_score=round_half_up(baseline_score),
                position_consistent=False,
            )

        winner = trial_1.winner
        reasoning = trial_1.reasoning
        siu_applied = False

        if category is TaskCategory.SYNTHESIS:
            assessment = assess_verbosity(
                system_score,
                baseline_score,
                system_response,
                baseline_response,
                length_ratio_limit=self.length_ratio_limit,
                score_ratio_limit=self.score_ratio_limit,
            )
            winner = assessment.winner
            siu_applied = True
            reasoning = f"{reasoning} [{assessment.describe()}]".strip()

        result = ComparisonResult(
            winner=winner,
            reasoning=reasoning,
            system_score=round_half_up(system_score),
            baseline_score=round_half_up(baseline_score),
            position_consistent=True,
            siu_applied=siu_applied,
        )
        self.observer.record_event(
            "pairwise_comparison",
            category=category.value,
            winner=result.winner.value,
            siu_applied=siu_applied,
        )
        return result

    def compare_sample(self, sample: ComparisonSample) -> ComparisonResult:
        """Compare the pre-computed responses stored on a benchmark sample."""
        if not sample.responses.system or not sample.responses.baseline:
            raise ValueError(f"Sample {sample.id} is missing a system or baseline response")
        reference = sample.gold_standard.answer if sample.gold_standard else None
        return self.compare(
            sample.query,
            sample.responses.system,
            sample.responses.baseline,
            sample.category,
            reference_answer=reference,
        )

    def _run_trials(self, prompt_1: str, prompt_2: str) -> tuple[TrialResult, TrialResult]:
        if self.concurrent_trials:
            response_1, response_2 = self.invoker.invoke_many(
                [(prompt_1, self.judge_config), (prompt_2, self.judge_config)]
            )
        else:
            response_1 = self.invoker.invoke(prompt_1, self.judge_config)
            response_2 = self.invoker.invoke(prompt_2, self.judge_config)

        return (
            self._interpret(response_1, trial=1, system_first=True),
            self._interpret(response_2, trial=2, system_first=False),
        )

    def _interpret(self, response: JudgeResponse, trial: int, system_first: bool) -> TrialResult:
        """Map a positional verdict back onto system/baseline."""
        if not response.ok:
            raise ComparisonError(f"trial {trial} judge call failed: {response.error}")

        judgment = parse_judge_json(response.content, PairwiseJudgment)
        if isinstance(judgment, ParseFailure):
            raise ComparisonError(f"trial {trial} response unparseable: {judgment.reason}")

        if judgment.winner == "tie":
            winner = Winner.TIE
        elif (judgment.winner == "1") == system_first:
            winner = Winner.SYSTEM
        else:
            winner = Winner.BASELINE

        if system_first:
            system_score, baseline_score = judgment.response_1_score, judgment.response_2_score
        else:
            system_score, baseline_score = judgment.response_2_score, judgment.response_1_score

        logger.debug(
            "Trial %d (system %s): winner=%s system=%.1f baseline=%.1f",
            trial,
            "first" if system_first else "second",
            winner.value,
            system_score,
            baseline_score,
        )
        return TrialResult(
            trial=trial,
            system_first=system_first,
            winner=winner,
            system_score=system_score,
            baseline_score=baseline_score,
            reasoning=judgment.reasoning,
        )
