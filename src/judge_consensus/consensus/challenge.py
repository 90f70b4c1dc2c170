"""Adversarial challenge of a synthesized answer."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from judge_consensus.consensus.fallbacks import DEFAULT_RULES, FallbackRule, run_fallback_chain
from judge_consensus.data.schemas import ChallengeCritique, ChallengeResult
from judge_consensus.judges.invoker import JudgeInvoker
from judge_consensus.judges.protocols import JudgeConfig
from judge_consensus.observability import EvaluationObserver, LoggingObserver
from judge_consensus.parsing import ChallengeJudgment, ParseFailure, parse_judge_json

logger = logging.getLogger(__name__)

UNSPECIFIED_FAILURE = "Reviewer failed the synthesis without listing specific critiques"


def _numbered(title: str, items: Sequence[str] | None) -> str:
    if not items:
        return ""
    lines = [f"{title}:"]
    lines.extend(f"{i}. {item}" for i, item in enumerate(items, 1))
    return "\n".join(lines) + "\n\n"


def build_challenge_prompt(
    query: str,
    synthesis: str,
    constraints: Sequence[str] | None = None,
    sub_questions: Sequence[str] | None = None,
    context: str | None = None,
) -> str:
    """Build the prompt that instructs a judge to attack a synthesis."""
    context_section = f"CONTEXT:\n{context}\n\n" if context else ""
    return f"""You are a CRITICAL REVIEWER auditing a research synthesis against its original request.

ORIGINAL QUERY:
{query}

{context_section}{_numbered("CONSTRAINTS", constraints)}{_numbered("SUB-QUESTIONS", sub_questions)}---

SYNTHESIS TO CHALLENGE:
{synthesis}

---

Look specifically for:
1. Questions or sub-questions that were not answered, or answered poorly
2. Stated constraints that were ignored
3. Claims made without supporting evidence
4. Missing actionable detail: no clear recommendation or conclusion
5. Contradictions between sections

Use section "overview" for issues with the whole answer, "global" for
cross-cutting issues, and "q1", "q2", ... for a specific sub-question.

RESPONSE FORMAT (JSON ONLY):

If there are no significant gaps:
{{"pass": true, "critiques": []}}

If there are gaps:
{{"pass": false, "critiques": [{{"section": "q1", "issue": "Constraint X was ignored"}}]}}

Return ONLY valid JSON. No other text.""".strip()


class ChallengeGenerator:
    """Asks one judge to find gaps in a synthesis."""

    def __init__(
        self,
        invoker: JudgeInvoker,
        judge_config: JudgeConfig,
        observer: EvaluationObserver | None = None,
        fallback_rules: Sequence[FallbackRule] = DEFAULT_RULES,
    ):
        self.invoker = invoker
        self.judge_config = judge_config
        self.observer = observer or LoggingObserver()
        self.fallback_rules = tuple(fallback_rules)

    def challenge(
        self,
        query: str,
        synthesis: str,
        constraints: Sequence[str] | None = None,
        sub_questions: Sequence[str] | None = None,
        context: str | None = None,
    ) -> ChallengeResult:
        """
        Attack a synthesis and return the critique.

        Args:
            query: Original user query
            synthesis: Answer under review
            constraints: Stated constraints the answer must respect
            sub_questions: Sub-questions the answer must cover
            context: Optional extra context for the reviewer

        Returns:
            ChallengeResult; ``has_significant_gaps`` is True iff critiques exist
        """
        logger.info("[Challenge] Attacking synthesis against original input...")
        prompt = build_challenge_prompt(query, synthesis, constraints, sub_questions, context)
        response = self.invoker.invoke(prompt, self.judge_config)
        if not response.ok:
            self.observer.record_fallback(
                "challenge", f"judge call failed: {response.error}", model=response.model
            )
        return self.parse(response.content)

    def parse(self, text: str) -> ChallengeResult:
        """Parse a challenge response: JSON first, then the heuristic chain."""
        parsed = parse_judge_json(text, ChallengeJudgment)

        if not isinstance(parsed, ParseFailure):
            critiques = list(parsed.critiques)
            if parsed.passed and critiques:
                logger.debug("Challenge passed; ignoring %d informational critiques", len(critiques))
                critiques = []
            elif not parsed.passed and not critiques:
                critiques = [ChallengeCritique(section="overview", issue=UNSPECIFIED_FAILURE)]
            result = ChallengeResult(critiques=critiques, raw_response=text, parse_method="json")
        else:
            match = run_fallback_chain(text, self.fallback_rules)
            self.observer.record_fallback(
                "challenge",
                f"JSON parse failed ({parsed.reason}); used {match.method}",
                critiques=len(match.critiques),
            )
            result = ChallengeResult(
                critiques=match.critiques, raw_response=text, parse_method=match.method
            )

        self.observer.record_event(
            "challenge",
            method=result.parse_method,
            critiques=len(result.critiques),
            has_gaps=result.has_significant_gaps,
        )
        return result
